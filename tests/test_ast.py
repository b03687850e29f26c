import json

import hypothesis.strategies as st
from hypothesis import given

from monk.monk_ast import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
)
from monk.monk_lexer import Token


def ident(name: str, line: int = 0, col: int = 0) -> Identifier:
    return Identifier(Token("IDENT", name, line, col), name)


def num(n: int) -> IntegerLiteral:
    return IntegerLiteral(Token("INT", str(n)), n)


def infix(left: object, op: str, right: object) -> InfixExpression:
    return InfixExpression(Token(op, op), left, op, right)  # type: ignore[arg-type]


def test_let_statement_str() -> None:
    program = Program(
        [LetStatement(Token("LET", "let"), ident("myVar"), ident("anotherVar"))]
    )
    assert str(program) == "let myVar = anotherVar;"


def test_return_statement_str() -> None:
    stmt = ReturnStatement(Token("RETURN", "return"), num(5))
    assert str(stmt) == "return 5;"


def test_expression_str_is_fully_parenthesised() -> None:
    expr = infix(ident("a"), "+", infix(ident("b"), "*", ident("c")))
    assert str(expr) == "(a + (b * c))"
    assert str(PrefixExpression(Token("-", "-"), "-", ident("x"))) == "(-x)"


def test_compound_expression_str() -> None:
    body = BlockStatement(
        Token("{", "{"),
        [ExpressionStatement(Token("IDENT", "x"), infix(ident("x"), "+", ident("y")))],
    )
    fn = FunctionLiteral(Token("FUNCTION", "fn"), [ident("x"), ident("y")], body)
    assert str(fn) == "fn(x, y) { (x + y) }"

    call = CallExpression(Token("(", "("), ident("add"), [num(1), num(2)])
    assert str(call) == "add(1, 2)"

    arr = ArrayLiteral(Token("[", "["), [num(1), StringLiteral(Token("STRING", "a"), "a")])
    assert str(arr) == '[1, "a"]'
    assert str(IndexExpression(Token("[", "["), arr, num(0))) == '([1, "a"][0])'

    empty = BlockStatement(Token("{", "{"))
    cond = IfExpression(Token("IF", "if"), Boolean(Token("TRUE", "true"), True), empty)
    assert str(cond) == "if true { }"
    cond.alternative = body
    assert str(cond) == "if true { } else { (x + y) }"


def test_equality_ignores_token_positions() -> None:
    assert ident("x", 1, 1) == ident("x", 3, 7)
    assert ident("x") != ident("y")


def test_equality_requires_same_class() -> None:
    assert Identifier(Token("IDENT", "x"), "x") != StringLiteral(Token("STRING", "x"), "x")
    assert ident("x") != "x"


def test_nested_equality() -> None:
    a = infix(ident("a"), "-", infix(ident("b"), "-", ident("c")))
    b = infix(ident("a"), "-", infix(ident("b"), "-", ident("c")))
    c = infix(infix(ident("a"), "-", ident("b")), "-", ident("c"))
    assert a == b
    assert a != c


def test_repr_lists_fields() -> None:
    assert repr(ident("x")) == "Identifier(value='x')"
    assert repr(Program()) == "Program(statements=[])"


def test_to_dict_basic() -> None:
    stmt = LetStatement(Token("LET", "let"), ident("x"), num(5))
    d = stmt.to_dict()
    assert d == {
        "kind": "LetStatement",
        "name": {"kind": "Identifier", "value": "x"},
        "value": {"kind": "IntegerLiteral", "value": 5},
    }


def test_to_dict_optional_and_lists() -> None:
    block = BlockStatement(Token("{", "{"))
    d = IfExpression(Token("IF", "if"), ident("ok"), block).to_dict()
    assert d["alternative"] is None
    assert d["consequence"] == {"kind": "BlockStatement", "statements": []}


def test_program_to_dict_is_json_serialisable() -> None:
    program = Program(
        [
            ExpressionStatement(
                Token("IDENT", "f"),
                CallExpression(Token("(", "("), ident("f"), [num(1), ident("y")]),
            )
        ]
    )
    loaded = json.loads(json.dumps(program.to_dict()))
    assert loaded["kind"] == "Program"
    call = loaded["statements"][0]["expression"]
    assert call["function"] == {"kind": "Identifier", "value": "f"}
    assert [a["kind"] for a in call["arguments"]] == ["IntegerLiteral", "Identifier"]


def test_token_literal() -> None:
    stmt = LetStatement(Token("LET", "let"), ident("x"), num(5))
    assert stmt.token_literal() == "let"
    assert Program([stmt]).token_literal() == "let"
    assert Program().token_literal() == ""


@given(st.text(min_size=1))  # type: ignore[misc]
def test_identifier_eq_same_value(name: str) -> None:
    assert ident(name) == ident(name)


@given(st.integers(), st.integers())  # type: ignore[misc]
def test_integer_literal_eq_matches_value(a: int, b: int) -> None:
    assert (num(a) == num(b)) == (a == b)


def left_chain(terms: int) -> InfixExpression:
    expr: object = num(1)
    for _ in range(terms - 1):
        expr = infix(expr, "+", num(1))
    return expr  # type: ignore[return-value]


def test_deep_chain_renders_compares_and_serialises() -> None:
    terms = 5000
    a = left_chain(terms)
    b = left_chain(terms)
    assert str(a) == "(" * (terms - 1) + "1" + " + 1)" * (terms - 1)
    assert a == b
    assert a != left_chain(terms - 1)
    d = a.to_dict()
    for _ in range(terms - 1):
        assert d["kind"] == "InfixExpression"
        assert d["right"] == {"kind": "IntegerLiteral", "value": 1}
        d = d["left"]
    assert d == {"kind": "IntegerLiteral", "value": 1}
