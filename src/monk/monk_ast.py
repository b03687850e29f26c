"""
Defines the abstract syntax tree (AST) node classes for the monk programming language.

Classes:
    Node:
        Base class for every node. Keeps the token the node was built from and
        provides structural equality, `repr`, canonical rendering and `to_dict`.

    Statement / Expression:
        Capability bases. Every concrete node derives from exactly one of them.

    Program:
        Root container holding the ordered top-level statements.

    ASTDict:
        TypedDict shape produced by `to_dict()`, suitable for JSON output or debugging.

Each concrete node declares its child fields in `fields`. Equality, `repr` and
`to_dict` are driven by that tuple, so two nodes compare equal when they are of the
same class and their fields are equal; token positions are not compared.

Rendering:
    `str(node)` returns a canonical source-like form in which every prefix and infix
    expression is fully parenthesised, e.g. `a + b * c` renders as `(a + (b * c))`.
    Each node lists its output as `parts()`, a mix of text and child nodes, which
    `__str__` flattens with an explicit stack.

Rendering, equality and `to_dict` never recurse on the Python stack, so a long
operator chain such as `1 + 1 + ... + 1` (which nests as deep as it is long) is
handled like any other tree.

Example:
    node = InfixExpression(tok, Identifier(a_tok, "a"), "+", Identifier(b_tok, "b"))
    str(node)  # "(a + b)"
"""

from collections.abc import Sequence
from typing import Any, TypedDict, Union

from monk.monk_lexer import Token


class ASTDict(TypedDict, total=False):
    """
    Serialized form of a node.

    `kind` is always present and names the node class. The remaining keys are the
    node's fields; child nodes are nested ASTDicts, child lists are lists of them.
    """

    kind: str
    name: "ASTDict"
    value: Any
    return_value: "ASTDict"
    expression: "ASTDict"
    statements: list["ASTDict"]
    operator: str
    left: "ASTDict"
    right: "ASTDict"
    condition: "ASTDict"
    consequence: "ASTDict"
    alternative: "ASTDict | None"
    parameters: list["ASTDict"]
    body: "ASTDict"
    function: "ASTDict"
    arguments: list["ASTDict"]
    elements: list["ASTDict"]
    index: "ASTDict"


Part = Union[str, "Node"]


def _joined(items: Sequence["Node"], sep: str) -> list[Part]:
    out: list[Part] = []
    for i, item in enumerate(items):
        if i:
            out.append(sep)
        out.append(item)
    return out


def _plain(value: Any, pending: "list[tuple[Node, dict[str, Any]]]") -> Any:
    # child nodes get an empty dict now and are filled in when popped off `pending`
    if isinstance(value, Node):
        slot: dict[str, Any] = {}
        pending.append((value, slot))
        return slot
    if isinstance(value, list):
        return [_plain(v, pending) for v in value]
    return value


class Node:
    """
    Base class for AST nodes.

    Args:
        token (Token): The token the node was parsed from.

    Attributes:
        token (Token): Source token, used for `token_literal()` and debugging only.
        fields (tuple[str, ...]): Names of the attributes that make up the node's
            structure. Subclasses override it.
    """

    fields: tuple[str, ...] = ()

    def __init__(self, token: Token) -> None:
        self.token = token

    def token_literal(self) -> str:
        return self.token.value

    def parts(self) -> list[Part]:
        """Text pieces and child nodes that make up the canonical rendering."""
        return [self.token.value]

    def __str__(self) -> str:
        out: list[str] = []
        stack: list[Part] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, Node):
                stack.extend(reversed(item.parts()))
            else:
                out.append(item)
        return "".join(out)

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.fields)
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        stack: list[tuple[Any, Any]] = [(self, other)]
        while stack:
            a, b = stack.pop()
            if isinstance(a, Node) or isinstance(b, Node):
                if type(a) is not type(b):
                    return False
                stack.extend((getattr(a, n), getattr(b, n)) for n in a.fields)
            elif isinstance(a, list) and isinstance(b, list):
                if len(a) != len(b):
                    return False
                stack.extend(zip(a, b))
            elif a != b:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> ASTDict:
        root: dict[str, Any] = {}
        pending: list[tuple[Node, dict[str, Any]]] = [(self, root)]
        while pending:
            node, result = pending.pop()
            result["kind"] = type(node).__name__
            for name in node.fields:
                result[name] = _plain(getattr(node, name), pending)
        return root  # type: ignore[return-value]


class Statement(Node):
    """A node that appears in statement position."""


class Expression(Node):
    """A node that produces a value."""


class Program:
    """Root of a parsed source: the ordered top-level statements."""

    def __init__(self, statements: list[Statement] | None = None) -> None:
        self.statements: list[Statement] = statements or []

    def token_literal(self) -> str:
        return self.statements[0].token_literal() if self.statements else ""

    def __str__(self) -> str:
        return "\n".join(str(s) for s in self.statements)

    def __repr__(self) -> str:
        return f"Program(statements={self.statements!r})"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Program) and self.statements == other.statements

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> ASTDict:
        return {"kind": "Program", "statements": [s.to_dict() for s in self.statements]}


# Expressions


class Identifier(Expression):
    fields = ("value",)

    def __init__(self, token: Token, value: str) -> None:
        super().__init__(token)
        self.value = value

    def parts(self) -> list[Part]:
        return [self.value]


class IntegerLiteral(Expression):
    fields = ("value",)

    def __init__(self, token: Token, value: int) -> None:
        super().__init__(token)
        self.value = value


class StringLiteral(Expression):
    fields = ("value",)

    def __init__(self, token: Token, value: str) -> None:
        super().__init__(token)
        self.value = value

    def parts(self) -> list[Part]:
        return [f'"{self.value}"']


class Boolean(Expression):
    fields = ("value",)

    def __init__(self, token: Token, value: bool) -> None:
        super().__init__(token)
        self.value = value

    def parts(self) -> list[Part]:
        return ["true" if self.value else "false"]


class PrefixExpression(Expression):
    """Unary operator application such as `-x` or `!ok`."""

    fields = ("operator", "right")

    def __init__(self, token: Token, operator: str, right: Expression) -> None:
        super().__init__(token)
        self.operator = operator
        self.right = right

    def parts(self) -> list[Part]:
        return ["(" + self.operator, self.right, ")"]


class InfixExpression(Expression):
    """Binary operator application; `token` is the operator token."""

    fields = ("left", "operator", "right")

    def __init__(
        self, token: Token, left: Expression, operator: str, right: Expression
    ) -> None:
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    def parts(self) -> list[Part]:
        return ["(", self.left, f" {self.operator} ", self.right, ")"]


class IfExpression(Expression):
    """
    Conditional expression.

    Attributes:
        condition (Expression): Tested value.
        consequence (BlockStatement): Block evaluated when the condition holds.
        alternative (BlockStatement | None): `else` block; None when the source has no `else`.
    """

    fields = ("condition", "consequence", "alternative")

    def __init__(
        self,
        token: Token,
        condition: Expression,
        consequence: "BlockStatement",
        alternative: "BlockStatement | None" = None,
    ) -> None:
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def parts(self) -> list[Part]:
        out: list[Part] = ["if ", self.condition, " ", self.consequence]
        if self.alternative is not None:
            out += [" else ", self.alternative]
        return out


class FunctionLiteral(Expression):
    fields = ("parameters", "body")

    def __init__(
        self, token: Token, parameters: list[Identifier], body: "BlockStatement"
    ) -> None:
        super().__init__(token)
        self.parameters = parameters
        self.body = body

    def parts(self) -> list[Part]:
        return [
            self.token.value + "(",
            *_joined(self.parameters, ", "),
            ") ",
            self.body,
        ]


class CallExpression(Expression):
    """`function(arguments...)`; `token` is the opening parenthesis."""

    fields = ("function", "arguments")

    def __init__(
        self, token: Token, function: Expression, arguments: list[Expression]
    ) -> None:
        super().__init__(token)
        self.function = function
        self.arguments = arguments

    def parts(self) -> list[Part]:
        return [self.function, "(", *_joined(self.arguments, ", "), ")"]


class ArrayLiteral(Expression):
    fields = ("elements",)

    def __init__(self, token: Token, elements: list[Expression]) -> None:
        super().__init__(token)
        self.elements = elements

    def parts(self) -> list[Part]:
        return ["[", *_joined(self.elements, ", "), "]"]


class IndexExpression(Expression):
    fields = ("left", "index")

    def __init__(self, token: Token, left: Expression, index: Expression) -> None:
        super().__init__(token)
        self.left = left
        self.index = index

    def parts(self) -> list[Part]:
        return ["(", self.left, "[", self.index, "])"]


# Statements


class LetStatement(Statement):
    """`let <name> = <value>;`"""

    fields = ("name", "value")

    def __init__(self, token: Token, name: Identifier, value: Expression) -> None:
        super().__init__(token)
        self.name = name
        self.value = value

    def parts(self) -> list[Part]:
        return [self.token.value + " ", self.name, " = ", self.value, ";"]


class ReturnStatement(Statement):
    fields = ("return_value",)

    def __init__(self, token: Token, return_value: Expression) -> None:
        super().__init__(token)
        self.return_value = return_value

    def parts(self) -> list[Part]:
        return [self.token.value + " ", self.return_value, ";"]


class ExpressionStatement(Statement):
    """A bare expression used as a statement; `token` is its first token."""

    fields = ("expression",)

    def __init__(self, token: Token, expression: Expression) -> None:
        super().__init__(token)
        self.expression = expression

    def parts(self) -> list[Part]:
        return [self.expression]


class BlockStatement(Statement):
    """Brace-delimited statement sequence; may be empty."""

    fields = ("statements",)

    def __init__(self, token: Token, statements: list[Statement] | None = None) -> None:
        super().__init__(token)
        self.statements: list[Statement] = statements or []

    def parts(self) -> list[Part]:
        if not self.statements:
            return ["{ }"]
        return ["{ ", *_joined(self.statements, " "), " }"]


__all__ = [
    "ASTDict",
    "ArrayLiteral",
    "BlockStatement",
    "Boolean",
    "CallExpression",
    "Expression",
    "ExpressionStatement",
    "FunctionLiteral",
    "Identifier",
    "IfExpression",
    "IndexExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "Node",
    "PrefixExpression",
    "Program",
    "ReturnStatement",
    "Statement",
    "StringLiteral",
]
