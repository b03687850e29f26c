"""
monk Language Parser

Parses a stream of monk tokens into an abstract syntax tree (`Program`).

The parser is a Pratt (operator-precedence) recursive-descent parser. Each token kind
that can start an expression maps to a *prefix* rule, and each token kind that can
continue one maps to an *infix* rule plus a binding precedence. `parse_expression`
repeatedly consults those two tables, so adding an operator means registering a rule,
not editing the algorithm.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * bare expression statements
    * `{ ... }` blocks (inside `if` and `fn`)

- Expressions:
    * literals: identifiers, integers, strings, `true`/`false`, arrays `[a, b]`
    * prefix `!x`, `-x`
    * infix `+ - * / == != < >` with conventional precedence, left-associative
    * grouping `( ... )`
    * `if (cond) { ... } else { ... }`
    * function literals `fn(a, b) { ... }`
    * calls `f(a, b)` and indexing `xs[i]`

Parser Behavior
---------------
- Never raises on malformed input. Diagnostics are appended to `Parser.errors` in the
  order they occur, and callers check that list after `parse_program()` returns.
- A rule that cannot build its node returns a `ParseFailure` marker instead of a node.
  Enclosing rules short-circuit on a failed child, so a successfully built node never
  contains a missing operand.
- A failed statement is dropped and the parser skips to the next statement boundary,
  so one malformed construct does not stop the rest of the program from parsing.
- Nesting deeper than `max_depth` is reported as a diagnostic instead of exhausting
  the interpreter stack.

Entry Points
------------
- `Parser(source).parse_program()`: parse a token source into a `Program`.
- `parse(source)`: lex and parse a string, returning `(program, errors)`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from enum import IntEnum
from types import MappingProxyType
from typing import Protocol

from monk.monk_ast import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
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
    Statement,
    StringLiteral,
)
from monk.monk_lexer import CharacterStream, Lexer, Token, TokenBuffer
from monk.monk_tokens import (
    ASSIGN,
    ASTERISK,
    BANG,
    COMMA,
    ELSE,
    EOF,
    EQ,
    FALSE,
    FUNCTION,
    GT,
    IDENT,
    IF,
    INT,
    LBRACE,
    LBRACKET,
    LET,
    LPAREN,
    LT,
    MINUS,
    NOT_EQ,
    PLUS,
    RBRACE,
    RBRACKET,
    RETURN,
    RPAREN,
    SEMICOLON,
    SLASH,
    STRING,
    TRUE,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100
INT64_MAX = 2**63 - 1


class Precedence(IntEnum):
    """Binding power of operators, lowest to highest. Used only for comparison."""

    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -x or !x
    CALL = 7  # f(x)
    INDEX = 8  # xs[i]


PRECEDENCES: Mapping[str, Precedence] = MappingProxyType(
    {
        EQ: Precedence.EQUALS,
        NOT_EQ: Precedence.EQUALS,
        LT: Precedence.LESSGREATER,
        GT: Precedence.LESSGREATER,
        PLUS: Precedence.SUM,
        MINUS: Precedence.SUM,
        SLASH: Precedence.PRODUCT,
        ASTERISK: Precedence.PRODUCT,
        LPAREN: Precedence.CALL,
        LBRACKET: Precedence.INDEX,
    }
)


class TokenSource(Protocol):  # pragma: no cover
    """Anything that hands out one token per call and repeats EOF once exhausted."""

    def next_token(self) -> Token: ...


class ParserError(Exception):
    """Raised by `parse(..., strict=True)` when the parse produced diagnostics.

    Attributes:
        errors (list[str]): The diagnostics, in the order they were recorded.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ParseFailure:
    """Result of a parse rule that could not build its node.

    A failure is falsy, so `if not result` reads naturally at call sites; rules use
    `isinstance(result, ParseFailure)` where the type needs narrowing.

    Attributes:
        message (str): The diagnostic recorded for this failure.
        token (Token): The token the parser was looking at when it failed.
    """

    def __init__(self, message: str, token: Token) -> None:
        self.message = message
        self.token = token

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"ParseFailure({self.message!r}, {self.token!r})"


PrefixRule = Callable[[], "Expression | ParseFailure"]
InfixRule = Callable[[Expression], "Expression | ParseFailure"]


class Parser:
    """
    monk Parser Class

    Pulls tokens from a token source through a two-token window and builds a
    `Program`. One instance parses one token stream; instances share no state.

    Attributes
    ----------
    source : TokenSource
        Where tokens come from. A plain list of tokens is wrapped in a `TokenBuffer`.
    current : Token
        The token under examination.
    peek : Token
        The token after `current`.
    errors : list[str]
        Diagnostics recorded so far, in insertion order.
    max_depth : int
        Deepest expression nesting accepted before reporting an error.
    prefix_rules : dict[str, PrefixRule]
        Token kind -> rule that parses an expression starting with that token.
    infix_rules : dict[str, InfixRule]
        Token kind -> rule that continues an expression whose left side is parsed.
    precedences : dict[str, Precedence]
        Token kind -> binding precedence of the infix rule for that kind.

    Methods
    -------
    parse_program() -> Program
        Parse statements until EOF.
    parse_statement() -> Statement | ParseFailure
        Parse one `let`, `return` or expression statement.
    parse_expression(precedence) -> Expression | ParseFailure
        Parse an expression whose operators bind tighter than `precedence`.
    register_prefix(kind, rule) / register_infix(kind, rule, precedence)
        Extend the dispatch tables.
    """

    def __init__(
        self,
        source: TokenSource | Iterable[Token],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if not hasattr(source, "next_token"):
            source = TokenBuffer(source)  # type: ignore[arg-type]
        self.source: TokenSource = source  # type: ignore[assignment]
        self.errors: list[str] = []
        self.max_depth: int = max_depth
        self.depth: int = 0
        self.last_failure: ParseFailure | None = None

        self.current: Token = Token(EOF, "EOF")
        self.peek: Token = Token(EOF, "EOF")

        self.prefix_rules: dict[str, PrefixRule] = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            STRING: self.parse_string_literal,
            BANG: self.parse_prefix_expression,
            MINUS: self.parse_prefix_expression,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            LPAREN: self.parse_grouped_expression,
            IF: self.parse_if_expression,
            FUNCTION: self.parse_function_literal,
            LBRACKET: self.parse_array_literal,
        }

        self.infix_rules: dict[str, InfixRule] = {
            kind: self.parse_infix_expression
            for kind in (PLUS, MINUS, SLASH, ASTERISK, EQ, NOT_EQ, LT, GT)
        }
        self.infix_rules[LPAREN] = self.parse_call_expression
        self.infix_rules[LBRACKET] = self.parse_index_expression
        self.precedences: dict[str, Precedence] = dict(PRECEDENCES)

        # Prime current and peek
        self.advance()
        self.advance()

    # Dispatch tables

    def register_prefix(self, kind: str, rule: PrefixRule) -> None:
        self.prefix_rules[kind] = rule

    def register_infix(self, kind: str, rule: InfixRule, precedence: Precedence) -> None:
        self.infix_rules[kind] = rule
        self.precedences[kind] = precedence

    def precedence_of(self, kind: str) -> Precedence:
        return self.precedences.get(kind, Precedence.LOWEST)

    def peek_precedence(self) -> Precedence:
        return self.precedence_of(self.peek.type)

    def current_precedence(self) -> Precedence:
        return self.precedence_of(self.current.type)

    # Cursor

    def advance(self) -> Token:
        self.current = self.peek
        self.peek = self.source.next_token()
        return self.current

    def current_is(self, kind: str) -> bool:
        return self.current.type == kind

    def peek_is(self, kind: str) -> bool:
        return self.peek.type == kind

    def expect_peek(self, kind: str) -> bool:
        """Advance onto the next token if it is `kind`; otherwise record an error and stay put."""
        if self.peek_is(kind):
            self.advance()
            return True
        self.error(f"expected next token to be {kind}, got {self.peek.type} instead", self.peek)
        return False

    # Error log

    def error(self, message: str, token: Token) -> ParseFailure:
        self.errors.append(message)
        logger.debug("parse error at %r: %s", token, message)
        self.last_failure = ParseFailure(message, token)
        return self.last_failure

    def failure(self) -> ParseFailure:
        """The failure recorded by the most recent unsuccessful `expect_peek`."""
        assert self.last_failure is not None  # for mypy
        return self.last_failure

    def synchronize(self) -> None:
        """Skip the rest of a failed statement.

        Braces opened while skipping are skipped through to their matching `}`.
        Outside of them, stops on a `;`, or just before a closing `}` or EOF so the
        enclosing loop's own advance lands on it.
        """
        logger.debug("skipping to statement boundary from %r", self.current)
        depth = 0
        while not self.current_is(EOF):
            if self.current_is(LBRACE):
                depth += 1
            elif self.current_is(RBRACE) and depth:
                depth -= 1
            if self.peek_is(EOF):
                break
            if not depth and (self.current_is(SEMICOLON) or self.peek_is(RBRACE)):
                break
            self.advance()

    # Statements

    def parse_program(self) -> Program:
        """Parse statements until EOF and return the resulting `Program`."""
        program = Program()
        while not self.current_is(EOF):
            statement = self.parse_statement()
            if isinstance(statement, ParseFailure):
                self.synchronize()
            else:
                program.statements.append(statement)
            self.advance()
        logger.debug(
            "parsed %d statement(s) with %d error(s)",
            len(program.statements),
            len(self.errors),
        )
        return program

    def parse_statement(self) -> Statement | ParseFailure:
        if self.current_is(LET):
            return self.parse_let_statement()
        if self.current_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement | ParseFailure:
        """Parse `let <ident> = <expr>` with an optional trailing `;`."""
        token = self.current
        if not self.expect_peek(IDENT):
            return self.failure()
        name = Identifier(self.current, self.current.value)

        if not self.expect_peek(ASSIGN):
            return self.failure()
        self.advance()

        value = self.parse_expression(Precedence.LOWEST)
        if isinstance(value, ParseFailure):
            return value

        if self.peek_is(SEMICOLON):
            self.advance()
        return LetStatement(token, name, value)

    def parse_return_statement(self) -> ReturnStatement | ParseFailure:
        token = self.current
        self.advance()

        return_value = self.parse_expression(Precedence.LOWEST)
        if isinstance(return_value, ParseFailure):
            return return_value

        if self.peek_is(SEMICOLON):
            self.advance()
        return ReturnStatement(token, return_value)

    def parse_expression_statement(self) -> ExpressionStatement | ParseFailure:
        token = self.current
        expression = self.parse_expression(Precedence.LOWEST)
        if isinstance(expression, ParseFailure):
            return expression

        if self.peek_is(SEMICOLON):
            self.advance()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> BlockStatement:
        """Parse statements after `{` until `}` or EOF. Failed statements are skipped."""
        token = self.current
        statements: list[Statement] = []
        self.advance()

        while not self.current_is(RBRACE) and not self.current_is(EOF):
            statement = self.parse_statement()
            if isinstance(statement, ParseFailure):
                self.synchronize()
            else:
                statements.append(statement)
            self.advance()

        return BlockStatement(token, statements)

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Expression | ParseFailure:
        """Precedence climbing over the prefix/infix tables.

        Operators are consumed while the next one binds strictly tighter than
        `precedence`, which makes equal-precedence chains left-associative.
        """
        if self.depth >= self.max_depth:
            return self.error(
                f"maximum nesting depth of {self.max_depth} exceeded", self.current
            )
        self.depth += 1
        try:
            prefix = self.prefix_rules.get(self.current.type)
            if prefix is None:
                return self.error(
                    f"no prefix parse function for {self.current.type} found",
                    self.current,
                )

            left = prefix()
            while (
                not isinstance(left, ParseFailure)
                and not self.peek_is(SEMICOLON)
                and precedence < self.peek_precedence()
            ):
                infix = self.infix_rules.get(self.peek.type)
                if infix is None:
                    return left
                self.advance()
                left = infix(left)
            return left
        finally:
            self.depth -= 1

    def parse_identifier(self) -> Expression | ParseFailure:
        return Identifier(self.current, self.current.value)

    def parse_integer_literal(self) -> Expression | ParseFailure:
        literal = self.current.value
        if (
            not (literal.isascii() and literal.isdigit())
            or len(literal.lstrip("0")) > 19
            or int(literal) > INT64_MAX
        ):
            return self.error(f"could not parse {literal!r} as integer", self.current)
        return IntegerLiteral(self.current, int(literal))

    def parse_string_literal(self) -> Expression | ParseFailure:
        return StringLiteral(self.current, self.current.value)

    def parse_boolean(self) -> Expression | ParseFailure:
        return Boolean(self.current, self.current_is(TRUE))

    def parse_prefix_expression(self) -> Expression | ParseFailure:
        token = self.current
        self.advance()

        right = self.parse_expression(Precedence.PREFIX)
        if isinstance(right, ParseFailure):
            return right
        return PrefixExpression(token, token.value, right)

    def parse_infix_expression(self, left: Expression) -> Expression | ParseFailure:
        token = self.current
        precedence = self.current_precedence()
        self.advance()

        right = self.parse_expression(precedence)
        if isinstance(right, ParseFailure):
            return right
        return InfixExpression(token, left, token.value, right)

    def parse_grouped_expression(self) -> Expression | ParseFailure:
        self.advance()

        expression = self.parse_expression(Precedence.LOWEST)
        if isinstance(expression, ParseFailure):
            return expression
        if not self.expect_peek(RPAREN):
            return self.failure()
        return expression

    def parse_if_expression(self) -> Expression | ParseFailure:
        """Parse `if (<cond>) { ... }` with an optional `else { ... }`."""
        token = self.current
        if not self.expect_peek(LPAREN):
            return self.failure()
        self.advance()

        condition = self.parse_expression(Precedence.LOWEST)
        if isinstance(condition, ParseFailure):
            return condition
        if not self.expect_peek(RPAREN):
            return self.failure()
        if not self.expect_peek(LBRACE):
            return self.failure()
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_is(ELSE):
            self.advance()
            if not self.expect_peek(LBRACE):
                return self.failure()
            alternative = self.parse_block_statement()

        return IfExpression(token, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression | ParseFailure:
        token = self.current
        if not self.expect_peek(LPAREN):
            return self.failure()

        parameters = self.parse_function_parameters()
        if isinstance(parameters, ParseFailure):
            return parameters
        if not self.expect_peek(LBRACE):
            return self.failure()

        body = self.parse_block_statement()
        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> list[Identifier] | ParseFailure:
        """Parse `a, b, c)` after the opening parenthesis. Trailing commas are rejected."""
        identifiers: list[Identifier] = []
        if self.peek_is(RPAREN):
            self.advance()
            return identifiers

        if not self.expect_peek(IDENT):
            return self.failure()
        identifiers.append(Identifier(self.current, self.current.value))

        while self.peek_is(COMMA):
            self.advance()
            if not self.expect_peek(IDENT):
                return self.failure()
            identifiers.append(Identifier(self.current, self.current.value))

        if not self.expect_peek(RPAREN):
            return self.failure()
        return identifiers

    def parse_expression_list(self, end: str) -> list[Expression] | ParseFailure:
        """Parse comma-separated expressions up to the `end` delimiter kind."""
        items: list[Expression] = []
        if self.peek_is(end):
            self.advance()
            return items

        self.advance()
        item = self.parse_expression(Precedence.LOWEST)
        if isinstance(item, ParseFailure):
            return item
        items.append(item)

        while self.peek_is(COMMA):
            self.advance()
            self.advance()
            item = self.parse_expression(Precedence.LOWEST)
            if isinstance(item, ParseFailure):
                return item
            items.append(item)

        if not self.expect_peek(end):
            return self.failure()
        return items

    def parse_call_expression(self, function: Expression) -> Expression | ParseFailure:
        token = self.current
        arguments = self.parse_expression_list(RPAREN)
        if isinstance(arguments, ParseFailure):
            return arguments
        return CallExpression(token, function, arguments)

    def parse_array_literal(self) -> Expression | ParseFailure:
        token = self.current
        elements = self.parse_expression_list(RBRACKET)
        if isinstance(elements, ParseFailure):
            return elements
        return ArrayLiteral(token, elements)

    def parse_index_expression(self, left: Expression) -> Expression | ParseFailure:
        token = self.current
        self.advance()

        index = self.parse_expression(Precedence.LOWEST)
        if isinstance(index, ParseFailure):
            return index
        if not self.expect_peek(RBRACKET):
            return self.failure()
        return IndexExpression(token, left, index)


def parse(
    source: str, strict: bool = False, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[Program, list[str]]:
    """
    Lex and parse `source` in one call.

    Args:
        source (str): monk source text.
        strict (bool): Raise `ParserError` instead of returning diagnostics.
        max_depth (int): Nesting cap passed to the parser.

    Returns:
        tuple[Program, list[str]]: The program and the diagnostics (empty on success).

    Raises:
        ParserError: If `strict` is True and any diagnostic was recorded.
    """
    parser = Parser(Lexer(CharacterStream(source)), max_depth=max_depth)
    program = parser.parse_program()
    if strict and parser.errors:
        raise ParserError(
            f"{len(parser.errors)} parse error(s): {parser.errors[0]}", parser.errors
        )
    return program, parser.errors


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "PRECEDENCES",
    "ParseFailure",
    "Parser",
    "ParserError",
    "Precedence",
    "TokenSource",
    "parse",
]
