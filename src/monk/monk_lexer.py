"""
Lexical analyzer for the monk programming language.

This module provides the token sources consumed by the parser:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.
    TokenBuffer: Replays an already-built list of tokens through the same interface.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Longest-match recognition of operators (`==` before `=`, `!=` before `!`)
    - Recognizes identifiers, keywords, integers and double-quoted strings

Both token sources satisfy the parser's pull contract: `next_token()` returns one
token per call and keeps returning an EOF token once the input is exhausted. Neither
raises on malformed input; unknown characters and unterminated strings come back as
ILLEGAL tokens and are reported by the parser.

Example:
    >>> lexer = Lexer(CharacterStream("let x = 5;"))
    >>> lexer.next_token()
    Token(LET, let)
"""

from collections.abc import Iterable, Iterator
from typing import Any

from monk.monk_tokens import EOF, ILLEGAL, INT, STRING, lookup_ident, token_hashmap


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The token kind, one of the constants in `monk.monk_tokens`.
        value (str): The literal text slice the token was scanned from.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the monk language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or delimiter at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest operator is two characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_string(self, line: int, col: int) -> Token:
        """Reads a double-quoted string; the opening quote is the current character.

        Escape sequences are kept verbatim in the token value so `\\"` does not end
        the string. A string that runs to end of input becomes an ILLEGAL token.
        """
        self.advance()
        val = ""
        while not self.stream.end_of_file():
            if self.peek() == "\\":
                val += self.advance()
                if not self.stream.end_of_file():
                    val += self.advance()
            elif self.peek() == '"':
                self.advance()
                return Token(STRING, val, line, col)
            else:
                val += self.advance()
        return Token(ILLEGAL, '"' + val, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Once the input is exhausted every further call returns an EOF token.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(EOF, "EOF", line, col)

        ch = self.peek()

        # 1. Identifier or keyword
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            return Token(lookup_ident(ident), ident, line, col)

        # 2. Integer
        if ch.isdigit():
            num = ""
            while not self.stream.end_of_file() and self.peek().isdigit():
                num += self.advance()
            return Token(INT, num, line, col)

        # 3. String
        if ch == '"':
            return self.read_string(line, col)

        # 4. Operator or delimiter
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character
        return Token(ILLEGAL, self.advance(), line, col)

    def __iter__(self) -> Iterator[Token]:
        """Yields tokens up to and including the first EOF token."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == EOF:
                return


class TokenBuffer:
    """Serves a pre-built token sequence through the `next_token()` contract.

    Useful when tokens come from somewhere other than `Lexer` (tests, tools that
    rewrite token streams). A missing trailing EOF is supplied automatically.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens: list[Token] = list(tokens)
        self.position: int = 0

    def next_token(self) -> Token:
        if self.position < len(self.tokens):
            tok = self.tokens[self.position]
            self.position += 1
            return tok
        last = self.tokens[-1] if self.tokens else None
        if last is not None:
            return Token(EOF, "EOF", last.line, last.col)
        return Token(EOF, "EOF")


def tokenize(source: str) -> list[Token]:
    """Scans `source` into a list of tokens ending with a single EOF token."""
    return list(Lexer(CharacterStream(source)))


__all__ = ["CharacterStream", "Lexer", "Token", "TokenBuffer", "token_hashmap", "tokenize"]
