"""
Token-kind catalogue for the monk language.

Token kinds are plain strings so they print readably in diagnostics
(`expected next token to be IDENT, got = instead`).

Exports:
    - one constant per token kind (`IDENT`, `INT`, `PLUS`, ...)
    - keywords: reserved word -> token kind
    - token_hashmap: operator/delimiter text -> token kind, used by the lexer
      for longest-match scanning
"""

EOF = "EOF"
ILLEGAL = "ILLEGAL"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "="
PLUS = "+"
MINUS = "-"
BANG = "!"
ASTERISK = "*"
SLASH = "/"
LT = "<"
GT = ">"
EQ = "=="
NOT_EQ = "!="

# Delimiters
COMMA = ","
SEMICOLON = ";"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

keywords: dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

token_hashmap: dict[str, str] = {
    kind: kind
    for kind in (
        ASSIGN,
        PLUS,
        MINUS,
        BANG,
        ASTERISK,
        SLASH,
        LT,
        GT,
        EQ,
        NOT_EQ,
        COMMA,
        SEMICOLON,
        LPAREN,
        RPAREN,
        LBRACE,
        RBRACE,
        LBRACKET,
        RBRACKET,
    )
}


def lookup_ident(ident: str) -> str:
    """Return the keyword kind for `ident`, or IDENT for ordinary names."""
    return keywords.get(ident, IDENT)


__all__ = [
    "ASSIGN",
    "ASTERISK",
    "BANG",
    "COMMA",
    "ELSE",
    "EOF",
    "EQ",
    "FALSE",
    "FUNCTION",
    "GT",
    "IDENT",
    "IF",
    "ILLEGAL",
    "INT",
    "LBRACE",
    "LBRACKET",
    "LET",
    "LPAREN",
    "LT",
    "MINUS",
    "NOT_EQ",
    "PLUS",
    "RBRACE",
    "RBRACKET",
    "RETURN",
    "RPAREN",
    "SEMICOLON",
    "SLASH",
    "STRING",
    "TRUE",
    "keywords",
    "lookup_ident",
    "token_hashmap",
]
