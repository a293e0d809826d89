"""Lexer for the fieldcheck predicate language.

Splits a predicate such as ``flag == '0' && !isEmpty(code)`` into tokens.

Token types:
- Literals: NUMBER, STRING, BOOLEAN, NULL
- IDENTIFIER: field, function and method names
- Operators: comparison, logical, arithmetic, membership, conditional
- Punctuation: parentheses, brackets, comma, dot
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Types of tokens in the predicate language."""

    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    NULL = auto()
    IDENTIFIER = auto()

    EQ = auto()          # ==
    NEQ = auto()         # !=
    LT = auto()          # <
    LTE = auto()         # <=
    GT = auto()          # >
    GTE = auto()         # >=

    AND = auto()         # && or and
    OR = auto()          # || or or
    NOT = auto()         # ! or not
    IN = auto()          # in

    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    MODULO = auto()

    QUESTION = auto()    # ?
    COLON = auto()       # :

    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    DOT = auto()

    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token.

    Attributes:
        type: The token type
        value: Literal value, identifier name or operator text
        position: Offset of the token in the source string
    """

    type: TokenType
    value: str | int | float | bool | None
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class LexerError(Exception):
    """Error during lexical analysis."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


_OPERATORS = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "!": TokenType.NOT,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "?": TokenType.QUESTION,
    ":": TokenType.COLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
}

_KEYWORDS = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
    "null": (TokenType.NULL, None),
    "and": (TokenType.AND, "&&"),
    "or": (TokenType.OR, "||"),
    "not": (TokenType.NOT, "!"),
    "in": (TokenType.IN, "in"),
}

# One alternation, tried left to right; two-character operators precede
# their one-character prefixes.
_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<number>\d+\.\d+|\d+)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>==|!=|<=|>=|&&|\|\||[<>!+\-*/%?:()\[\],.])
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


class Lexer:
    """Tokenizer for the predicate language.

    Usage:
        for token in Lexer("flag == '0'"):
            print(token)
    """

    def __init__(self, source: str):
        self.source = source

    def __iter__(self) -> Iterator[Token]:
        position = 0
        length = len(self.source)
        while position < length:
            match = _TOKEN_RE.match(self.source, position)
            if match is None:
                raise LexerError(f"Unexpected character '{self.source[position]}'", position)
            kind = match.lastgroup
            text = match.group()
            if kind == "number":
                yield Token(TokenType.NUMBER, float(text) if "." in text else int(text), position)
            elif kind == "string":
                yield Token(TokenType.STRING, _unescape(text[1:-1]), position)
            elif kind == "name":
                keyword = _KEYWORDS.get(text.lower())
                if keyword:
                    yield Token(keyword[0], keyword[1], position)
                else:
                    yield Token(TokenType.IDENTIFIER, text, position)
            elif kind == "op":
                yield Token(_OPERATORS[text], text, position)
            position = match.end()
        yield Token(TokenType.EOF, None, length)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)
