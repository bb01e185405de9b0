"""
PL/0 Lexer (Tokenizer)
======================

This module converts a character stream into a lazy sequence of tokens
for the analyser.

Token Categories
----------------
- Keywords: begin, end, var, const, print
- Identifiers: a letter followed by letters or digits (no underscore)
- Unsigned integers: a run of decimal digits
- Operators and punctuation: + - * / ( ) = ;
- End of input: returned once the source is exhausted, and on every
  call after that

Whitespace separates tokens and is never returned.

Integer Range
-------------
Literals are limited to the 32-bit signed range. A digit run whose value
is larger than the tokenizer's maximum (2**31 - 1 unless configured
otherwise) raises IntegerOverflowError.

Example Usage
-------------
>>> from plc0.lexer import tokenize_source
>>> for token in tokenize_source("begin print(42); end"):
...     print(token)
Token(BEGIN, 'begin', 1:1)
Token(PRINT, 'print', 1:7)
Token(LPAREN, '(', 1:12)
Token(UINT, 42, 1:13)
Token(RPAREN, ')', 1:15)
Token(SEMICOLON, ';', 1:16)
Token(END, 'end', 1:18)
Token(EOF, 1:21)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from plc0.errors import (
    SourceLocation,
    InvalidInputError,
    IntegerOverflowError,
)
from plc0.source import SourceReader


# Largest value an unsigned integer literal may have
MAX_INTEGER = 2**31 - 1


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds of the PL/0 language."""

    EOF = auto()

    # === Literals and names ===
    UINT = auto()
    IDENT = auto()

    # === Keywords ===
    BEGIN = auto()
    END = auto()
    VAR = auto()
    CONST = auto()
    PRINT = auto()

    # === Operators and punctuation ===
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    LPAREN = auto()
    RPAREN = auto()
    EQUAL = auto()
    SEMICOLON = auto()

    def describe(self) -> str:
        """Human-readable name used in diagnostics."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    TokenType.EOF: "end of input",
    TokenType.UINT: "unsigned integer",
    TokenType.IDENT: "identifier",
    TokenType.BEGIN: "'begin'",
    TokenType.END: "'end'",
    TokenType.VAR: "'var'",
    TokenType.CONST: "'const'",
    TokenType.PRINT: "'print'",
    TokenType.PLUS: "'+'",
    TokenType.MINUS: "'-'",
    TokenType.STAR: "'*'",
    TokenType.SLASH: "'/'",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.EQUAL: "'='",
    TokenType.SEMICOLON: "';'",
}


KEYWORDS: dict[str, TokenType] = {
    "begin": TokenType.BEGIN,
    "end": TokenType.END,
    "var": TokenType.VAR,
    "const": TokenType.CONST,
    "print": TokenType.PRINT,
}

OPERATORS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "=": TokenType.EQUAL,
    ";": TokenType.SEMICOLON,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token of PL/0 source.

    The token type decides what the value holds: the parsed number for
    UINT, the text for identifiers, keywords and operators, and None for
    EOF.

    Attributes:
        type: The TokenType classification
        value: The token payload
        start: Position of the first character of the token
        end: Position just past the last character of the token
    """
    type: TokenType
    value: str | int | None
    start: SourceLocation
    end: SourceLocation

    def __repr__(self) -> str:
        where = f"{self.start.line}:{self.start.column}"
        if self.value is None:
            return f"Token({self.type.name}, {where})"
        if isinstance(self.value, int):
            return f"Token({self.type.name}, {self.value}, {where})"
        return f"Token({self.type.name}, {self.value!r}, {where})"

    def describe(self) -> str:
        """Describe the token for diagnostics, e.g. "identifier 'x'"."""
        if self.type == TokenType.IDENT:
            return f"identifier '{self.value}'"
        if self.type == TokenType.UINT:
            return f"unsigned integer {self.value}"
        return self.type.describe()


# =============================================================================
# Tokenizer Implementation
# =============================================================================

class Tokenizer:
    """
    Produces tokens on demand from a SourceReader.

    Usage:
        tokenizer = Tokenizer(SourceReader(text, "prog.pl0"))
        token = tokenizer.next_token()

    Attributes:
        source: The character source being read
        max_integer: Largest accepted integer literal
    """

    def __init__(self, source: SourceReader, max_integer: int = MAX_INTEGER):
        """
        Initialize the tokenizer.

        Args:
            source: Character source to read from
            max_integer: Largest accepted integer literal
        """
        self.source = source
        self.max_integer = max_integer

    def next_token(self) -> Token:
        """
        Consume and return the next token.

        Raises:
            InvalidInputError: If a character cannot start any token
            IntegerOverflowError: If an integer literal is too large
        """
        self._skip_whitespace()

        if self.source.is_eof():
            here = self.source.current_pos()
            return Token(TokenType.EOF, None, here, here)

        char = self.source.peek_char()
        if char.isdecimal():
            return self._lex_uint()
        if char.isalpha():
            return self._lex_ident_or_keyword()
        return self._lex_operator()

    def tokenize(self) -> Iterator[Token]:
        """Yield tokens up to and including the EOF token."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _skip_whitespace(self) -> None:
        while not self.source.is_eof() and self.source.peek_char().isspace():
            self.source.next_char()

    def _lex_uint(self) -> Token:
        start = self.source.current_pos()

        digits = []
        while self.source.peek_char().isdecimal():
            digits.append(self.source.next_char())

        literal = "".join(digits)
        # Leading zeros and length are checked before int(), which refuses
        # very long digit strings
        significant = literal.lstrip("0") or "0"
        if (len(significant) > len(str(self.max_integer))
                or int(significant) > self.max_integer):
            raise IntegerOverflowError(
                literal,
                self.max_integer,
                start,
                self.source.line_text(start.line),
            )

        value = int(significant)
        return Token(TokenType.UINT, value, start, self.source.current_pos())

    def _lex_ident_or_keyword(self) -> Token:
        start = self.source.current_pos()

        chars = []
        while True:
            char = self.source.peek_char()
            if not (char.isalpha() or char.isdecimal()):
                break
            chars.append(self.source.next_char())

        text = "".join(chars)
        token_type = KEYWORDS.get(text, TokenType.IDENT)
        return Token(token_type, text, start, self.source.current_pos())

    def _lex_operator(self) -> Token:
        start = self.source.current_pos()
        char = self.source.next_char()

        if char in OPERATORS:
            return Token(OPERATORS[char], char, start, self.source.current_pos())

        raise InvalidInputError(char, start, self.source.line_text(start.line))


def tokenize_source(
    text: str,
    filename: str = "<input>",
    max_integer: int = MAX_INTEGER,
) -> list[Token]:
    """Tokenize a complete source string, EOF token included."""
    tokenizer = Tokenizer(SourceReader(text, filename), max_integer)
    return list(tokenizer.tokenize())
