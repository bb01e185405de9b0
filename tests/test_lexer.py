# =============================================================================
# test_lexer.py - Tokenizer Unit Tests
# =============================================================================
# Tests for the PL/0 tokenizer and its character source.
#
# Test coverage includes:
#   - End-of-input handling and whitespace skipping
#   - Unsigned integers, identifiers and keywords
#   - Operators and punctuation
#   - Token start/end positions
#   - Error conditions (invalid characters, integer overflow)
# =============================================================================

import pytest

from plc0.errors import (
    ErrorCode,
    IntegerOverflowError,
    InvalidInputError,
    SourceLocation,
)
from plc0.lexer import MAX_INTEGER, Token, TokenType, Tokenizer, tokenize_source
from plc0.source import SourceReader


# =============================================================================
# Helper Functions
# =============================================================================

def types(source: str) -> list[TokenType]:
    """Token types of a source, EOF included."""
    return [t.type for t in tokenize_source(source)]


def loc(line: int, column: int) -> SourceLocation:
    return SourceLocation("<input>", line, column)


# =============================================================================
# End of Input
# =============================================================================

class TestEndOfInput:
    """Test the terminal EOF state."""

    def test_empty_source(self):
        """Empty source should produce only EOF."""
        assert types("") == [TokenType.EOF]

    @pytest.mark.parametrize("source", [" ", "   \t  ", "\n\n", " \r\n\t "])
    def test_whitespace_only_is_eof_forever(self, source):
        """Whitespace-only input yields EOF on every call."""
        tokenizer = Tokenizer(SourceReader(source))
        for _ in range(5):
            assert tokenizer.next_token().type == TokenType.EOF

    def test_eof_after_tokens_is_repeated(self):
        """Calls after the last token keep returning EOF."""
        tokenizer = Tokenizer(SourceReader("end"))
        assert tokenizer.next_token().type == TokenType.END
        assert tokenizer.next_token().type == TokenType.EOF
        assert tokenizer.next_token().type == TokenType.EOF

    def test_eof_has_no_value(self):
        """The EOF token carries no payload and an empty span."""
        token = tokenize_source("x ")[-1]
        assert token.value is None
        assert token.start == token.end == loc(1, 3)


# =============================================================================
# Unsigned Integers
# =============================================================================

class TestUnsignedIntegers:
    """Test integer literal recognition."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("7", 7),
        ("42", 42),
        ("007", 7),
        ("2147483647", 2147483647),
    ])
    def test_decimal_values(self, text, expected):
        """A digit run parses to its base-10 value."""
        token = tokenize_source(text)[0]
        assert token.type == TokenType.UINT
        assert token.value == expected

    def test_next_token_starts_after_digits(self):
        """The token after a number starts at the first non-digit."""
        number, plus, *_ = tokenize_source("123+4")
        assert number.start == loc(1, 1)
        assert number.end == loc(1, 4)
        assert plus.type == TokenType.PLUS
        assert plus.start == number.end

    def test_digits_then_letters(self):
        """Identifiers cannot start with a digit: 1abc is a number then a name."""
        number, ident, _ = tokenize_source("1abc")
        assert number.type == TokenType.UINT and number.value == 1
        assert ident.type == TokenType.IDENT and ident.value == "abc"

    def test_overflow_is_an_error(self):
        """Literals above 2**31 - 1 raise IntegerOverflowError."""
        with pytest.raises(IntegerOverflowError) as exc_info:
            tokenize_source("begin 2147483648")
        error = exc_info.value
        assert error.code == ErrorCode.INTEGER_OVERFLOW
        assert error.location == loc(1, 7)
        assert error.literal == "2147483648"
        assert error.maximum == MAX_INTEGER

    def test_custom_maximum(self):
        """The maximum literal value is configurable."""
        assert tokenize_source("255", max_integer=255)[0].value == 255
        with pytest.raises(IntegerOverflowError):
            tokenize_source("256", max_integer=255)

    def test_very_long_literal(self):
        """Digit runs far past the maximum still raise IntegerOverflowError."""
        with pytest.raises(IntegerOverflowError) as exc_info:
            tokenize_source("9" * 5000)
        error = exc_info.value
        assert error.literal == "9" * 5000
        assert "(5000 digits)" in error.message

    def test_leading_zeros_do_not_count(self):
        """Only significant digits are compared with the maximum."""
        token = tokenize_source("0" * 5000 + "7")[0]
        assert token.value == 7
        assert token.end == loc(1, 5002)


# =============================================================================
# Identifiers and Keywords
# =============================================================================

class TestIdentifiersAndKeywords:
    """Test identifier and keyword classification."""

    @pytest.mark.parametrize("text,expected", [
        ("begin", TokenType.BEGIN),
        ("end", TokenType.END),
        ("var", TokenType.VAR),
        ("const", TokenType.CONST),
        ("print", TokenType.PRINT),
    ])
    def test_keywords(self, text, expected):
        """Reserved words become keyword tokens carrying their text."""
        token = tokenize_source(text)[0]
        assert token.type == expected
        assert token.value == text

    @pytest.mark.parametrize("text", ["x", "abc", "x1", "a1b2", "beginx", "BEGIN", "Print"])
    def test_identifiers(self, text):
        """Anything else alphanumeric is an identifier, case-sensitively."""
        token = tokenize_source(text)[0]
        assert token.type == TokenType.IDENT
        assert token.value == text

    def test_identifier_span(self):
        """An identifier spans exactly its characters."""
        token = tokenize_source("  count ")[0]
        assert token.start == loc(1, 3)
        assert token.end == loc(1, 8)

    def test_underscore_is_not_part_of_identifiers(self):
        """Underscore is not an identifier character."""
        tokenizer = Tokenizer(SourceReader("a_b"))
        assert tokenizer.next_token().value == "a"
        with pytest.raises(InvalidInputError) as exc_info:
            tokenizer.next_token()
        assert exc_info.value.char == "_"
        assert exc_info.value.location == loc(1, 2)


# =============================================================================
# Operators
# =============================================================================

class TestOperators:
    """Test single-character operators and punctuation."""

    def test_all_operators(self):
        assert types("+-*/()=;") == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.EQUAL,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_operator_carries_its_character(self):
        token = tokenize_source("*")[0]
        assert token.value == "*"
        assert token.end == loc(1, 2)

    def test_no_double_character_operators(self):
        """'==' is two EQUAL tokens."""
        assert types("==") == [TokenType.EQUAL, TokenType.EQUAL, TokenType.EOF]

    @pytest.mark.parametrize("char", ["#", "%", "{", "<", "!", ",", "_"])
    def test_invalid_characters(self, char):
        """Characters outside the alphabet raise InvalidInputError."""
        with pytest.raises(InvalidInputError) as exc_info:
            tokenize_source(f"x {char}")
        error = exc_info.value
        assert error.code == ErrorCode.INVALID_INPUT
        assert error.location == loc(1, 3)
        assert error.source_line == f"x {char}"


# =============================================================================
# Whole Programs
# =============================================================================

class TestPrograms:
    """Test tokenization of complete programs."""

    def test_sample_program(self):
        """The reference program tokenizes to the expected stream."""
        source = "begin const c = 5; var x; x = c + 1; print(x); end"
        tokens = tokenize_source(source)
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.BEGIN, "begin"),
            (TokenType.CONST, "const"),
            (TokenType.IDENT, "c"),
            (TokenType.EQUAL, "="),
            (TokenType.UINT, 5),
            (TokenType.SEMICOLON, ";"),
            (TokenType.VAR, "var"),
            (TokenType.IDENT, "x"),
            (TokenType.SEMICOLON, ";"),
            (TokenType.IDENT, "x"),
            (TokenType.EQUAL, "="),
            (TokenType.IDENT, "c"),
            (TokenType.PLUS, "+"),
            (TokenType.UINT, 1),
            (TokenType.SEMICOLON, ";"),
            (TokenType.PRINT, "print"),
            (TokenType.LPAREN, "("),
            (TokenType.IDENT, "x"),
            (TokenType.RPAREN, ")"),
            (TokenType.SEMICOLON, ";"),
            (TokenType.END, "end"),
            (TokenType.EOF, None),
        ]

    def test_line_tracking(self):
        """Newlines advance the line and reset the column."""
        tokens = tokenize_source("begin\n  var x;\nend")
        var = tokens[1]
        end = tokens[4]
        assert var.start == loc(2, 3)
        assert end.start == loc(3, 1)

    def test_tokenizing_twice_is_identical(self):
        """Two independent readers over the same text give equal tokens."""
        source = "begin var y = -3;\n print((y + 10) * 2); end"
        first = list(Tokenizer(SourceReader(source)).tokenize())
        second = list(Tokenizer(SourceReader(source)).tokenize())
        assert first == second

    def test_repr(self):
        tokens = tokenize_source("print(42)")
        assert repr(tokens[0]) == "Token(PRINT, 'print', 1:1)"
        assert repr(tokens[2]) == "Token(UINT, 42, 1:7)"
        assert repr(tokens[-1]) == "Token(EOF, 1:10)"

    def test_filename_in_positions(self):
        tokens = tokenize_source("x", filename="prog.pl0")
        assert str(tokens[0].start) == "prog.pl0:1:1"


# =============================================================================
# Character Source
# =============================================================================

class TestSourceReader:
    """Test the character source used by the tokenizer."""

    def test_peek_does_not_consume(self):
        reader = SourceReader("ab")
        assert reader.peek_char() == "a"
        assert reader.peek_char() == "a"
        assert reader.next_char() == "a"
        assert reader.peek_char() == "b"

    def test_end_of_input(self):
        reader = SourceReader("a")
        reader.next_char()
        assert reader.is_eof()
        assert reader.peek_char() == ""
        assert reader.next_char() == ""

    def test_positions(self):
        reader = SourceReader("a\nb")
        reader.next_char()
        reader.next_char()
        assert reader.previous_pos() == loc(1, 2)
        assert reader.current_pos() == loc(2, 1)

    def test_line_text(self):
        reader = SourceReader("first\nsecond\n")
        assert reader.line_text(2) == "second"
        assert reader.line_text(3) == ""
        assert reader.line_text(4) is None

    def test_line_text_follows_newlines_only(self):
        """Lines are counted the same way positions are, on newlines alone."""
        reader = SourceReader("a\x0cb\r\nc\rd")
        assert reader.line_text(1) == "a\x0cb"
        assert reader.line_text(2) == "c\rd"

    def test_error_quotes_its_own_line(self):
        with pytest.raises(InvalidInputError) as exc_info:
            tokenize_source("begin\x0cvar x;\n@ end")
        error = exc_info.value
        assert error.location == loc(2, 1)
        assert error.source_line == "@ end"

    def test_from_file(self, tmp_path):
        path = tmp_path / "prog.pl0"
        path.write_text("begin end", encoding="utf-8")
        reader = SourceReader.from_file(path)
        assert reader.filename == str(path)
        assert Tokenizer(reader).next_token().type == TokenType.BEGIN
