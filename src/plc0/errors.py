"""
PL/0 Compiler Error Hierarchy
=============================

This module defines the exception hierarchy for the plc0 compiler.
All exceptions inherit from Plc0Error, allowing callers to catch every
compiler-related failure with a single except clause.

Exception Hierarchy
-------------------
Plc0Error (base)
├── CompileError (carries an ErrorCode and a SourceLocation)
│   ├── TokenizeError - lexical errors
│   │   ├── InvalidInputError - unrecognized character
│   │   └── IntegerOverflowError - literal out of range
│   ├── ExpectedTokenError - token does not fit the grammar
│   └── AnalyzeError - semantic errors
│       ├── DuplicateDeclarationError - name declared twice
│       ├── NotDeclaredError - reference to an undeclared name
│       ├── NotInitializedError - read before any assignment
│       └── AssignToConstantError - write to a constant
├── InstructionFormatError - malformed instruction listing
└── ExecutionError - stack machine runtime failure

Compilation is fail-fast: the first error raised aborts the pipeline and
is the only one reported.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from plc0.lexer import Token, TokenType


# =============================================================================
# Base Exception Class
# =============================================================================

class Plc0Error(Exception):
    """
    Base exception for all plc0 errors.

        try:
            compile_source(text)
        except Plc0Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class ErrorCode(Enum):
    """Error kind tags reported with every compile error."""

    INVALID_INPUT = auto()
    INTEGER_OVERFLOW = auto()
    EXPECTED_TOKEN = auto()
    DUPLICATE_DECLARATION = auto()
    NOT_DECLARED = auto()
    NOT_INITIALIZED = auto()
    ASSIGN_TO_CONSTANT = auto()


# =============================================================================
# Compile Errors
# =============================================================================

class CompileError(Plc0Error):
    """
    Base exception for errors raised while compiling source text.

    Attributes:
        code: The ErrorCode classifying this failure
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    code: ErrorCode

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.pl0:3:5: error: 'k' is a constant and cannot be assigned
                k = 2;
                ^
        """
        parts = [f"{self.location}: error: {self.message}"]

        if self.source_line is not None and self.location.column > 0:
            parts.append(f"    {self.source_line}")
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_source_line(self, source_line: Optional[str]) -> "CompileError":
        """Attach the offending source line and rebuild the message."""
        self.source_line = source_line
        self.args = (self._format_message(),)
        return self


# =============================================================================
# Lexical Errors
# =============================================================================

class TokenizeError(CompileError):
    """Lexical error raised by the tokenizer."""
    pass


class InvalidInputError(TokenizeError):
    """A character that cannot start any token."""

    code = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        char: str,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (U+{ord(char):04X})",
            location,
            source_line=source_line,
        )


class IntegerOverflowError(TokenizeError):
    """An unsigned integer literal larger than the supported maximum."""

    code = ErrorCode.INTEGER_OVERFLOW

    def __init__(
        self,
        literal: str,
        maximum: int,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ):
        self.literal = literal
        self.maximum = maximum
        shown = literal if len(literal) <= 20 else f"{literal[:10]}... ({len(literal)} digits)"
        super().__init__(
            f"integer literal {shown} is out of range",
            location,
            hint=f"literals must not exceed {maximum}",
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class ExpectedTokenError(CompileError):
    """
    The token found does not match any kind required at this point.

    Attributes:
        expected: The token kinds that would have been acceptable
        found: The token actually found
    """

    code = ErrorCode.EXPECTED_TOKEN

    def __init__(
        self,
        expected: "Iterable[TokenType]",
        found: "Token",
        source_line: Optional[str] = None,
    ):
        self.expected = tuple(expected)
        self.found = found

        names = [kind.describe() for kind in self.expected]
        if len(names) > 1:
            wanted = ", ".join(names[:-1]) + f" or {names[-1]}"
        else:
            wanted = names[0]

        super().__init__(
            f"expected {wanted}, found {found.describe()}",
            found.start,
            source_line=source_line,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class AnalyzeError(CompileError):
    """
    Semantic error detected during analysis.

    Attributes:
        name: The identifier involved
    """

    def __init__(
        self,
        name: str,
        message: str,
        location: SourceLocation,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(message, location, hint=hint, source_line=source_line)


class DuplicateDeclarationError(AnalyzeError):
    """An identifier declared a second time."""

    code = ErrorCode.DUPLICATE_DECLARATION

    def __init__(self, name: str, location: SourceLocation,
                 source_line: Optional[str] = None):
        super().__init__(name, f"redeclaration of '{name}'", location,
                         source_line=source_line)


class NotDeclaredError(AnalyzeError):
    """Reference to an identifier that was never declared."""

    code = ErrorCode.NOT_DECLARED

    def __init__(self, name: str, location: SourceLocation,
                 source_line: Optional[str] = None):
        super().__init__(
            name,
            f"undeclared identifier '{name}'",
            location,
            hint=f"declare it with 'var {name};' before use",
            source_line=source_line,
        )


class NotInitializedError(AnalyzeError):
    """Read of a variable that has not been assigned yet."""

    code = ErrorCode.NOT_INITIALIZED

    def __init__(self, name: str, location: SourceLocation,
                 source_line: Optional[str] = None):
        super().__init__(
            name,
            f"variable '{name}' is used before being assigned",
            location,
            source_line=source_line,
        )


class AssignToConstantError(AnalyzeError):
    """Assignment whose target is a constant."""

    code = ErrorCode.ASSIGN_TO_CONSTANT

    def __init__(self, name: str, location: SourceLocation,
                 source_line: Optional[str] = None):
        super().__init__(
            name,
            f"'{name}' is a constant and cannot be assigned",
            location,
            source_line=source_line,
        )


# =============================================================================
# Artifact and Runtime Errors
# =============================================================================

class InstructionFormatError(Plc0Error):
    """
    A line of an instruction listing could not be parsed.

    Attributes:
        line: Line number in the listing (1-indexed)
        text: The offending line
    """

    def __init__(self, message: str, line: int, text: str):
        self.line = line
        self.text = text
        super().__init__(f"line {line}: {message}: {text.strip()!r}")


class ExecutionError(Plc0Error):
    """
    The stack machine could not execute an instruction.

    Attributes:
        pc: Index of the failing instruction
    """

    def __init__(self, message: str, pc: int):
        self.pc = pc
        super().__init__(f"instruction {pc}: {message}")
