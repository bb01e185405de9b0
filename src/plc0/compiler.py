"""
PL/0 Compiler Main Module
=========================

This module provides the main compiler interface. It wires the pipeline
together:

    Source → SourceReader → Tokenizer → Analyser → Instructions

Usage
-----
Command line:
    $ plc0 compile prog.pl0 -o prog.s

Programmatic:
    >>> from plc0 import compile_source
    >>> result = compile_source("begin print(1 + 2); end")
    >>> print(result.listing())
    LIT 1
    LIT 2
    ADD
    WRT

Error Handling
--------------
Compilation is fail-fast. The first CompileError raised by the tokenizer
or the analyser propagates to the caller and no result is produced.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from plc0.analyser import Analyser
from plc0.errors import CompileError
from plc0.instruction import Instruction, format_instructions
from plc0.lexer import MAX_INTEGER, Token, Tokenizer
from plc0.source import SourceReader
from plc0.symbols import SymbolTable

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        max_integer: Largest accepted integer literal; larger literals
                     raise IntegerOverflowError
        source_context: Show the offending source line under error messages
    """
    max_integer: int = MAX_INTEGER
    source_context: bool = True

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            PLC0_MAX_INTEGER: Largest accepted literal (integer)
            PLC0_SOURCE_CONTEXT: "0", "false" or "no" disables source lines
        """
        options = cls()

        if max_integer := os.environ.get("PLC0_MAX_INTEGER"):
            try:
                options.max_integer = int(max_integer)
            except ValueError:
                logger.warning(f"Ignoring invalid PLC0_MAX_INTEGER={max_integer!r}")

        if source_context := os.environ.get("PLC0_SOURCE_CONTEXT"):
            options.source_context = source_context.lower() not in ("0", "false", "no")

        return options


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source filename
        instructions: The compiled program
        symbols: Declared names with their offsets
        frame_size: Storage cells the executing machine must reserve
        prologue_length: Number of instructions emitted by the declarations
        initializer_offsets: Offsets filled by the prologue, in push order
    """
    filename: str
    instructions: list[Instruction] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    frame_size: int = 0
    prologue_length: int = 0
    initializer_offsets: tuple[int, ...] = ()

    def listing(self) -> str:
        """Return the program in textual form, one instruction per line."""
        return format_instructions(self.instructions)


class Plc0Compiler:
    """
    PL/0 compiler.

    Example:
        compiler = Plc0Compiler()
        result = compiler.compile_file("prog.pl0")
        print(result.listing())

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler options (default: CompilerOptions())
        """
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile source text to instructions.

        Args:
            source: PL/0 source text
            filename: Name used in positions and error messages

        Returns:
            CompilerResult with the instructions and symbol layout

        Raises:
            CompileError: On the first error found
        """
        logger.debug(f"Compiling {filename} ({len(source)} characters)")

        tokenizer = self._tokenizer(source, filename)
        try:
            analysis = Analyser(tokenizer).analyse()
        except CompileError as e:
            self._contextualize(e)
            raise

        logger.info(
            f"Compiled {filename}: {len(analysis.instructions)} instructions, "
            f"frame of {analysis.frame_size}"
        )
        return CompilerResult(
            filename=filename,
            instructions=analysis.instructions,
            symbols=analysis.symbols,
            frame_size=analysis.frame_size,
            prologue_length=analysis.prologue_length,
            initializer_offsets=analysis.initializer_offsets,
        )

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a source file.

        Args:
            filepath: Path to the PL/0 source file

        Returns:
            CompilerResult named after the file

        Raises:
            CompileError: On the first error found
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        return self.compile_source(path.read_text(encoding="utf-8"), str(path))

    def tokenize(self, source: str, filename: str = "<input>") -> list[Token]:
        """
        Tokenize source text, EOF token included.

        Args:
            source: PL/0 source text
            filename: Name used in positions and error messages

        Raises:
            TokenizeError: On the first lexical error
        """
        try:
            return list(self._tokenizer(source, filename).tokenize())
        except CompileError as e:
            self._contextualize(e)
            raise

    def _tokenizer(self, source: str, filename: str) -> Tokenizer:
        return Tokenizer(SourceReader(source, filename), self.options.max_integer)

    def _contextualize(self, error: CompileError) -> None:
        """Drop the source line from an error when context is disabled."""
        if not self.options.source_context:
            error.with_source_line(None)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """
    Compile PL/0 source text.

    Example:
        >>> result = compile_source("begin var y = -3; print(y); end")
        >>> [str(i) for i in result.instructions]
        ['LIT 0', 'LIT 3', 'SUB', 'LOD 0', 'WRT']
    """
    return Plc0Compiler(options).compile_source(source, filename)


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """
    Compile a PL/0 source file, optionally writing the listing.

    Args:
        filepath: Path to the PL/0 source file
        output_path: Where to write the instruction listing (optional)
        options: Compiler options

    Returns:
        CompilerResult

    Raises:
        CompileError: If compilation fails
        FileNotFoundError: If source file not found
    """
    result = Plc0Compiler(options).compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.listing(), encoding="utf-8")

    return result
