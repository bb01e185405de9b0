"""
plc0 - Single-Pass PL/0 Compiler
================================

This package compiles a minimal PL/0-style language directly into a
linear list of stack-machine instructions, without building a syntax tree.

The language has constants, variables, assignment, the four integer
arithmetic operators and a print statement:

    begin
        const c = 5;
        var x;
        x = c + 1;
        print(x);
    end

Main Components
---------------
- **source**: character source with position tracking
- **lexer**: tokenizer producing tokens on demand
- **symbols**: flat symbol table assigning stack offsets
- **analyser**: recursive descent parser, semantic checks and code generation
- **instruction**: instruction model and textual listing format
- **vm**: reference stack machine executing compiled programs
- **compiler**: high-level compiler interface and options

Quick Start
-----------
    >>> from plc0 import compile_source, run_program
    >>> result = compile_source("begin const c = 5; var x; x = c + 1; print(x); end")
    >>> print(result.listing())
    LIT 5
    LOD 0
    LIT 1
    ADD
    STO 1
    LOD 1
    WRT
    >>> run_program(result)
    [6]

Or use the command-line tool:
    $ plc0 compile prog.pl0 -o prog.s
    $ plc0 run prog.pl0
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from plc0.errors import (
    Plc0Error,
    SourceLocation,
    ErrorCode,
    CompileError,
    TokenizeError,
    InvalidInputError,
    IntegerOverflowError,
    ExpectedTokenError,
    AnalyzeError,
    DuplicateDeclarationError,
    NotDeclaredError,
    NotInitializedError,
    AssignToConstantError,
    InstructionFormatError,
    ExecutionError,
)
from plc0.source import SourceReader
from plc0.lexer import Token, TokenType, Tokenizer, tokenize_source
from plc0.symbols import SymbolEntry, SymbolTable
from plc0.instruction import (
    Instruction,
    Operation,
    format_instructions,
    parse_instructions,
)
from plc0.analyser import Analyser, AnalysisResult, analyse
from plc0.compiler import (
    CompilerOptions,
    CompilerResult,
    Plc0Compiler,
    compile_source,
    compile_file,
)
from plc0.vm import StackMachine, find_prologue, run_program

__all__ = [
    "__version__",
    # Errors
    "Plc0Error",
    "SourceLocation",
    "ErrorCode",
    "CompileError",
    "TokenizeError",
    "InvalidInputError",
    "IntegerOverflowError",
    "ExpectedTokenError",
    "AnalyzeError",
    "DuplicateDeclarationError",
    "NotDeclaredError",
    "NotInitializedError",
    "AssignToConstantError",
    "InstructionFormatError",
    "ExecutionError",
    # Front end
    "SourceReader",
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize_source",
    "SymbolEntry",
    "SymbolTable",
    "Analyser",
    "AnalysisResult",
    "analyse",
    # Artifact
    "Instruction",
    "Operation",
    "format_instructions",
    "parse_instructions",
    # Compiler
    "CompilerOptions",
    "CompilerResult",
    "Plc0Compiler",
    "compile_source",
    "compile_file",
    # Execution
    "StackMachine",
    "find_prologue",
    "run_program",
]
