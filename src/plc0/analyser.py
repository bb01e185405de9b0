"""
PL/0 Recursive Descent Analyser
===============================

This module parses PL/0 source, checks its semantics and generates
stack-machine code in a single pass. There is no intermediate AST: each
grammar rule emits its instructions and updates the symbol table as soon
as it is recognized.

Grammar (EBNF)
--------------
program      ::= 'begin' main 'end' EOF
main         ::= const_decls var_decls statements
const_decls  ::= { 'const' IDENT '=' const_expr ';' }
const_expr   ::= [ '+' | '-' ] UINT
var_decls    ::= { 'var' IDENT [ '=' expr ] ';' }
statements   ::= { statement }
statement    ::= assignment | print_stmt | ';'
assignment   ::= IDENT '=' expr ';'
print_stmt   ::= 'print' '(' expr ')' ';'
expr         ::= term { ( '+' | '-' ) term }
term         ::= factor { ( '*' | '/' ) factor }
factor       ::= [ '+' | '-' ] ( IDENT | UINT | '(' expr ')' )

Code Generation
---------------
| Construct            | Instructions                          |
|----------------------|---------------------------------------|
| const c = v;         | LIT v                                 |
| var x = e;           | <e>            (no STO)               |
| var x;               | (nothing)                             |
| x = e;               | <e> STO off(x)                        |
| print(e);            | <e> WRT                               |
| a + b, a - b         | <a> <b> ADD / SUB                     |
| a * b, a / b         | <a> <b> MUL / DIV                     |
| -f                   | LIT 0 <f> SUB                         |
| identifier           | LOD off                               |
| integer              | LIT v                                 |

Declarations rely on the frame contract: the executing machine reserves
one storage cell per declared name before running, and declaration pushes
happen in offset order, so a declaration's value lands in its own cell
without a STO. The instructions emitted by the declarations form the
prologue; AnalysisResult records its length and which offsets it fills so
the machine can move its operand stack above the frame once it ends.

Negation has no dedicated opcode and is always 0 - operand.

Every error is fatal; the first one aborts the analysis.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from plc0.errors import (
    SourceLocation,
    ExpectedTokenError,
    DuplicateDeclarationError,
    NotDeclaredError,
    NotInitializedError,
    AssignToConstantError,
)
from plc0.instruction import Instruction, Operation
from plc0.lexer import Token, TokenType, Tokenizer
from plc0.symbols import SymbolEntry, SymbolTable

logger = logging.getLogger(__name__)


# Kinds reported when no statement or factor can start at the lookahead
_FACTOR_START = (TokenType.IDENT, TokenType.UINT, TokenType.LPAREN)


@dataclass
class AnalysisResult:
    """
    Output of one successful analysis.

    Attributes:
        instructions: The compiled program in execution order
        symbols: Every declared name with its offset and flags
        frame_size: Number of storage cells the program addresses
        prologue_length: Number of instructions emitted by the declarations
        initializer_offsets: Offsets of the declarations whose value the
                             prologue pushes, in push order
    """
    instructions: list[Instruction]
    symbols: SymbolTable
    frame_size: int
    prologue_length: int = 0
    initializer_offsets: tuple[int, ...] = ()


class Analyser:
    """
    Single-pass parser, semantic checker and code generator.

    An Analyser holds the state of exactly one compilation: the lookahead
    token, the symbol table, the instruction list and the layout of the
    declaration prologue. Create a new one for every source; analyse() may
    only be called once.

    Usage:
        tokenizer = Tokenizer(SourceReader(text, "prog.pl0"))
        result = Analyser(tokenizer).analyse()
        for instruction in result.instructions:
            print(instruction)
    """

    def __init__(self, tokenizer: Tokenizer):
        self.tokenizer = tokenizer
        self.instructions: list[Instruction] = []
        self.symbols = SymbolTable()
        self.prologue_length = 0
        self.initializer_offsets: list[int] = []

        self._peeked: Optional[Token] = None
        self._used = False

    def analyse(self) -> AnalysisResult:
        """
        Compile the whole program.

        Raises:
            CompileError: On the first lexical, syntax or semantic error
            RuntimeError: If this analyser has already been used
        """
        if self._used:
            raise RuntimeError("an Analyser compiles a single program; create a new one")
        self._used = True

        self._analyse_program()

        logger.debug(
            f"Analysed {self.tokenizer.source.filename}: "
            f"{len(self.instructions)} instructions, {len(self.symbols)} symbols"
        )
        return AnalysisResult(
            self.instructions,
            self.symbols,
            self.symbols.next_offset,
            self.prologue_length,
            tuple(self.initializer_offsets),
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self) -> Token:
        """Return the lookahead token without consuming it."""
        if self._peeked is None:
            self._peeked = self.tokenizer.next_token()
        return self._peeked

    def _next(self) -> Token:
        """Consume and return the lookahead token."""
        if self._peeked is not None:
            token, self._peeked = self._peeked, None
            return token
        return self.tokenizer.next_token()

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _next_if(self, token_type: TokenType) -> Optional[Token]:
        """Consume the lookahead only if it has the given type."""
        if self._check(token_type):
            return self._next()
        return None

    def _expect(self, token_type: TokenType) -> Token:
        """
        Consume a token of the given type.

        Raises:
            ExpectedTokenError: If the lookahead has another type
        """
        if self._check(token_type):
            return self._next()
        raise self._expected((token_type,), self._peek())

    # =========================================================================
    # Diagnostics and Emission
    # =========================================================================

    def _source_line(self, location: SourceLocation) -> Optional[str]:
        return self.tokenizer.source.line_text(location.line)

    def _expected(self, expected: tuple[TokenType, ...], found: Token) -> ExpectedTokenError:
        return ExpectedTokenError(expected, found, self._source_line(found.start))

    def _emit(self, operation: Operation, operand: Optional[int] = None) -> None:
        self.instructions.append(Instruction(operation, operand))

    # =========================================================================
    # Symbol Handling
    # =========================================================================

    def _check_not_declared(self, name_token: Token) -> None:
        """Reject a name that is already in the symbol table."""
        if name_token.value in self.symbols:
            raise DuplicateDeclarationError(
                name_token.value,
                name_token.start,
                self._source_line(name_token.start),
            )

    def _declare(self, name_token: Token, is_constant: bool, is_initialized: bool) -> SymbolEntry:
        entry = self.symbols.declare(name_token.value, is_constant, is_initialized)
        logger.debug(
            f"Declared {'const' if is_constant else 'var'} {name_token.value!r} "
            f"at offset {entry.stack_offset}"
        )
        return entry

    def _lookup(self, name_token: Token) -> SymbolEntry:
        """
        Find a declared symbol.

        Raises:
            NotDeclaredError: If the name was never declared
        """
        entry = self.symbols.get(name_token.value)
        if entry is None:
            raise NotDeclaredError(
                name_token.value,
                name_token.start,
                self._source_line(name_token.start),
            )
        return entry

    # =========================================================================
    # Program Structure
    # =========================================================================

    def _analyse_program(self) -> None:
        """program ::= 'begin' main 'end' EOF"""
        self._expect(TokenType.BEGIN)
        self._analyse_main()
        self._expect(TokenType.END)
        self._expect(TokenType.EOF)

    def _analyse_main(self) -> None:
        """main ::= const_decls var_decls statements"""
        self._analyse_constant_declarations()
        self._analyse_variable_declarations()
        self.prologue_length = len(self.instructions)
        self._analyse_statement_sequence()

    # =========================================================================
    # Declarations
    # =========================================================================

    def _analyse_constant_declarations(self) -> None:
        """const_decls ::= { 'const' IDENT '=' const_expr ';' }"""
        while self._next_if(TokenType.CONST) is not None:
            name_token = self._expect(TokenType.IDENT)
            self._check_not_declared(name_token)

            self._expect(TokenType.EQUAL)
            value = self._analyse_constant_expression()
            self._expect(TokenType.SEMICOLON)

            entry = self._declare(name_token, is_constant=True, is_initialized=True)
            self.initializer_offsets.append(entry.stack_offset)
            self._emit(Operation.LIT, value)

    def _analyse_constant_expression(self) -> int:
        """const_expr ::= [ '+' | '-' ] UINT"""
        negative = False
        if self._next_if(TokenType.MINUS) is not None:
            negative = True
        else:
            self._next_if(TokenType.PLUS)

        value = self._expect(TokenType.UINT).value
        return -value if negative else value

    def _analyse_variable_declarations(self) -> None:
        """var_decls ::= { 'var' IDENT [ '=' expr ] ';' }"""
        while self._next_if(TokenType.VAR) is not None:
            name_token = self._expect(TokenType.IDENT)
            self._check_not_declared(name_token)

            if self._next_if(TokenType.EQUAL) is not None:
                # The value stays on the stack, in the cell of this offset
                self._analyse_expression()
                self._expect(TokenType.SEMICOLON)
                entry = self._declare(name_token, is_constant=False, is_initialized=True)
                self.initializer_offsets.append(entry.stack_offset)
            else:
                self._expect(TokenType.SEMICOLON)
                self._declare(name_token, is_constant=False, is_initialized=False)

    # =========================================================================
    # Statements
    # =========================================================================

    def _analyse_statement_sequence(self) -> None:
        """statements ::= { statement }"""
        while self._check(TokenType.IDENT, TokenType.PRINT, TokenType.SEMICOLON):
            self._analyse_statement()

    def _analyse_statement(self) -> None:
        """statement ::= assignment | print_stmt | ';'"""
        if self._check(TokenType.IDENT):
            self._analyse_assignment_statement()
        elif self._check(TokenType.PRINT):
            self._analyse_output_statement()
        elif self._check(TokenType.SEMICOLON):
            self._next()
        else:
            raise self._expected(_FACTOR_START, self._next())

    def _analyse_assignment_statement(self) -> None:
        """assignment ::= IDENT '=' expr ';'"""
        name_token = self._expect(TokenType.IDENT)
        entry = self._lookup(name_token)
        if entry.is_constant:
            raise AssignToConstantError(
                name_token.value,
                name_token.start,
                self._source_line(name_token.start),
            )

        self._expect(TokenType.EQUAL)
        self._analyse_expression()
        self._expect(TokenType.SEMICOLON)

        entry.is_initialized = True
        self._emit(Operation.STO, entry.stack_offset)

    def _analyse_output_statement(self) -> None:
        """print_stmt ::= 'print' '(' expr ')' ';'"""
        self._expect(TokenType.PRINT)
        self._expect(TokenType.LPAREN)
        self._analyse_expression()
        self._expect(TokenType.RPAREN)
        self._expect(TokenType.SEMICOLON)
        self._emit(Operation.WRT)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _analyse_expression(self) -> None:
        """expr ::= term { ( '+' | '-' ) term }"""
        self._analyse_term()

        while self._check(TokenType.PLUS, TokenType.MINUS):
            operator = self._next()
            self._analyse_term()
            if operator.type == TokenType.PLUS:
                self._emit(Operation.ADD)
            else:
                self._emit(Operation.SUB)

    def _analyse_term(self) -> None:
        """term ::= factor { ( '*' | '/' ) factor }"""
        self._analyse_factor()

        while self._check(TokenType.STAR, TokenType.SLASH):
            operator = self._next()
            self._analyse_factor()
            if operator.type == TokenType.STAR:
                self._emit(Operation.MUL)
            else:
                self._emit(Operation.DIV)

    def _analyse_factor(self) -> None:
        """factor ::= [ '+' | '-' ] ( IDENT | UINT | '(' expr ')' )"""
        negate = False
        if self._next_if(TokenType.MINUS) is not None:
            negate = True
            self._emit(Operation.LIT, 0)
        else:
            self._next_if(TokenType.PLUS)

        if self._check(TokenType.IDENT):
            name_token = self._next()
            entry = self._lookup(name_token)
            if not entry.is_initialized:
                raise NotInitializedError(
                    name_token.value,
                    name_token.start,
                    self._source_line(name_token.start),
                )
            self._emit(Operation.LOD, entry.stack_offset)
        elif self._check(TokenType.UINT):
            self._emit(Operation.LIT, self._next().value)
        elif self._check(TokenType.LPAREN):
            self._next()
            self._analyse_expression()
            self._expect(TokenType.RPAREN)
        else:
            raise self._expected(_FACTOR_START, self._next())

        if negate:
            self._emit(Operation.SUB)


def analyse(tokenizer: Tokenizer) -> AnalysisResult:
    """Compile the token stream of one program with a fresh Analyser."""
    return Analyser(tokenizer).analyse()
