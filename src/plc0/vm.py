"""
Reference Stack Machine
=======================

Executes a compiled instruction list under the frame contract the
analyser relies on.

Storage Model
-------------
The machine has one value stack. Before the first instruction runs it
reserves ``frame_size`` cells at the bottom of that stack, all undefined,
and sets the stack pointer to 0.

While the declaration prologue runs, pushes write at the stack pointer,
so the values pushed by declarations land in the cells of their offsets.
When the prologue ends the stack pointer moves to ``frame_size``: every
later temporary lives above the frame and LOD/STO address the frame
cells by absolute offset.

    begin const c = 5; var x; x = c + 1; print(x); end

    LIT 5    cells [5, ?]        sp=1   prologue: c's value is cell 0
                                 sp=2   prologue ends
    LOD 0    [5, ?] 5            sp=3
    LIT 1    [5, ?] 5 1          sp=4
    ADD      [5, ?] 6            sp=3
    STO 1    [5, 6]              sp=2   x is cell 1
    LOD 1    [5, 6] 6            sp=3
    WRT      writes 6

A prologue can only fill cells 0..k-1 in order. When a variable without
an initializer is declared before an initialized one, the pushed values
do not line up with their offsets and the machine raises ExecutionError
as the prologue ends rather than run with misplaced values.

A bare instruction list carries no prologue length. It is then inferred:
the expression of the first STO or WRT starts where the stack was last
one value shallower, and everything before it is prologue.

Arithmetic
----------
Values are 32-bit two's-complement integers and wrap on overflow. DIV
truncates toward zero. Division by zero, popping an empty stack, reading
an undefined cell and addressing a cell outside the frame raise
ExecutionError.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from plc0.errors import ExecutionError
from plc0.instruction import Instruction, Operation

logger = logging.getLogger(__name__)


def wrap32(value: int) -> int:
    """Wrap an integer into the signed 32-bit range."""
    return ((value + 2**31) % 2**32) - 2**31


def _divide(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


_ARITHMETIC: dict[Operation, Callable[[int, int], int]] = {
    Operation.ADD: lambda a, b: a + b,
    Operation.SUB: lambda a, b: a - b,
    Operation.MUL: lambda a, b: a * b,
    Operation.DIV: _divide,
}

# Net change of the stack depth, for the instructions that can appear in
# an expression
_STACK_EFFECT = {
    Operation.LIT: 1,
    Operation.LOD: 1,
    Operation.ADD: -1,
    Operation.SUB: -1,
    Operation.MUL: -1,
    Operation.DIV: -1,
}


def find_prologue(instructions: Sequence[Instruction]) -> int:
    """
    Infer the length of the declaration prologue of an instruction list.

    Args:
        instructions: The program, as compiled or parsed from a listing

    Returns:
        Number of leading instructions that belong to the declarations
    """
    depths = [0]
    for index, instruction in enumerate(instructions):
        operation = instruction.operation
        if operation in (Operation.STO, Operation.WRT):
            target = depths[index] - 1
            for position in range(index, -1, -1):
                if depths[position] == target:
                    return position
            return 0
        depths.append(depths[index] + _STACK_EFFECT[operation])
    return len(instructions)


class StackMachine:
    """
    Interpreter for plc0 instruction lists.

    Usage:
        machine = StackMachine(
            result.instructions,
            result.frame_size,
            prologue_length=result.prologue_length,
            initializer_offsets=result.initializer_offsets,
        )
        values = machine.run()

    Attributes:
        instructions: The program being executed
        frame_size: Number of cells reserved before execution
        output: Optional callback invoked with every written value
        prologue_length: Number of leading declaration instructions
        initializer_offsets: Offsets the prologue fills, or None if unknown
    """

    def __init__(
        self,
        instructions: Iterable[Instruction],
        frame_size: int,
        output: Optional[Callable[[int], None]] = None,
        prologue_length: Optional[int] = None,
        initializer_offsets: Optional[Sequence[int]] = None,
    ):
        """
        Initialize the machine.

        Args:
            instructions: Program to execute
            frame_size: Storage cells to reserve below the operand stack
            output: Called with each value written by WRT
            prologue_length: Length of the declaration prologue (default:
                             inferred with find_prologue())
            initializer_offsets: Offsets filled by the prologue in push
                                 order; when given, the layout is checked
                                 as the prologue ends
        """
        self.instructions = list(instructions)
        self.frame_size = frame_size
        self.output = output
        if prologue_length is None:
            prologue_length = find_prologue(self.instructions)
        self.prologue_length = prologue_length
        self.initializer_offsets = (
            tuple(initializer_offsets) if initializer_offsets is not None else None
        )

        self.stack: list[Optional[int]] = [None] * frame_size
        self.sp = 0
        self.pc = 0
        self.written: list[int] = []
        self._in_body = False

    def run(self) -> list[int]:
        """
        Execute every instruction in order.

        Returns:
            The values written by WRT, in order

        Raises:
            ExecutionError: If an instruction cannot be executed
        """
        while self.pc < len(self.instructions):
            self.step()

        logger.debug(f"Executed {len(self.instructions)} instructions, wrote {len(self.written)} values")
        return self.written

    def step(self) -> None:
        """Execute the instruction at the program counter."""
        if not self._in_body and self.pc >= self.prologue_length:
            self._end_prologue()

        instruction = self.instructions[self.pc]
        operation = instruction.operation

        if operation == Operation.LIT:
            self._push(wrap32(instruction.operand))
        elif operation == Operation.LOD:
            value = self.stack[self._cell(instruction.operand)]
            if value is None:
                raise ExecutionError(f"read of undefined cell {instruction.operand}", self.pc)
            self._push(value)
        elif operation == Operation.STO:
            value = self._pop()
            self.stack[self._cell(instruction.operand)] = value
        elif operation == Operation.WRT:
            value = self._pop()
            self.written.append(value)
            if self.output is not None:
                self.output(value)
        else:
            right = self._pop()
            left = self._pop()
            if operation == Operation.DIV and right == 0:
                raise ExecutionError("division by zero", self.pc)
            self._push(wrap32(_ARITHMETIC[operation](left, right)))

        self.pc += 1

    def _end_prologue(self) -> None:
        """Check the declared cells and move the operand stack above the frame."""
        filled = self.sp
        if filled > self.frame_size:
            raise ExecutionError(
                f"declarations pushed {filled} values into a frame of {self.frame_size}",
                self.pc,
            )
        if self.initializer_offsets is not None and self.initializer_offsets != tuple(range(filled)):
            raise ExecutionError(
                f"declared values for offsets {list(self.initializer_offsets)} "
                f"were pushed into cells 0 to {filled - 1}; a variable without "
                f"an initializer precedes an initialized declaration",
                self.pc,
            )

        # Cells above the declared values only held initializer temporaries
        del self.stack[self.frame_size:]
        for offset in range(filled, self.frame_size):
            self.stack[offset] = None

        self.sp = self.frame_size
        self._in_body = True
        logger.debug(f"Prologue ended at instruction {self.pc} with {filled} declared values")

    # =========================================================================
    # Stack Access
    # =========================================================================

    def _push(self, value: int) -> None:
        if self.sp < len(self.stack):
            self.stack[self.sp] = value
        else:
            self.stack.append(value)
        self.sp += 1

    def _pop(self) -> int:
        floor = self.frame_size if self._in_body else 0
        if self.sp == floor:
            raise ExecutionError("stack underflow", self.pc)
        self.sp -= 1
        return self.stack[self.sp]

    def _cell(self, offset: int) -> int:
        if not 0 <= offset < self.frame_size:
            raise ExecutionError(f"cell {offset} is outside the frame", self.pc)
        return offset


def run_program(result, output: Optional[Callable[[int], None]] = None) -> list[int]:
    """
    Execute a compilation result.

    Args:
        result: A CompilerResult or AnalysisResult
        output: Called with each value written by WRT

    Returns:
        The values written by WRT, in order
    """
    machine = StackMachine(
        result.instructions,
        result.frame_size,
        output,
        prologue_length=result.prologue_length,
        initializer_offsets=result.initializer_offsets,
    )
    return machine.run()
