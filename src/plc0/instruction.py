"""
Stack-Machine Instructions
==========================

The compiled artifact is an ordered list of instructions, each an
operation plus an optional integer operand.

| Operation | Operand | Effect                                   |
|-----------|---------|------------------------------------------|
| LIT       | value   | push the constant value                  |
| LOD       | offset  | push the value stored at offset          |
| STO       | offset  | pop a value and store it at offset       |
| ADD       |         | pop b, pop a, push a + b                 |
| SUB       |         | pop b, pop a, push a - b                 |
| MUL       |         | pop b, pop a, push a * b                 |
| DIV       |         | pop b, pop a, push a / b                 |
| WRT       |         | pop a value and write it to the output   |

Textual Form
------------
Each instruction prints as its operation name, followed by the operand
when the operation takes one:

    LIT 5
    LOD 0
    ADD
    WRT

parse_instructions() reads this form back. Blank lines and text after
'#' are ignored.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional

from plc0.errors import InstructionFormatError


class Operation(Enum):
    """Stack-machine operations."""

    LIT = auto()
    LOD = auto()
    STO = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    WRT = auto()

    @property
    def takes_operand(self) -> bool:
        """True for LIT, LOD and STO."""
        return self in (Operation.LIT, Operation.LOD, Operation.STO)


@dataclass(frozen=True)
class Instruction:
    """
    One stack-machine instruction.

    Attributes:
        operation: The Operation to perform
        operand: Constant or stack offset for LIT/LOD/STO, else None
    """
    operation: Operation
    operand: Optional[int] = None

    def __post_init__(self):
        if self.operation.takes_operand and self.operand is None:
            raise ValueError(f"{self.operation.name} requires an operand")
        if not self.operation.takes_operand and self.operand is not None:
            raise ValueError(f"{self.operation.name} takes no operand")

    def __str__(self) -> str:
        if self.operand is None:
            return self.operation.name
        return f"{self.operation.name} {self.operand}"


def format_instructions(instructions: Iterable[Instruction]) -> str:
    """Render a program in textual form, one instruction per line."""
    return "".join(f"{instruction}\n" for instruction in instructions)


def parse_instructions(text: str) -> list[Instruction]:
    """
    Parse a textual instruction listing.

    Raises:
        InstructionFormatError: On unknown operations or bad operands
    """
    instructions = []

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        fields = line.split()
        name = fields[0].upper()
        try:
            operation = Operation[name]
        except KeyError:
            raise InstructionFormatError("unknown operation", line_number, raw) from None

        operand = None
        if operation.takes_operand:
            if len(fields) != 2:
                raise InstructionFormatError(
                    f"{name} requires one operand", line_number, raw
                )
            try:
                operand = int(fields[1])
            except ValueError:
                raise InstructionFormatError(
                    "operand is not an integer", line_number, raw
                ) from None
        elif len(fields) != 1:
            raise InstructionFormatError(f"{name} takes no operand", line_number, raw)

        instructions.append(Instruction(operation, operand))

    return instructions
