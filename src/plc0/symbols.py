"""
Symbol Table
============

A single flat scope mapping identifier names to their declaration
records. Entries are added only by declarations and never removed, and
each new entry receives the next stack offset, so offsets are unique and
increase in declaration order starting at 0.
"""

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass
class SymbolEntry:
    """
    Declaration record of one constant or variable.

    Attributes:
        is_constant: True for names declared with 'const'
        is_initialized: True once a value has been stored
        stack_offset: Storage slot assigned at declaration time
    """
    is_constant: bool
    is_initialized: bool
    stack_offset: int


class SymbolTable:
    """Insertion-ordered name -> SymbolEntry mapping for one compilation."""

    def __init__(self) -> None:
        self._entries: dict[str, SymbolEntry] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self):
        return self._entries.items()

    @property
    def next_offset(self) -> int:
        """Offset the next declaration will receive (the frame size so far)."""
        return len(self._entries)

    def get(self, name: str) -> Optional[SymbolEntry]:
        return self._entries.get(name)

    def declare(self, name: str, is_constant: bool, is_initialized: bool) -> SymbolEntry:
        """
        Add a new symbol with the next free offset.

        Raises:
            KeyError: If the name is already declared
        """
        if name in self._entries:
            raise KeyError(name)

        entry = SymbolEntry(is_constant, is_initialized, self.next_offset)
        self._entries[name] = entry
        return entry

    def offsets(self) -> dict[str, int]:
        """Map every declared name to its stack offset."""
        return {name: entry.stack_offset for name, entry in self._entries.items()}
