"""
Character Source
================

The tokenizer reads characters through a SourceReader, which provides
one-character lookahead and tracks line/column positions so every token
can report where it starts and ends.

Positions are 1-indexed. A newline character advances the line and resets
the column; every other character advances the column by one.
"""

from pathlib import Path
from typing import Optional

from plc0.errors import SourceLocation


class SourceReader:
    """
    Character cursor over a source text.

    Usage:
        reader = SourceReader("begin end", "prog.pl0")
        while not reader.is_eof():
            char = reader.next_char()

    Attributes:
        text: The complete source text
        filename: Name used in positions and error messages
    """

    def __init__(self, text: str, filename: str = "<input>"):
        self.text = text
        self.filename = filename
        # Only "\n" ends a line, matching how positions advance
        self._lines = [line.removesuffix("\r") for line in text.split("\n")]

        self._pos = 0
        self._line = 1
        self._column = 1

        # Position of the most recently consumed character
        self._previous = SourceLocation(filename, 1, 1)

    @classmethod
    def from_file(cls, path: str | Path) -> "SourceReader":
        """Create a reader over the contents of a UTF-8 file."""
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), str(path))

    def is_eof(self) -> bool:
        """Return True once every character has been consumed."""
        return self._pos >= len(self.text)

    def peek_char(self) -> str:
        """Return the current character without consuming it ("" at end)."""
        if self.is_eof():
            return ""
        return self.text[self._pos]

    def next_char(self) -> str:
        """Consume and return the current character ("" at end)."""
        if self.is_eof():
            return ""

        self._previous = self.current_pos()
        char = self.text[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def current_pos(self) -> SourceLocation:
        """Position of the next character to be consumed."""
        return SourceLocation(self.filename, self._line, self._column)

    def previous_pos(self) -> SourceLocation:
        """Position of the most recently consumed character."""
        return self._previous

    def line_text(self, line: int) -> Optional[str]:
        """Return the text of a source line for error context."""
        if 0 < line <= len(self._lines):
            return self._lines[line - 1]
        return None
