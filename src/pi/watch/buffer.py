"""Styled output buffer assembled from raw command output.

Each byte the command writes becomes one ``StyledCell``.  Cell positions are
never stored; they are recovered by replaying the advancement rules with a
``LogicalCursor``:

* ``\\t`` moves the column right by 8 (no tab-stop snapping),
* ``\\n`` returns to column 0 of the next row,
* every other byte, printable or not, moves the column right by 1.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator

from pi.watch.errors import AllocationError

TAB_WIDTH = 8

_TAB = 0x09
_NEWLINE = 0x0A


class Attr(enum.IntFlag):
    """Render attribute bits carried by a cell."""

    NONE = 0
    HIGHLIGHT = 1
    ACCUMULATED = 2


@dataclass(slots=True)
class StyledCell:
    """A display byte plus its render attributes."""

    char: int
    attrs: Attr = Attr.NONE

    @property
    def highlighted(self) -> bool:
        return bool(self.attrs & (Attr.HIGHLIGHT | Attr.ACCUMULATED))


def is_printable(char: int, eight_bit: bool = False) -> bool:
    """Return ``True`` if *char* is drawn on screen.

    Printable ASCII is 0x20-0x7E.  In eight-bit mode bytes from 0xA0 up are
    printable as well (they are rendered as Latin-1).
    """
    if 0x20 <= char <= 0x7E:
        return True
    return eight_bit and char >= 0xA0


@dataclass
class LogicalCursor:
    """Position of the next cell while replaying a buffer from offset 0."""

    x: int = 0
    y: int = 0

    def advance(self, char: int) -> None:
        if char == _TAB:
            self.x += TAB_WIDTH
        elif char == _NEWLINE:
            self.x = 0
            self.y += 1
        else:
            self.x += 1


@dataclass
class OutputBuffer:
    """Append-only sequence of ``StyledCell`` for a single run."""

    cells: list[StyledCell] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, offset: int) -> StyledCell:
        return self.cells[offset]

    def __iter__(self) -> Iterator[StyledCell]:
        return iter(self.cells)

    def append(self, raw: bytes) -> tuple[int, int]:
        """Append one cell per byte of *raw* and return the new ``(start, end)`` span."""
        start = len(self.cells)
        try:
            self.cells.extend(StyledCell(b) for b in raw)
        except MemoryError as exc:
            raise AllocationError(
                f"couldn't grow output buffer past {start} cells"
            ) from exc
        return start, len(self.cells)

    def text(self) -> bytes:
        """Return the bare bytes, attributes stripped."""
        return bytes(cell.char for cell in self.cells)

    def positions(self) -> Iterator[tuple[int, int, int, StyledCell]]:
        """Yield ``(offset, x, y, cell)`` for every cell."""
        cursor = LogicalCursor()
        for offset, cell in enumerate(self.cells):
            yield offset, cursor.x, cursor.y, cell
            cursor.advance(cell.char)

    def row_count(self) -> int:
        """Return the row the cursor lands on after the last cell."""
        cursor = LogicalCursor()
        for cell in self.cells:
            cursor.advance(cell.char)
        return cursor.y
