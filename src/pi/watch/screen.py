"""Off-screen cell grid flushed to the terminal in one write.

The scheduler clears the grid, draws the title and the visible slice of the
output buffer into it, then calls :meth:`Screen.flush`, which emits every row
as ANSI text in a single ``Terminal.write``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import grapheme

from pi.watch.text import grapheme_width
from pi.watch.viewport import TerminalDimensions

if TYPE_CHECKING:
    from pi.watch.terminal import Terminal

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_REVERSE = "\x1b[7m"
_RESET = "\x1b[0m"
_CLEAR_TO_EOL = "\x1b[K"
_MOVE_FMT = "\x1b[{};{}H"
_SYNC_START = "\x1b[?2026h"
_SYNC_END = "\x1b[?2026l"

_BLANK = (" ", False)

# Placeholder for the columns covered by a wide glyph.
_CONTINUATION = ("", False)


class Screen:
    """A ``columns`` x ``rows`` grid of ``(text, reverse)`` cells."""

    def __init__(self, dimensions: TerminalDimensions) -> None:
        self.dimensions = dimensions
        self._grid: list[list[tuple[str, bool]]] = []
        self.clear()

    @property
    def columns(self) -> int:
        return self.dimensions.columns

    @property
    def rows(self) -> int:
        return self.dimensions.rows

    def resize(self, dimensions: TerminalDimensions) -> None:
        self.dimensions = dimensions
        self.clear()

    def clear(self) -> None:
        self._grid = [[_BLANK] * self.columns for _ in range(self.rows)]

    def put(self, x: int, y: int, char: str, reverse: bool = False) -> None:
        """Place a single-column character.  Out-of-bounds writes are dropped."""
        if 0 <= y < self.rows and 0 <= x < self.columns:
            self._grid[y][x] = (char, reverse)

    def put_text(self, x: int, y: int, text: str) -> None:
        """Write *text* starting at ``(x, y)``, clipped at the right edge."""
        if not 0 <= y < self.rows:
            return
        row = self._grid[y]
        col = x
        for g in grapheme.graphemes(text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if col + w > self.columns:
                break
            if col >= 0:
                row[col] = (g, False)
                for extra in range(1, w):
                    row[col + extra] = _CONTINUATION
            col += w

    def lines(self) -> list[str]:
        """Return each row as plain text with trailing blanks stripped."""
        return ["".join(text for text, _ in row).rstrip() for row in self._grid]

    def reversed_cells(self) -> list[tuple[int, int]]:
        """Return the ``(x, y)`` of every reverse-video cell, row-major."""
        return [
            (x, y)
            for y, row in enumerate(self._grid)
            for x, (_, reverse) in enumerate(row)
            if reverse
        ]

    def render(self) -> str:
        """Encode the whole grid as a single ANSI string."""
        out: list[str] = [_SYNC_START]
        for y, row in enumerate(self._grid):
            out.append(_MOVE_FMT.format(y + 1, 1))
            styled = False
            for text, reverse in row:
                if reverse != styled:
                    out.append(_REVERSE if reverse else _RESET)
                    styled = reverse
                out.append(text)
            if styled:
                out.append(_RESET)
            out.append(_CLEAR_TO_EOL)
        out.append(_SYNC_END)
        return "".join(out)

    def flush(self, terminal: Terminal) -> None:
        terminal.write(self.render())
