"""Scroll state and logical-to-screen coordinate mapping.

The viewport shows ``page_height`` logical rows (terminal rows minus the
title rows) starting at ``origin_y`` and ``columns`` logical columns starting
at ``origin_x``.  The bottom of the content is only known once a run has
been read to end-of-stream; until then ``max_known_row`` is ``-1`` and
scrolling down is unbounded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

SCROLL_STEP = 8

Direction = Literal["up", "down", "left", "right"]


@dataclass(frozen=True)
class TerminalDimensions:
    columns: int = 80
    rows: int = 24


@dataclass
class ViewportState:
    origin_x: int = 0
    origin_y: int = 0
    max_known_row: int = -1
    go_to_end: bool = False

    @property
    def bottom_known(self) -> bool:
        return self.max_known_row >= 0


class Viewport:
    """Owns a ``ViewportState`` and applies paging operations to it."""

    def __init__(
        self,
        dimensions: TerminalDimensions,
        title_rows: int = 0,
        state: ViewportState | None = None,
    ) -> None:
        self.dimensions = dimensions
        self.title_rows = title_rows
        self.state = state if state is not None else ViewportState()

    # -- geometry -----------------------------------------------------------

    @property
    def page_height(self) -> int:
        return max(0, self.dimensions.rows - self.title_rows)

    @property
    def width(self) -> int:
        return self.dimensions.columns

    def max_origin_y(self) -> int | None:
        """Largest valid ``origin_y``, or ``None`` while the bottom is unknown."""
        if not self.state.bottom_known:
            return None
        return max(0, self.state.max_known_row - self.page_height)

    def translate(self, x: int, y: int) -> tuple[int, int] | None:
        """Map logical ``(x, y)`` to a screen position, or ``None`` if clipped."""
        s = self.state
        if not (s.origin_y <= y < s.origin_y + self.page_height):
            return None
        if not (s.origin_x <= x < s.origin_x + self.width):
            return None
        return x - s.origin_x, y - s.origin_y + self.title_rows

    def past_window(self, y: int) -> bool:
        """``True`` once row *y* lies beyond the visible window."""
        return y > self.state.origin_y + self.page_height

    # -- clamping -----------------------------------------------------------

    def clamp(self) -> None:
        s = self.state
        ceiling = self.max_origin_y()
        if ceiling is not None and s.origin_y > ceiling:
            s.origin_y = ceiling
        if s.origin_y < 0:
            s.origin_y = 0
        if s.origin_x < 0:
            s.origin_x = 0

    def resize(self, dimensions: TerminalDimensions) -> None:
        self.dimensions = dimensions
        self.clamp()

    # -- paging operations --------------------------------------------------

    def scroll(self, direction: Direction, amount: int = SCROLL_STEP) -> None:
        s = self.state
        if direction == "up":
            s.origin_y -= amount
        elif direction == "down":
            s.origin_y += amount
        elif direction == "left":
            s.origin_x -= amount
        elif direction == "right":
            s.origin_x += amount
        else:
            raise ValueError(f"unknown scroll direction: {direction!r}")
        self.clamp()

    def page(self, direction: Literal["up", "down"]) -> None:
        self.scroll(direction, self.page_height)

    def jump_home(self) -> None:
        self.state.origin_x = 0
        self.state.origin_y = 0

    def jump_end(self) -> None:
        self.state.origin_x = 0
        self.state.go_to_end = True

    def forget_bottom(self) -> None:
        """Called when a new run starts: the previous extent no longer applies."""
        self.state.max_known_row = -1

    def resolve_end(self, max_row: int) -> bool:
        """Record the final row of a completed run.

        Returns ``True`` if a pending go-to-end request was honored, in which
        case the caller must render again from offset 0.
        """
        s = self.state
        s.max_known_row = max_row
        if not s.go_to_end:
            return False
        s.origin_y = max(0, max_row - self.page_height)
        s.go_to_end = False
        logger.debug("go-to-end resolved: max_row=%d origin_y=%d", max_row, s.origin_y)
        return True
