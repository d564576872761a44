"""Immutable runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass

from pi.watch.diff import DiffMode

DEFAULT_INTERVAL = 2.0
MIN_INTERVAL = 0.1
# Largest interval whose microsecond count fits in an unsigned 32-bit int.
MAX_INTERVAL = float((2**32 - 1) // 1_000_000)

TITLE_ROWS = 2


def clamp_interval(seconds: float) -> float:
    return min(max(seconds, MIN_INTERVAL), MAX_INTERVAL)


@dataclass(frozen=True)
class WatchConfig:
    """Settings fixed at startup by the command line."""

    command: str
    interval: float = DEFAULT_INTERVAL
    diff_mode: DiffMode = DiffMode.OFF
    show_title: bool = True
    paging: bool = False
    eight_bit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "interval", clamp_interval(self.interval))

    @property
    def title_rows(self) -> int:
        return TITLE_ROWS if self.show_title else 0
