"""pi-watch: execute a program periodically, showing output fullscreen."""

import logging

__version__ = "0.2.0"

from pi.watch.buffer import Attr, LogicalCursor, OutputBuffer, StyledCell, is_printable
from pi.watch.config import WatchConfig
from pi.watch.diff import DiffMode, annotate
from pi.watch.errors import (
    AllocationError,
    ClockError,
    SizeQueryError,
    SpawnError,
    TerminationRequested,
    UsageError,
    WatchError,
)
from pi.watch.runner import ProcessRunner
from pi.watch.scheduler import RedrawScheduler, SchedulerState, format_title
from pi.watch.viewport import TerminalDimensions, Viewport, ViewportState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Buffer
    "Attr",
    "LogicalCursor",
    "OutputBuffer",
    "StyledCell",
    "is_printable",
    # Diff
    "DiffMode",
    "annotate",
    # Errors
    "AllocationError",
    "ClockError",
    "SizeQueryError",
    "SpawnError",
    "TerminationRequested",
    "UsageError",
    "WatchError",
    # Runtime
    "ProcessRunner",
    "RedrawScheduler",
    "SchedulerState",
    "WatchConfig",
    "format_title",
    # Viewport
    "TerminalDimensions",
    "Viewport",
    "ViewportState",
]
