"""Error taxonomy for pi-watch.

Every ``WatchError`` carries the process exit code the CLI uses when the
error reaches the top level.  ``SizeQueryError`` is the only recoverable
member: the scheduler catches it and keeps the last known dimensions.
"""

from __future__ import annotations


class WatchError(Exception):
    """Base class for all pi-watch failures."""

    exit_code: int = 1


class UsageError(WatchError):
    """The command line could not be parsed."""

    exit_code = 1


class SpawnError(WatchError):
    """The monitored command could not be started."""

    exit_code = 2


class AllocationError(WatchError):
    """The output buffer could not grow."""

    exit_code = 1


class ClockError(WatchError):
    """The monotonic clock could not be read."""

    exit_code = 1


class SizeQueryError(WatchError):
    """The terminal size is unavailable."""


class TerminationRequested(Exception):
    """Raised from a signal handler to unwind the main loop.

    Not a ``WatchError``: a termination request is a successful exit.
    """

    exit_code = 0

    def __init__(self, signum: int) -> None:
        super().__init__(f"terminated by signal {signum}")
        self.signum = signum
