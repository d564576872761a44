"""Signal wiring: termination requests and the pending-resize cell."""

from __future__ import annotations

import signal
from typing import Any

from pi.watch.errors import TerminationRequested

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class PendingEvent:
    """A single-slot flag set asynchronously and drained once per tick.

    Setting it twice before a drain is the same as setting it once.
    """

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending = False

    def set(self) -> None:
        self._pending = True

    def is_set(self) -> bool:
        return self._pending

    def drain(self) -> bool:
        """Return whether the event fired since the last drain, and reset it."""
        pending = self._pending
        self._pending = False
        return pending


def _raise_termination(signum: int, frame: Any) -> None:
    raise TerminationRequested(signum)


def install_signal_handlers() -> dict[int, Any]:
    """Route termination signals to ``TerminationRequested``.

    Returns the previous handlers, keyed by signal number, for
    :func:`restore_signal_handlers`.
    """
    previous: dict[int, Any] = {}
    for signum in TERMINATION_SIGNALS:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _raise_termination)
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    for signum, handler in previous.items():
        if handler is not None:
            signal.signal(signum, handler)
