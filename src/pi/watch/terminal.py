"""Terminal abstraction for full-screen output and paging input.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that manages cbreak mode, the alternate screen, cursor
visibility, SIGWINCH-based resize detection, and bounded key polling via
ANSI escape sequences and :mod:`select`.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from pi.watch.errors import SizeQueryError
from pi.watch.input_buffer import InputBuffer
from pi.watch.viewport import TerminalDimensions

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"

# Environment overrides outside this range are ignored.
_ENV_SIZE_LIMIT = 666


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self, on_resize: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def read_key(self, timeout: float) -> str | None: ...

    def size(self) -> TerminalDimensions: ...


# ---------------------------------------------------------------------------
# Size detection
# ---------------------------------------------------------------------------


def parse_env_size(value: str | None) -> int | None:
    """Parse a ``COLUMNS``/``LINES`` value, or ``None`` if unusable."""
    if not value:
        return None
    try:
        parsed = int(value, 0)
    except ValueError:
        return None
    if 0 < parsed < _ENV_SIZE_LIMIT:
        return parsed
    return None


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal implementation backed by ``sys.stdin``/``sys.stdout``.

    ``COLUMNS`` and ``LINES`` are read once, at construction; a valid value
    pins that dimension for the lifetime of the process.  Every successful
    size query is exported back into the environment so child commands see
    the viewport size.
    """

    def __init__(self) -> None:
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._input = InputBuffer()
        self._started = False
        self._env_columns = parse_env_size(os.environ.get("COLUMNS"))
        self._env_rows = parse_env_size(os.environ.get("LINES"))

    # -- size ---------------------------------------------------------------

    def size(self) -> TerminalDimensions:
        columns = self._env_columns
        rows = self._env_rows
        if columns is None or rows is None:
            try:
                detected = os.get_terminal_size(sys.stdout.fileno())
            except (ValueError, OSError) as exc:
                raise SizeQueryError(f"terminal size unavailable: {exc}") from exc
            if columns is None and detected.columns > 0:
                columns = detected.columns
            if rows is None and detected.lines > 0:
                rows = detected.lines
            if columns is None or rows is None:
                raise SizeQueryError("terminal reported a zero size")
        os.environ["COLUMNS"] = str(columns)
        os.environ["LINES"] = str(rows)
        return TerminalDimensions(columns=columns, rows=rows)

    # -- start / stop -------------------------------------------------------

    def start(self, on_resize: Callable[[], None]) -> None:
        """Enter cbreak mode and the alternate screen; watch for resizes."""
        self._resize_handler = on_resize

        fd = sys.stdin.fileno()
        try:
            self._original_termios = termios.tcgetattr(fd)
            # cbreak keeps ISIG, so Ctrl+C still raises SIGINT.
            tty.setcbreak(fd)
        except termios.error:
            logger.warning("stdin is not a terminal; input mode unchanged")
            self._original_termios = None

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._raw_write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR + _CLEAR_SCREEN)
        self._started = True

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers.  Idempotent."""
        if not self._started:
            return
        self._started = False

        self._raw_write(_SHOW_CURSOR + _ALT_SCREEN_DISABLE)

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        if self._original_termios is not None:
            fd = sys.stdin.fileno()
            termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._input.clear()
        self._resize_handler = None

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._raw_write(data)

    # -- input --------------------------------------------------------------

    def read_key(self, timeout: float) -> str | None:
        """Wait up to *timeout* seconds for one complete key sequence."""
        key = self._input.pop()
        if key is not None:
            return key

        fd = sys.stdin.fileno()
        try:
            ready, _, _ = select.select([fd], [], [], timeout)
        except InterruptedError:
            return None
        if not ready:
            # Nothing new arrived: a buffered lone ESC is a real keypress.
            self._input.flush()
            return self._input.pop()

        try:
            raw = os.read(fd, 64)
        except OSError:
            return None
        self._input.process(raw.decode("utf-8", errors="replace"))
        return self._input.pop()

    # -- private ------------------------------------------------------------

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._resize_handler is not None:
            self._resize_handler()

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout and flush."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
