"""The redraw loop: re-run, render, page, repeat.

Each :meth:`RedrawScheduler.tick` performs, in order:

1. drain the pending-resize cell and adopt the new terminal size,
2. clamp the viewport against the known bottom of the output,
3. if the interval elapsed or the view changed, clear the screen (and on an
   interval, start a fresh run of the command),
4. draw the title,
5. replay the output buffer through the viewport, reading more command
   output in chunks whenever the replay catches up with what has been read,
6. flush the screen in one write,
7. poll for one paging key,
8. check the interval timer.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable

from pi.watch.buffer import LogicalCursor, OutputBuffer, is_printable
from pi.watch.config import WatchConfig
from pi.watch.diff import annotate
from pi.watch.errors import ClockError, SizeQueryError
from pi.watch.keys import Key, parse_key
from pi.watch.runner import ProcessRunner, Runner
from pi.watch.screen import Screen
from pi.watch.signals import PendingEvent
from pi.watch.terminal import Terminal
from pi.watch.text import take_columns, visible_width
from pi.watch.viewport import TerminalDimensions, Viewport

logger = logging.getLogger(__name__)

POLL_TIMEOUT = 0.1

_ELLIPSIS = "...  "

RunnerFactory = Callable[[str], Runner]
Clock = Callable[[], float]


class SchedulerState(enum.Enum):
    """What the scheduler is doing; READING while blocked on the command's pipe."""

    IDLE = "idle"
    READING = "reading"
    RENDERING = "rendering"


def format_title(interval: float, command: str, columns: int, timestamp: str) -> str:
    """Build the title line for a terminal *columns* wide.

    The interval and command are left-justified and the timestamp is
    right-justified.  When the header would run into the timestamp it is cut
    short and ``"...  "`` is inserted before the timestamp.
    """
    header = f"Every {interval:.1f}s: {take_columns(command, columns - 1)}"
    ts_col = columns - visible_width(timestamp)
    if ts_col - len(_ELLIPSIS) < 0:
        return take_columns(header, columns)

    if visible_width(header) > ts_col - 2:
        left = take_columns(header, ts_col - len(_ELLIPSIS)) + _ELLIPSIS
    else:
        left = header
    return left + " " * (ts_col - visible_width(left)) + timestamp


class RedrawScheduler:
    """Owns every piece of mutable state and drives one tick at a time."""

    def __init__(
        self,
        config: WatchConfig,
        terminal: Terminal,
        *,
        runner_factory: RunnerFactory = ProcessRunner.start,
        clock: Clock = time.monotonic,
        timestamp: Callable[[], str] = time.ctime,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.terminal = terminal
        self._runner_factory = runner_factory
        self._clock = clock
        self._timestamp = timestamp
        self._sleep = sleep

        dimensions = self._query_size(TerminalDimensions())
        self.viewport = Viewport(dimensions, title_rows=config.title_rows)
        self.screen = Screen(dimensions)

        self.buffer = OutputBuffer()
        self.previous = OutputBuffer()
        self.runner: Runner | None = None

        self.resize_event = PendingEvent()
        self.state = SchedulerState.IDLE
        self.rerun = True
        self.view_changed = False
        self.runs = 0
        self.redraws = 0
        self._epoch = self._now()
        self._stopped = False

    # -- main loop ----------------------------------------------------------

    def run(self, max_ticks: int | None = None) -> None:
        """Take over the terminal and tick until stopped.

        The terminal is restored and the command's pipe closed on every exit
        path, including exceptions raised from signal handlers.
        """
        self.terminal.start(self.resize_event.set)
        try:
            ticks = 0
            while not self._stopped:
                self.tick()
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
        finally:
            try:
                self.close()
            finally:
                self.terminal.stop()

    def stop(self) -> None:
        self._stopped = True

    def close(self) -> None:
        if self.runner is not None:
            self.runner.close()
            self.runner = None

    def tick(self) -> None:
        if self.resize_event.drain():
            self._handle_resize()

        self.viewport.clamp()

        if self.rerun or self.view_changed:
            self.screen.clear()
            if self.rerun:
                self._start_run()
            if self.config.show_title:
                self._draw_title()
            self.render()
            self.screen.flush(self.terminal)
            self.redraws += 1

        self._enter(SchedulerState.IDLE)
        self.view_changed = False
        self._poll_input()
        self._update_timer()

    def _enter(self, state: SchedulerState) -> None:
        if state is not self.state:
            logger.debug("state %s -> %s", self.state.value, state.value)
            self.state = state

    # -- run lifecycle ------------------------------------------------------

    def _start_run(self) -> None:
        self.close()
        self.previous = self.buffer
        self.buffer = OutputBuffer()
        self.viewport.forget_bottom()
        self.runner = self._runner_factory(self.config.command)
        self.runs += 1
        logger.info("run %d: %s", self.runs, self.config.command)

    def _read_more(self) -> None:
        """Append one chunk of command output and diff the new span."""
        assert self.runner is not None
        self._enter(SchedulerState.READING)
        chunk = self.runner.read_chunk()
        if chunk:
            start, end = self.buffer.append(chunk)
            annotate(self.buffer, self.previous, start, end, self.config.diff_mode)
        self._enter(SchedulerState.RENDERING)

    # -- drawing ------------------------------------------------------------

    def _draw_title(self) -> None:
        line = format_title(
            self.config.interval,
            self.config.command,
            self.screen.columns,
            self._timestamp(),
        )
        self.screen.put_text(0, 0, line)

    def render(self) -> None:
        """Replay the buffer into the screen, reading output as needed.

        Replay stops once the cursor passes the bottom of the window.  A
        pending go-to-end request suppresses drawing and keeps reading until
        end-of-stream, then jumps and replays again from offset 0.
        """
        self._enter(SchedulerState.RENDERING)
        viewport = self.viewport
        vstate = viewport.state
        eight_bit = self.config.eight_bit

        while True:
            cursor = LogicalCursor()
            offset = 0
            while True:
                done = False
                while offset < len(self.buffer) and not done:
                    cell = self.buffer[offset]
                    if not vstate.go_to_end and is_printable(cell.char, eight_bit):
                        pos = viewport.translate(cursor.x, cursor.y)
                        if pos is not None:
                            self.screen.put(
                                pos[0], pos[1], chr(cell.char), cell.highlighted
                            )
                    cursor.advance(cell.char)
                    offset += 1
                    done = not vstate.go_to_end and viewport.past_window(cursor.y)

                if done:
                    return

                if self.runner is None or self.runner.at_eof:
                    break
                self._read_more()

            if not viewport.resolve_end(cursor.y):
                return

    # -- input --------------------------------------------------------------

    def _poll_input(self) -> None:
        if not self.config.paging:
            self._sleep(POLL_TIMEOUT)
            return
        data = self.terminal.read_key(POLL_TIMEOUT)
        if data is not None:
            self.dispatch_key(data)

    def dispatch_key(self, data: str) -> bool:
        """Apply a paging key.  Returns ``True`` if the key was recognized."""
        key = parse_key(data)
        viewport = self.viewport
        if key == Key.up:
            viewport.scroll("up")
        elif key == Key.down:
            viewport.scroll("down")
        elif key == Key.left:
            viewport.scroll("left")
        elif key == Key.right:
            viewport.scroll("right")
        elif key == Key.page_down:
            viewport.page("down")
        elif key == Key.page_up:
            viewport.page("up")
        elif key in ("g", Key.home):
            viewport.jump_home()
        elif key in ("G", Key.end):
            viewport.jump_end()
        else:
            return False
        self.view_changed = True
        logger.debug(
            "key %s: origin=(%d, %d)",
            key,
            viewport.state.origin_x,
            viewport.state.origin_y,
        )
        return True

    # -- resize -------------------------------------------------------------

    def _query_size(self, fallback: TerminalDimensions) -> TerminalDimensions:
        try:
            return self.terminal.size()
        except SizeQueryError as exc:
            logger.warning("%s; keeping %dx%d", exc, fallback.columns, fallback.rows)
            return fallback

    def _handle_resize(self) -> None:
        dimensions = self._query_size(self.viewport.dimensions)
        self.screen.resize(dimensions)
        self.viewport.resize(dimensions)
        self.view_changed = True
        logger.info("terminal resized to %dx%d", dimensions.columns, dimensions.rows)

    # -- timing -------------------------------------------------------------

    def _now(self) -> float:
        try:
            return self._clock()
        except OSError as exc:
            raise ClockError(f"cannot read the clock: {exc}") from exc

    def _update_timer(self) -> None:
        now = self._now()
        if now - self._epoch >= self.config.interval:
            self._epoch = now
            self.rerun = True
        else:
            self.rerun = False
