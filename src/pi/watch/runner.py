"""Subprocess execution with chunked, incremental output reads."""

from __future__ import annotations

import logging
import subprocess
from typing import IO, Protocol

from pi.watch.errors import SpawnError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128


class Runner(Protocol):
    """A single run of the monitored command."""

    @property
    def at_eof(self) -> bool: ...

    def read_chunk(self) -> bytes: ...

    def close(self) -> None: ...


class ProcessRunner:
    """Runs a shell command and exposes its output as a chunked byte stream.

    stderr is merged into stdout so the command's diagnostics land inside
    the viewport instead of on top of it.
    """

    def __init__(self, command: str, chunk_size: int = CHUNK_SIZE) -> None:
        self.command = command
        self.chunk_size = chunk_size
        self.returncode: int | None = None
        self._proc: subprocess.Popen[bytes] | None = None
        self._stdout: IO[bytes] | None = None
        self._at_eof = False

    @classmethod
    def start(cls, command: str, chunk_size: int = CHUNK_SIZE) -> ProcessRunner:
        runner = cls(command, chunk_size)
        runner.spawn()
        return runner

    @property
    def at_eof(self) -> bool:
        return self._at_eof

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None

    def spawn(self) -> None:
        try:
            self._proc = subprocess.Popen(
                self.command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise SpawnError(f"cannot run {self.command!r}: {exc}") from exc
        self._stdout = self._proc.stdout
        self._at_eof = False
        logger.debug("spawned pid=%d: %s", self._proc.pid, self.command)

    def read_chunk(self) -> bytes:
        """Read at most ``chunk_size`` bytes; an empty result means end-of-stream."""
        if self._stdout is None or self._at_eof:
            return b""
        data = self._stdout.read1(self.chunk_size)  # type: ignore[attr-defined]
        if not data:
            self._at_eof = True
        return data

    def close(self) -> None:
        """Close the pipe and reap the child, terminating it if still running."""
        if self._proc is None:
            return
        proc = self._proc
        drained = self._at_eof
        self._proc = None
        if self._stdout is not None:
            self._stdout.close()
            self._stdout = None
        self._at_eof = True
        # A child that already closed its output is left to exit on its own.
        if not drained and proc.poll() is None:
            proc.terminate()
        try:
            self.returncode = proc.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            proc.kill()
            self.returncode = proc.wait()
        logger.info("command exited with status %s", self.returncode)

    def __enter__(self) -> ProcessRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
