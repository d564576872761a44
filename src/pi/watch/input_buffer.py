"""Splits raw terminal input into complete key sequences.

Input can arrive in partial chunks, especially escape sequences.  Without
buffering, the tail of a sequence would be misread as separate keypresses.
"""

from __future__ import annotations

ESC = "\x1b"


def _is_complete_sequence(data: str) -> str:
    """Classify *data* as "complete", "incomplete", or "not-escape"."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    # CSI sequences: ESC [ <params> <final byte 0x40-0x7E>
    if after_esc.startswith("["):
        if len(data) < 3:
            return "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    # SS3 sequences: ESC O <char>
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # ESC plus any other single character (Alt+key)
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Return the complete key sequences at the front of *buffer* and the unfinished tail."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        seq_end = 1
        while seq_end <= len(remaining):
            if _is_complete_sequence(remaining[:seq_end]) == "complete":
                break
            seq_end += 1
        else:
            return sequences, remaining

        sequences.append(remaining[:seq_end])
        pos += seq_end

    return sequences, ""


class InputBuffer:
    """Accumulates input and hands out complete sequences one at a time."""

    def __init__(self) -> None:
        self._buffer = ""
        self._ready: list[str] = []

    def process(self, data: str) -> None:
        sequences, self._buffer = _extract_complete_sequences(self._buffer + data)
        self._ready.extend(sequences)

    def flush(self) -> None:
        """Emit a stalled partial sequence (e.g. a lone ESC) as-is."""
        if self._buffer:
            self._ready.append(self._buffer)
            self._buffer = ""

    def pop(self) -> str | None:
        if not self._ready:
            return None
        return self._ready.pop(0)

    def clear(self) -> None:
        self._buffer = ""
        self._ready.clear()
