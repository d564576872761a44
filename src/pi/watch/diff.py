"""Per-offset differencing between two runs' output buffers."""

from __future__ import annotations

import enum

from pi.watch.buffer import Attr, OutputBuffer


class DiffMode(enum.Enum):
    OFF = "off"
    HIGHLIGHT = "highlight"
    CUMULATIVE = "cumulative"


def annotate(
    buffer: OutputBuffer,
    previous: OutputBuffer,
    start: int,
    end: int,
    mode: DiffMode,
) -> int:
    """Tag cells in ``buffer[start:end]`` that differ from *previous*.

    Only offsets that exist in *previous* are compared.  A differing byte
    gets ``Attr.HIGHLIGHT``.  In cumulative mode the previous cell's
    attributes are OR-ed in as well, so a highlight survives after the byte
    stabilizes.

    Returns the number of cells whose byte changed.
    """
    if mode is DiffMode.OFF:
        return 0

    changed = 0
    stop = min(end, len(previous))
    for offset in range(start, stop):
        cell = buffer[offset]
        prior = previous[offset]
        if cell.char != prior.char:
            cell.attrs |= Attr.HIGHLIGHT
            changed += 1
        if mode is DiffMode.CUMULATIVE and prior.attrs:
            cell.attrs |= prior.attrs | Attr.ACCUMULATED
    return changed
