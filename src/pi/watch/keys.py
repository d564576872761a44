"""Key identification for paging input.

Maps the legacy CSI/SS3 sequences terminals send for navigation keys to key
identifiers such as ``"up"`` or ``"pageDown"``.  Printable characters map to
themselves, so ``"g"`` and ``"G"`` stay distinct.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants."""

    escape = "escape"
    enter = "enter"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"


# ---------------------------------------------------------------------------
# Legacy terminal sequences
# ---------------------------------------------------------------------------

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
}


def parse_key(data: str) -> KeyId | None:
    """Parse one complete input sequence and return its key identifier."""
    if not data:
        return None

    key = LEGACY_KEY_SEQUENCES.get(data)
    if key is not None:
        return key

    if data == "\x1b":
        return Key.escape
    if data in ("\r", "\n"):
        return Key.enter

    if len(data) == 1 and data.isprintable():
        return data

    return None
