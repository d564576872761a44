"""Display-width measurement for title text.

Command output is classified byte by byte, but the title line shows the
command string itself, which may hold wide or combining characters.  These
helpers measure and clip such text by terminal columns.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and combining marks are zero-width; emoji sequences
    (VS16, ZWJ, skin tones, regional indicators) are two columns; everything
    else is delegated to ``wcwidth`` for the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*."""
    if not text:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in text):
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(text))
    return _cache_width(text, total)


def take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* that fits in *max_cols* columns.

    The text is cut at grapheme boundaries.
    """
    if max_cols <= 0:
        return ""
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)
