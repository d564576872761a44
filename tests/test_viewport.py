"""Tests for pi.watch.viewport -- clipping, scrolling, and go-to-end."""

from __future__ import annotations

import pytest

from pi.watch.viewport import (
    SCROLL_STEP,
    TerminalDimensions,
    Viewport,
)


def make_viewport(rows: int = 24, columns: int = 80, title_rows: int = 0) -> Viewport:
    return Viewport(TerminalDimensions(columns=columns, rows=rows), title_rows=title_rows)


# ---------------------------------------------------------------------------
# translate
# ---------------------------------------------------------------------------


class TestTranslate:
    def test_origin_maps_to_top_left(self) -> None:
        vp = make_viewport()
        assert vp.translate(0, 0) == (0, 0)

    def test_title_rows_offset_screen_row(self) -> None:
        vp = make_viewport(title_rows=2)
        assert vp.translate(3, 0) == (3, 2)

    def test_clipped_right(self) -> None:
        vp = make_viewport(columns=10)
        assert vp.translate(9, 0) == (9, 0)
        assert vp.translate(10, 0) is None

    def test_clipped_bottom_respects_title(self) -> None:
        vp = make_viewport(rows=10, title_rows=2)
        assert vp.page_height == 8
        assert vp.translate(0, 7) == (0, 9)
        assert vp.translate(0, 8) is None

    def test_scrolled_origin(self) -> None:
        vp = make_viewport(rows=10, columns=10)
        vp.state.origin_x = 4
        vp.state.origin_y = 5
        assert vp.translate(3, 5) is None
        assert vp.translate(4, 4) is None
        assert vp.translate(4, 5) == (0, 0)
        assert vp.translate(13, 14) == (9, 9)


# ---------------------------------------------------------------------------
# scroll / page
# ---------------------------------------------------------------------------


class TestScroll:
    def test_scroll_step(self) -> None:
        vp = make_viewport()
        vp.scroll("down")
        assert vp.state.origin_y == SCROLL_STEP
        vp.scroll("right")
        assert vp.state.origin_x == SCROLL_STEP

    def test_scroll_up_never_below_zero(self) -> None:
        vp = make_viewport()
        vp.scroll("down")
        for _ in range(5):
            vp.scroll("up")
            assert vp.state.origin_y >= 0
        assert vp.state.origin_y == 0

    def test_scroll_left_never_below_zero(self) -> None:
        vp = make_viewport()
        vp.scroll("left")
        assert vp.state.origin_x == 0

    def test_scroll_right_unbounded(self) -> None:
        vp = make_viewport(columns=10)
        for _ in range(100):
            vp.scroll("right")
        assert vp.state.origin_x == 100 * SCROLL_STEP

    def test_scroll_down_unbounded_while_bottom_unknown(self) -> None:
        vp = make_viewport()
        for _ in range(10):
            vp.scroll("down")
        assert vp.state.origin_y == 10 * SCROLL_STEP

    def test_scroll_down_clamped_once_bottom_known(self) -> None:
        vp = make_viewport(rows=10)
        vp.resolve_end(25)
        for _ in range(10):
            vp.scroll("down")
            assert vp.state.origin_y <= 15
        assert vp.state.origin_y == 15

    def test_scroll_down_on_short_content_is_noop(self) -> None:
        vp = make_viewport(rows=24, title_rows=2)
        vp.resolve_end(5)
        vp.scroll("down")
        assert vp.state.origin_y == 0

    def test_page_moves_by_page_height(self) -> None:
        vp = make_viewport(rows=12, title_rows=2)
        vp.page("down")
        assert vp.state.origin_y == 10
        vp.page("down")
        assert vp.state.origin_y == 20
        vp.page("up")
        assert vp.state.origin_y == 10

    def test_page_up_floor(self) -> None:
        vp = make_viewport(rows=12)
        vp.page("up")
        assert vp.state.origin_y == 0

    def test_unknown_direction(self) -> None:
        vp = make_viewport()
        with pytest.raises(ValueError):
            vp.scroll("sideways")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# home / end
# ---------------------------------------------------------------------------


class TestJumps:
    def test_jump_home(self) -> None:
        vp = make_viewport()
        vp.state.origin_x = 16
        vp.state.origin_y = 40
        vp.jump_home()
        assert (vp.state.origin_x, vp.state.origin_y) == (0, 0)

    def test_jump_end_is_deferred(self) -> None:
        vp = make_viewport(rows=10)
        vp.state.origin_x = 8
        vp.jump_end()
        assert vp.state.go_to_end
        assert vp.state.origin_x == 0
        assert vp.state.origin_y == 0

    def test_resolve_end_honors_pending_jump(self) -> None:
        vp = make_viewport(rows=10, title_rows=2)
        vp.jump_end()
        assert vp.resolve_end(100) is True
        assert vp.state.origin_y == 92
        assert not vp.state.go_to_end
        assert vp.state.max_known_row == 100

    def test_resolve_end_short_content(self) -> None:
        vp = make_viewport(rows=10)
        vp.jump_end()
        assert vp.resolve_end(3) is True
        assert vp.state.origin_y == 0

    def test_resolve_end_without_request(self) -> None:
        vp = make_viewport(rows=10)
        vp.state.origin_y = 4
        assert vp.resolve_end(100) is False
        assert vp.state.origin_y == 4
        assert vp.state.max_known_row == 100

    def test_forget_bottom(self) -> None:
        vp = make_viewport()
        vp.resolve_end(50)
        vp.forget_bottom()
        assert vp.max_origin_y() is None


# ---------------------------------------------------------------------------
# clamp / resize
# ---------------------------------------------------------------------------


class TestClamp:
    def test_clamp_noop_while_unknown(self) -> None:
        vp = make_viewport()
        vp.state.origin_y = 1000
        vp.clamp()
        assert vp.state.origin_y == 1000

    def test_clamp_to_bottom(self) -> None:
        vp = make_viewport(rows=10)
        vp.state.origin_y = 1000
        vp.resolve_end(30)
        vp.clamp()
        assert vp.state.origin_y == 20

    def test_resize_reclamps(self) -> None:
        vp = make_viewport(rows=10)
        vp.resolve_end(30)
        vp.state.origin_y = 20
        vp.resize(TerminalDimensions(columns=80, rows=20))
        assert vp.state.origin_y == 10
        assert vp.page_height == 20
