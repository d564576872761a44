"""Tests for pi.watch.buffer -- cell assembly and the logical cursor."""

from __future__ import annotations

import pytest

from pi.watch.buffer import (
    Attr,
    LogicalCursor,
    OutputBuffer,
    StyledCell,
    is_printable,
)
from pi.watch.errors import AllocationError


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


class TestAppend:
    def test_one_cell_per_byte(self) -> None:
        buf = OutputBuffer()
        buf.append(b"abc")
        assert len(buf) == 3
        assert [cell.char for cell in buf] == [ord("a"), ord("b"), ord("c")]

    def test_cells_start_without_attributes(self) -> None:
        buf = OutputBuffer()
        buf.append(b"xyz")
        assert all(cell.attrs == Attr.NONE for cell in buf)

    def test_returns_new_span(self) -> None:
        buf = OutputBuffer()
        assert buf.append(b"hello") == (0, 5)
        assert buf.append(b" world") == (5, 11)
        assert buf.append(b"") == (11, 11)

    def test_non_printable_bytes_are_kept(self) -> None:
        buf = OutputBuffer()
        buf.append(b"\x00\x07\x1b")
        assert buf.text() == b"\x00\x07\x1b"

    def test_chunking_is_transparent(self) -> None:
        data = b"line one\n\tindented\r\nbell\x07 and \xff high\n"
        bulk = OutputBuffer()
        bulk.append(data)

        bytewise = OutputBuffer()
        for i in range(len(data)):
            bytewise.append(data[i:i + 1])

        chunked = OutputBuffer()
        for i in range(0, len(data), 7):
            chunked.append(data[i:i + 7])

        expected = [(c.char, c.attrs) for c in bulk]
        assert [(c.char, c.attrs) for c in bytewise] == expected
        assert [(c.char, c.attrs) for c in chunked] == expected

    def test_memory_error_becomes_allocation_error(self) -> None:
        buf = OutputBuffer()

        class ExplodingList(list):
            def extend(self, items: object) -> None:
                raise MemoryError

        buf.cells = ExplodingList()
        with pytest.raises(AllocationError):
            buf.append(b"abc")


# ---------------------------------------------------------------------------
# Printability
# ---------------------------------------------------------------------------


class TestIsPrintable:
    def test_printable_ascii(self) -> None:
        assert is_printable(ord(" "))
        assert is_printable(ord("~"))
        assert is_printable(ord("A"))

    def test_control_bytes(self) -> None:
        for b in (0x00, 0x09, 0x0A, 0x1B, 0x1F, 0x7F):
            assert not is_printable(b)

    def test_high_bytes_need_eight_bit_mode(self) -> None:
        assert not is_printable(0xA0)
        assert not is_printable(0xE9)
        assert is_printable(0xA0, eight_bit=True)
        assert is_printable(0xFF, eight_bit=True)

    def test_c1_range_never_printable(self) -> None:
        assert not is_printable(0x80, eight_bit=True)
        assert not is_printable(0x9F, eight_bit=True)


# ---------------------------------------------------------------------------
# Logical cursor
# ---------------------------------------------------------------------------


class TestLogicalCursor:
    def test_tab_newline_model(self) -> None:
        buf = OutputBuffer()
        buf.append(b"a\tb\nc")
        placed = {chr(cell.char): (x, y) for _, x, y, cell in buf.positions()}
        assert placed["a"] == (0, 0)
        assert placed["b"] == (8, 0)
        assert placed["c"] == (0, 1)

    def test_cursor_after_processing(self) -> None:
        cursor = LogicalCursor()
        for b in b"a\tb\nc":
            cursor.advance(b)
        assert (cursor.x, cursor.y) == (1, 1)

    def test_tab_does_not_snap_to_stops(self) -> None:
        cursor = LogicalCursor()
        for b in b"abc\t":
            cursor.advance(b)
        assert cursor.x == 11

    def test_non_printable_advances_column(self) -> None:
        cursor = LogicalCursor()
        for b in b"\x07\x1b":
            cursor.advance(b)
        assert (cursor.x, cursor.y) == (2, 0)

    def test_carriage_return_is_an_ordinary_cell(self) -> None:
        cursor = LogicalCursor()
        for b in b"ab\r":
            cursor.advance(b)
        assert (cursor.x, cursor.y) == (3, 0)

    def test_row_count(self) -> None:
        buf = OutputBuffer()
        buf.append(b"one\ntwo\nthree\n")
        assert buf.row_count() == 3

    def test_row_count_without_trailing_newline(self) -> None:
        buf = OutputBuffer()
        buf.append(b"one\ntwo")
        assert buf.row_count() == 1


class TestStyledCell:
    def test_highlighted_property(self) -> None:
        assert not StyledCell(ord("a")).highlighted
        assert StyledCell(ord("a"), Attr.HIGHLIGHT).highlighted
        assert StyledCell(ord("a"), Attr.ACCUMULATED).highlighted
