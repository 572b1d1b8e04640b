"""Tests for the ANSI render surface and aligned text placement.

WHY: Every frame of playback goes through print_text(). Off-by-one
alignment shifts words visibly, and a swallowed write error would leave
the reader staring at a frozen screen.

HOW: AnsiSurface writes into io.StringIO so the exact escape sequences
can be asserted. Failure cases use a stream whose methods raise OSError.
"""

import io

import pytest

from speedreader.errors import CoordinateOverflowError, RenderError
from speedreader.terminal.surface import (
    MAX_COORDINATE,
    AnsiSurface,
    TextAlignment,
    aligned_column,
    blank_text,
    print_text,
    text_width,
)


class BrokenStream(io.StringIO):
    def write(self, data):
        raise OSError("device gone")

    def flush(self):
        raise OSError("device gone")


class TestAnsiSurface:
    def test_clear(self):
        out = io.StringIO()
        AnsiSurface(out).clear()
        assert out.getvalue() == "\x1b[2J"

    def test_move_to_is_one_based(self):
        out = io.StringIO()
        AnsiSurface(out).move_to(0, 0)
        AnsiSurface(out).move_to(9, 4)
        assert out.getvalue() == "\x1b[1;1H\x1b[5;10H"

    def test_write_passes_text_through(self):
        out = io.StringIO()
        AnsiSurface(out).write("fox")
        assert out.getvalue() == "fox"

    def test_write_error_becomes_render_error(self):
        with pytest.raises(RenderError):
            AnsiSurface(BrokenStream()).write("fox")

    def test_flush_error_becomes_render_error(self):
        with pytest.raises(RenderError):
            AnsiSurface(BrokenStream()).flush()


class TestAlignment:
    def test_left_keeps_column(self):
        assert aligned_column(10, 4, TextAlignment.LEFT) == 10

    def test_center_puts_middle_on_column(self):
        assert aligned_column(40, 3, TextAlignment.CENTER) == 39
        assert aligned_column(40, 4, TextAlignment.CENTER) == 38

    def test_right_ends_at_column(self):
        assert aligned_column(80, 10, TextAlignment.RIGHT) == 70

    def test_offsets_saturate_at_zero(self):
        assert aligned_column(2, 20, TextAlignment.CENTER) == 0
        assert aligned_column(5, 20, TextAlignment.RIGHT) == 0


class TestTextWidth:
    def test_ascii(self):
        assert text_width("WPM: 300") == 8

    def test_wide_characters_count_double(self):
        assert text_width("東京") == 4

    def test_overflow_raises(self):
        with pytest.raises(CoordinateOverflowError):
            text_width("x" * (MAX_COORDINATE + 1))


class TestPrintText:
    def test_moves_writes_and_flushes(self):
        out = io.StringIO()
        print_text(AnsiSurface(out), "fox", (40, 12), TextAlignment.CENTER)
        assert out.getvalue() == "\x1b[13;40Hfox"

    def test_accepts_numbers(self):
        out = io.StringIO()
        print_text(AnsiSurface(out), 3, (40, 12), TextAlignment.CENTER)
        assert out.getvalue().endswith("3")

    def test_centers_by_cell_width(self):
        out = io.StringIO()
        print_text(AnsiSurface(out), "東京", (40, 12), TextAlignment.CENTER)
        assert out.getvalue() == "\x1b[13;39H東京"

    def test_overflow_writes_nothing(self):
        out = io.StringIO()
        with pytest.raises(CoordinateOverflowError):
            print_text(AnsiSurface(out), "x" * (MAX_COORDINATE + 1), (0, 0))
        assert out.getvalue() == ""


class TestBlankText:
    def test_writes_spaces(self):
        out = io.StringIO()
        blank_text(AnsiSurface(out), (0, 0), 9)
        assert out.getvalue() == "\x1b[1;1H" + " " * 9

    def test_zero_width_is_noop(self):
        out = io.StringIO()
        blank_text(AnsiSurface(out), (0, 0), 0)
        assert out.getvalue() == ""
