"""Render surface: cursor-addressed text output on an interactive terminal.

WHY: The pacing core needs four primitives (clear, move, write, flush)
and a way to place text left-, center- or right-aligned around a screen
coordinate. Keeping them behind a small protocol lets tests record
frames without a real terminal.

HOW: RenderSurface is a typing.Protocol. AnsiSurface implements it with
ANSI escape sequences on a text stream. print_text() measures the text
in terminal cells (rich's cell_len, so wide CJK glyphs count double),
computes the column for the requested alignment and writes it.

RULES:
- Coordinates are zero-based (col, row)
- Alignment offsets saturate at column 0, never go negative
- Text wider than MAX_COORDINATE raises CoordinateOverflowError
- OSError from the stream is re-raised as RenderError
"""

from __future__ import annotations

import enum
from typing import Protocol, TextIO

from rich.cells import cell_len

from speedreader.errors import CoordinateOverflowError, RenderError

# Terminal coordinates are unsigned 16-bit.
MAX_COORDINATE = 0xFFFF

CSI = "\x1b["


class TextAlignment(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class RenderSurface(Protocol):
    def clear(self) -> None: ...

    def move_to(self, col: int, row: int) -> None: ...

    def write(self, text: str) -> None: ...

    def flush(self) -> None: ...


class AnsiSurface:
    """RenderSurface backed by ANSI escape sequences on a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def clear(self) -> None:
        self._emit(f"{CSI}2J")

    def move_to(self, col: int, row: int) -> None:
        # ANSI cursor positions are one-based.
        self._emit(f"{CSI}{row + 1};{col + 1}H")

    def write(self, text: str) -> None:
        self._emit(text)

    def flush(self) -> None:
        try:
            self._stream.flush()
        except OSError as e:
            raise RenderError(f"Failed to flush terminal output: {e}") from e

    def _emit(self, data: str) -> None:
        try:
            self._stream.write(data)
        except OSError as e:
            raise RenderError(f"Failed to write to terminal: {e}") from e


def text_width(text: str) -> int:
    """Width of ``text`` in terminal cells, checked against MAX_COORDINATE."""
    width = cell_len(text)
    if width > MAX_COORDINATE:
        raise CoordinateOverflowError(
            f"Text width {width} exceeds the addressable width of {MAX_COORDINATE}"
        )
    return width


def aligned_column(column: int, width: int, alignment: TextAlignment) -> int:
    """Starting column for text of ``width`` anchored at ``column``.

    CENTER puts the middle of the text on ``column``; RIGHT ends it there.
    """
    if alignment is TextAlignment.CENTER:
        return max(column - width // 2, 0)
    if alignment is TextAlignment.RIGHT:
        return max(column - width, 0)
    return column


def print_text(
    surface: RenderSurface,
    text: object,
    position: tuple[int, int],
    alignment: TextAlignment = TextAlignment.LEFT,
) -> None:
    """Write ``text`` at ``position`` with the given alignment and flush.

    Args:
        surface: Where to draw.
        text: Anything with a str() form (numbers are common).
        position: (column, row) anchor.
        alignment: How the text sits relative to the anchor column.
    """
    rendered = str(text)
    column, row = position
    col = aligned_column(column, text_width(rendered), alignment)
    surface.move_to(col, row)
    surface.write(rendered)
    surface.flush()


def blank_text(surface: RenderSurface, position: tuple[int, int], width: int) -> None:
    """Overwrite ``width`` cells starting at ``position`` with spaces."""
    if width <= 0:
        return
    surface.move_to(*position)
    surface.write(" " * width)
    surface.flush()
