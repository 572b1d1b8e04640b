"""Input source: non-blocking key events from the controlling terminal.

WHY: The pacing loop must check for commands every few milliseconds
without ever blocking past a word's deadline. It only needs "is an
event ready within T seconds?" and "give me the next event".

HOW: InputSource is a typing.Protocol. TerminalInput implements it on
a raw-mode file descriptor: select() answers poll(), os.read() pulls
whatever bytes are waiting, an incremental UTF-8 decoder turns them
into characters, and each character becomes a KeyEvent. Escape
sequences (arrow keys, function keys) become a single OtherEvent that
ends at the sequence's final character, so keys typed after one in the
same read are still delivered.

RULES:
- poll() never blocks longer than its timeout
- read_event() after a successful poll() returns without blocking
- EOF or an OSError while reading raises InputReadError
- Characters read in one chunk are queued and delivered one per call
"""

from __future__ import annotations

import codecs
import logging
import os
import select
from collections import deque
from dataclasses import dataclass
from typing import Protocol, Union

from speedreader.errors import InputReadError

logger = logging.getLogger(__name__)

_READ_SIZE = 64
ESC = "\x1b"
CSI_INTRO = "["
SS3_INTRO = "O"


@dataclass(frozen=True)
class KeyEvent:
    char: str


@dataclass(frozen=True)
class OtherEvent:
    """Anything that is not a plain character key press."""

    data: str = ""


InputEvent = Union[KeyEvent, OtherEvent]


class InputSource(Protocol):
    def poll(self, timeout: float) -> bool: ...

    def read_event(self) -> InputEvent: ...


def _escape_end(text: str, start: int) -> int:
    """Index just past the escape sequence that begins at ``text[start]``.

    RULES:
    - CSI (ESC [): runs to the first character in 0x40-0x7E
    - SS3 (ESC O): ESC, O and one more character
    - Anything else: ESC plus the following character (Alt+key)
    - A sequence cut off by the end of the chunk ends there
    """
    end = len(text)
    i = start + 1
    if i >= end:
        return end

    intro = text[i]
    if intro == CSI_INTRO:
        for j in range(i + 1, end):
            if "\x40" <= text[j] <= "\x7e":
                return j + 1
        return end
    if intro == SS3_INTRO:
        return min(i + 2, end)
    return i + 1


def decode_events(text: str) -> list[InputEvent]:
    """Turn decoded terminal input into events.

    Plain characters map to one KeyEvent each. Each escape sequence maps
    to one OtherEvent, and characters after it are decoded as keys again.
    """
    events: list[InputEvent] = []
    i = 0
    while i < len(text):
        if text[i] == ESC:
            end = _escape_end(text, i)
            events.append(OtherEvent(text[i:end]))
            i = end
        else:
            events.append(KeyEvent(text[i]))
            i += 1
    return events


class TerminalInput:
    """InputSource reading a terminal file descriptor in raw mode."""

    def __init__(self, fd: int) -> None:
        self._fd = fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending: deque[InputEvent] = deque()

    @property
    def fd(self) -> int:
        return self._fd

    def poll(self, timeout: float) -> bool:
        if self._pending:
            return True
        try:
            ready, _, _ = select.select([self._fd], [], [], max(timeout, 0.0))
        except (OSError, ValueError) as e:
            raise InputReadError(f"Failed to poll terminal input: {e}") from e
        return bool(ready)

    def read_event(self) -> InputEvent:
        if self._pending:
            return self._pending.popleft()

        try:
            data = os.read(self._fd, _READ_SIZE)
        except OSError as e:
            raise InputReadError(f"Failed to read terminal input: {e}") from e
        if not data:
            raise InputReadError("Terminal input closed")

        self._pending.extend(decode_events(self._decoder.decode(data)))
        if not self._pending:
            # Incomplete multi-byte character; the rest arrives on the next read.
            return OtherEvent()
        return self._pending.popleft()
