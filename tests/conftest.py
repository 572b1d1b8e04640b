"""Shared test fixtures for the speedreader test suite.

WHY: The pacing loop is driven by a clock, an input source and a render
surface. Running it against real time and a real terminal would make the
tests slow and flaky, so every pacing test uses the same fake timeline.

HOW: FakeClock is a manually advanced monotonic clock. ScriptedInput
delivers events at scheduled fake times and advances the clock by the
poll timeout when nothing is due, exactly as a blocking poll would.
RecordingSurface records every draw call with the fake time it happened
and can reconstruct the word frames the pacer rendered.

RULES:
- Nothing here sleeps for real
- Scheduled times are absolute fake-clock seconds
- With countdown_seconds=0 playback starts at t=1.0 (one countdown frame)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from speedreader.config import KeyBindings
from speedreader.core.pacer import Pacer
from speedreader.terminal.keys import InputEvent, KeyEvent

SIZE = (80, 24)
PLAYBACK_START = 1.0


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.advance(seconds)


class ScriptedInput:
    """InputSource that replays (time, event) pairs on a FakeClock."""

    def __init__(self, clock: FakeClock, script: Optional[List[Tuple[float, InputEvent]]] = None) -> None:
        self._clock = clock
        self._events = sorted(script or [], key=lambda item: item[0])
        self.poll_timeouts: List[float] = []

    def add(self, at: float, event: InputEvent) -> None:
        self._events.append((at, event))
        self._events.sort(key=lambda item: item[0])

    def poll(self, timeout: float) -> bool:
        self.poll_timeouts.append(timeout)
        if self._events:
            due = self._events[0][0]
            if due <= self._clock.now:
                return True
            if due <= self._clock.now + timeout:
                self._clock.now = due
                return True
        self._clock.advance(timeout)
        return False

    def read_event(self) -> InputEvent:
        _, event = self._events.pop(0)
        return event

    @property
    def remaining(self) -> int:
        return len(self._events)


@dataclass
class Draw:
    time: float
    col: int
    row: int
    text: str


@dataclass
class Frame:
    time: float
    wpm_label: str
    position: str
    word: str


class RecordingSurface:
    """RenderSurface that keeps every draw call in order."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._cursor = (0, 0)
        self.draws: List[Draw] = []
        self.clears: List[float] = []
        self.flushes = 0

    def clear(self) -> None:
        self.clears.append(self._clock.now)

    def move_to(self, col: int, row: int) -> None:
        self._cursor = (col, row)

    def write(self, text: str) -> None:
        col, row = self._cursor
        self.draws.append(Draw(self._clock.now, col, row, text))
        self._cursor = (col + len(text), row)

    def flush(self) -> None:
        self.flushes += 1

    def texts(self) -> List[str]:
        return [d.text for d in self.draws]

    def frames(self) -> List[Frame]:
        """Word frames, recognised by their "Word i / n" indicator."""
        frames = []
        for i, draw in enumerate(self.draws):
            if draw.text.startswith("Word ") and i > 0 and i + 1 < len(self.draws):
                frames.append(Frame(
                    time=draw.time,
                    wpm_label=self.draws[i - 1].text,
                    position=draw.text,
                    word=self.draws[i + 1].text,
                ))
        return frames


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface(clock):
    return RecordingSurface(clock)


@pytest.fixture
def script(clock):
    return ScriptedInput(clock)


@pytest.fixture
def keys():
    return KeyBindings()


@pytest.fixture
def make_pacer(surface, script, clock, keys):
    """Factory for a Pacer wired to the fake timeline (no countdown by default)."""

    def _make(countdown_seconds: int = 0, **kwargs) -> Pacer:
        return Pacer(
            surface,
            script,
            kwargs.pop("keys", keys),
            kwargs.pop("size", SIZE),
            clock=clock,
            sleep=clock.sleep,
            countdown_seconds=countdown_seconds,
            **kwargs,
        )

    return _make


def key(char: str) -> KeyEvent:
    return KeyEvent(char)
