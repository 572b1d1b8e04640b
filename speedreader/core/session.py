"""Session state types for the pacing core.

WHY: The pacing loop and the pause sub-loop share one mutable rate and
hand control back and forth. Making the rate an explicit object, and
making every loop exit an explicit enum value, keeps the control flow
visible instead of hidden in flags and recursion.

HOW: RateState owns the live WPM and re-clamps on every change.
PauseOutcome is what the pause sub-loop reports; PassOutcome is what
one pass over the token sequence reports to the driver loop.
SessionResult is the terminal snapshot handed back to the CLI.

RULES:
- Exactly one RateState per session, passed to whichever loop has control
- RateState.wpm is always within [MIN_WPM, MAX_WPM]
- SessionResult.wpm is None when the session was cancelled
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from speedreader.config import MAX_WPM, MIN_WPM, clamp_wpm

MS_PER_MINUTE = 60_000


def hold_duration_ms(wpm: int) -> int:
    """Milliseconds a single word stays on screen at ``wpm``.

    Integer division, so 300 wpm holds each word for 200 ms.
    """
    if wpm <= 0:
        raise ValueError(f"wpm must be positive, got {wpm}")
    return MS_PER_MINUTE // wpm


class PlaybackState(enum.Enum):
    """Where a session is. CANCELLED and COMPLETED are terminal."""

    RUNNING = "running"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (PlaybackState.CANCELLED, PlaybackState.COMPLETED)


class PauseOutcome(enum.Enum):
    """How the pause sub-loop ended."""

    QUIT = "quit"
    RESUMED = "resumed"
    RESUMED_WITH_RATE_CHANGE = "resumed_with_rate_change"


class PassOutcome(enum.Enum):
    """How one pass over the token sequence ended."""

    COMPLETE = "complete"
    CANCEL = "cancel"
    RESTART = "restart"


class RateState:
    """The single live words-per-minute value of a session.

    RULES:
    - Initial value is clamped into range
    - increase/decrease re-clamp; the rate never leaves [MIN_WPM, MAX_WPM]
    - step must be positive
    """

    def __init__(self, wpm: int, step: int) -> None:
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self._wpm = clamp_wpm(wpm)
        self.step = step

    @property
    def wpm(self) -> int:
        return self._wpm

    def increase(self) -> int:
        self._wpm = min(self._wpm + self.step, MAX_WPM)
        return self._wpm

    def decrease(self) -> int:
        self._wpm = max(self._wpm - self.step, MIN_WPM)
        return self._wpm

    @property
    def hold_ms(self) -> int:
        return hold_duration_ms(self._wpm)

    def __repr__(self) -> str:
        return f"RateState(wpm={self._wpm}, step={self.step})"


@dataclass(frozen=True)
class SessionResult:
    """Terminal outcome of one reading session.

    RULES:
    - state is CANCELLED or COMPLETED
    - wpm is the rate in effect at completion, None when cancelled
    - words_shown counts frames rendered across all passes
    """

    state: PlaybackState
    wpm: int | None = None
    words_shown: int = 0

    @property
    def success(self) -> bool:
        return self.state is PlaybackState.COMPLETED

    @classmethod
    def completed(cls, wpm: int, words_shown: int = 0) -> SessionResult:
        return cls(state=PlaybackState.COMPLETED, wpm=wpm, words_shown=words_shown)

    @classmethod
    def cancelled(cls, words_shown: int = 0) -> SessionResult:
        return cls(state=PlaybackState.CANCELLED, wpm=None, words_shown=words_shown)
