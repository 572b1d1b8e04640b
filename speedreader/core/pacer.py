"""Real-time pacing loop: countdown, timed word advance, pause sub-loop.

WHY: Each word must stay on screen for exactly 60000 / wpm milliseconds,
yet the reader's commands have to be honoured within a few tens of
milliseconds. Both happen on one thread, so the loop alternates short
bounded input polls with deadline checks.

HOW: Pacer.run() shows the countdown, then drives passes over the token
sequence from an outer loop. A pass renders a frame per word and holds
it by polling input until the deadline. A pause key hands the shared
RateState to the pause sub-loop, which polls on its own until resume or
quit. If the rate changed while paused, the pass ends with RESTART and
the driver starts again at the first word with the new rate.

RULES:
- Main loop polls at most every 50 ms, pause sub-loop every 100 ms
- A poll never waits past the current word's deadline
- Quit ends the session immediately, running or paused, with no rate
- Resume without a rate change continues the current word; time spent
  paused does not count against its hold
- Resume with a rate change restarts from word 0 (no new countdown)
- The countdown ignores input; keys pressed during it stay queued
- Restarts loop, they never recurse
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from speedreader.config import COUNTDOWN_SECONDS, MAX_WPM, Config, KeyBindings, describe_key
from speedreader.core.session import (
    PassOutcome,
    PauseOutcome,
    PlaybackState,
    RateState,
    SessionResult,
)
from speedreader.core.tokenizer import tokenize_text
from speedreader.terminal.keys import InputSource, KeyEvent
from speedreader.terminal.surface import (
    RenderSurface,
    TextAlignment,
    aligned_column,
    blank_text,
    print_text,
    text_width,
)

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.05
PAUSE_POLL_INTERVAL_S = 0.1

COUNTDOWN_LABEL = "Starting in..."


def wpm_label(wpm: int) -> str:
    return f"WPM: {wpm}"


def controls_legend(keys: KeyBindings) -> str:
    return "Controls: {}=Pause, {}=Quit, {}/{} = Adjust WPM".format(
        describe_key(keys.pause),
        describe_key(keys.quit),
        keys.increase_wpm,
        keys.decrease_wpm,
    )


def pause_message(keys: KeyBindings) -> str:
    return 'Paused. Press "{}" to resume...'.format(describe_key(keys.pause))


class Pacer:
    """Drives one reading session on an already-interactive terminal.

    WHY: The surface, input source, bindings and screen size are fixed for
    the whole session; the rate is not. Holding the fixed collaborators
    on an object and passing the RateState explicitly keeps the single
    mutable value easy to follow.

    HOW: clock and sleep are injectable so tests can run the loop on a
    fake timeline. Everything else is the production default.

    RULES:
    - size is (columns, rows), captured once before the session
    - keys are validated on construction
    - frames_rendered counts word frames across all passes
    - state is None before run(), then RUNNING or PAUSED, then terminal
    """

    def __init__(
        self,
        surface: RenderSurface,
        input_source: InputSource,
        keys: KeyBindings,
        size: tuple[int, int],
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = POLL_INTERVAL_S,
        pause_poll_interval: float = PAUSE_POLL_INTERVAL_S,
        countdown_seconds: int = COUNTDOWN_SECONDS,
    ) -> None:
        keys.validate()
        self._surface = surface
        self._input = input_source
        self._keys = keys
        self._columns, self._rows = size
        self._clock = clock
        self._sleep = sleep
        self._poll_interval = poll_interval
        self._pause_poll_interval = pause_poll_interval
        self._countdown_seconds = countdown_seconds
        self.frames_rendered = 0
        self.state: PlaybackState | None = None

    @property
    def _center(self) -> tuple[int, int]:
        return self._columns // 2, self._rows // 2

    # ------------------------------------------------------------------
    # Session driver
    # ------------------------------------------------------------------

    def run(self, tokens: Sequence[str], rate: RateState) -> SessionResult:
        """Count down, then play ``tokens`` until completion or quit.

        Args:
            tokens: Display tokens in reading order.
            rate: The session's live rate; mutated by the pause sub-loop.

        Returns:
            SessionResult.completed with the final rate, or
            SessionResult.cancelled if the reader quit.
        """
        self.countdown(self._countdown_seconds)
        self.state = PlaybackState.RUNNING

        passes = 0
        while True:
            passes += 1
            logger.debug("Pass %d over %d words at %d wpm", passes, len(tokens), rate.wpm)
            outcome = self.play_pass(tokens, rate)

            if outcome is PassOutcome.CANCEL:
                self.state = PlaybackState.CANCELLED
                logger.info("Session cancelled after %d frames", self.frames_rendered)
                return SessionResult.cancelled(words_shown=self.frames_rendered)
            if outcome is PassOutcome.COMPLETE:
                self.state = PlaybackState.COMPLETED
                logger.info("Session completed at %d wpm", rate.wpm)
                return SessionResult.completed(rate.wpm, words_shown=self.frames_rendered)

            logger.info("Rate changed to %d wpm, restarting from the first word", rate.wpm)

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    def countdown(self, seconds: int) -> None:
        """Show a once-per-second countdown from ``seconds`` to 0.

        Remaining time comes from the clock, not a decrementing counter,
        so slow frames do not add up. The 0 frame has no label.
        """
        columns, rows = self._columns, self._rows
        start = self._clock()

        while True:
            elapsed = self._clock() - start
            remaining = max(seconds - int(elapsed), 0)

            self._surface.clear()
            print_text(self._surface, remaining, self._center, TextAlignment.CENTER)
            if remaining > 0:
                print_text(
                    self._surface,
                    COUNTDOWN_LABEL,
                    (columns // 2, max(rows // 2 - 2, 0)),
                    TextAlignment.CENTER,
                )

            self._sleep(1.0)

            if elapsed >= seconds:
                break

    # ------------------------------------------------------------------
    # Pacing loop
    # ------------------------------------------------------------------

    def play_pass(self, tokens: Sequence[str], rate: RateState) -> PassOutcome:
        """Play every token once; stop early on quit or a paused rate change."""
        total = len(tokens)
        for index, word in enumerate(tokens):
            self.render_word(word, index, total, rate.wpm)
            outcome = self._hold(rate)
            if outcome is not None:
                return outcome
        return PassOutcome.COMPLETE

    def render_word(self, word: str, index: int, total: int, wpm: int) -> None:
        self._surface.clear()
        print_text(self._surface, wpm_label(wpm), (0, 0), TextAlignment.LEFT)
        print_text(
            self._surface,
            f"Word {index + 1} / {total}",
            (self._columns, 0),
            TextAlignment.RIGHT,
        )
        print_text(self._surface, word, self._center, TextAlignment.CENTER)
        print_text(
            self._surface,
            controls_legend(self._keys),
            (self._columns // 2, max(self._rows - 2, 0)),
            TextAlignment.CENTER,
        )
        self.frames_rendered += 1

    def _hold(self, rate: RateState) -> PassOutcome | None:
        """Keep the current word up for its hold duration.

        Returns None when the word's time is up, otherwise the outcome
        that ends the pass early.
        """
        hold_s = rate.hold_ms / 1000
        start = self._clock()

        while True:
            remaining = hold_s - (self._clock() - start)
            if remaining <= 0:
                return None

            if self._input.poll(min(remaining, self._poll_interval)):
                event = self._input.read_event()
                if isinstance(event, KeyEvent):
                    if event.char == self._keys.quit:
                        return PassOutcome.CANCEL
                    if event.char == self._keys.pause:
                        self.state = PlaybackState.PAUSED

            if self.state is PlaybackState.PAUSED:
                paused_at = self._clock()
                outcome = self.pause(rate)
                if outcome is PauseOutcome.QUIT:
                    return PassOutcome.CANCEL
                self.state = PlaybackState.RUNNING
                if outcome is PauseOutcome.RESUMED_WITH_RATE_CHANGE:
                    return PassOutcome.RESTART
                start += self._clock() - paused_at

    # ------------------------------------------------------------------
    # Pause sub-loop
    # ------------------------------------------------------------------

    def pause(self, rate: RateState) -> PauseOutcome:
        """Hold playback until resume or quit, applying rate changes live.

        RULES:
        - increase/decrease update the WPM indicator in place
        - decrease blanks the indicator first so "WPM: 1000" -> "WPM: 995"
          leaves no stale digit
        - The pause message is blanked on resume
        - Rate change means the rate on exit differs from the rate on entry
        """
        entry_wpm = rate.wpm
        logger.debug("Paused at %d wpm", entry_wpm)

        message = pause_message(self._keys)
        message_pos = (self._columns // 2, self._rows // 2 + 1)
        print_text(self._surface, message, message_pos, TextAlignment.CENTER)

        while True:
            if not self._input.poll(self._pause_poll_interval):
                continue
            event = self._input.read_event()
            if not isinstance(event, KeyEvent):
                continue

            char = event.char
            if char == self._keys.increase_wpm:
                rate.increase()
                print_text(self._surface, wpm_label(rate.wpm), (0, 0), TextAlignment.LEFT)
            elif char == self._keys.decrease_wpm:
                rate.decrease()
                blank_text(self._surface, (0, 0), text_width(wpm_label(MAX_WPM)))
                print_text(self._surface, wpm_label(rate.wpm), (0, 0), TextAlignment.LEFT)
            elif char == self._keys.quit:
                logger.debug("Quit while paused")
                return PauseOutcome.QUIT
            elif char == self._keys.pause:
                self._clear_pause_message(message, message_pos)
                if rate.wpm != entry_wpm:
                    logger.debug("Resumed, rate %d -> %d wpm", entry_wpm, rate.wpm)
                    return PauseOutcome.RESUMED_WITH_RATE_CHANGE
                logger.debug("Resumed without rate change")
                return PauseOutcome.RESUMED

    def _clear_pause_message(self, message: str, position: tuple[int, int]) -> None:
        width = text_width(message)
        column, row = position
        start = aligned_column(column, width, TextAlignment.CENTER)
        blank_text(self._surface, (start, row), width)


def speed_read(
    text: str,
    config: Config,
    surface: RenderSurface,
    input_source: InputSource,
    size: tuple[int, int],
    **pacer_options: Any,
) -> SessionResult:
    """Tokenize ``text`` and run a full reading session.

    The caller owns the terminal: it must already be interactive, and it
    must be restored by the caller whatever this returns or raises.
    """
    tokens = tokenize_text(text)
    rate = RateState(config.wpm, config.wpm_step)
    pacer = Pacer(surface, input_source, config.keys, size, **pacer_options)
    logger.info("Reading %d words at %d wpm", len(tokens), rate.wpm)
    return pacer.run(tokens, rate)
