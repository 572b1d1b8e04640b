"""Pacing core: tokenizer, session state and the real-time playback loop."""

from speedreader.core.pacer import Pacer, speed_read
from speedreader.core.session import (
    PlaybackState,
    RateState,
    SessionResult,
    hold_duration_ms,
)
from speedreader.core.tokenizer import tokenize_text

__all__ = [
    "Pacer",
    "PlaybackState",
    "RateState",
    "SessionResult",
    "hold_duration_ms",
    "speed_read",
    "tokenize_text",
]
