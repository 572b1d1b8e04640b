"""Exception types shared by the pacing core, terminal layer and config.

WHY: Every failure during a reading session is fatal, but the CLI still
has to tell the reader what went wrong after the terminal is restored.
Typed exceptions let it print one clear line per failure kind.

RULES:
- Nothing in the core retries; these propagate to the CLI
- API errors live next to the client (api.client), not here
"""

from __future__ import annotations


class SpeedReaderError(Exception):
    """Base class for all speedreader failures."""


class InputReadError(SpeedReaderError):
    """The input source signalled an event but could not deliver it."""


class RenderError(SpeedReaderError):
    """Writing to the render surface failed."""


class CoordinateOverflowError(SpeedReaderError):
    """A rendered string is wider than the addressable coordinate space.

    RULES:
    - Raised instead of truncating the text
    - Message includes the measured width and the limit
    """


class ConfigError(SpeedReaderError):
    """The configuration file is unreadable, malformed or inconsistent."""
