"""Configuration constants, the persisted reader config, and .env loading.

WHY: Pace, step size, evaluation model and key bindings are personal
preferences that should survive between runs, while limits like the
WPM range and API endpoint are fixed facts the rest of the code must
agree on. Both live here so there is exactly one place to look.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values. The Config and KeyBindings dataclasses map 1:1 to
a TOML file in the user's config directory (platformdirs); tomllib reads
it and tomli-w writes it. load_api_key() gives a clear error when the
OpenRouter key is missing.

RULES:
- WPM is always clamped to [MIN_WPM, MAX_WPM] when it comes from the user
- Missing keys in the TOML file fall back to defaults
- Key bindings must be single characters and pairwise distinct
- SPEEDREADER_CONFIG overrides the config file location
- API key is loaded from the environment, never stored in config.toml
"""

from __future__ import annotations

import argparse
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import platformdirs
import tomli_w
from dotenv import load_dotenv

from speedreader.errors import ConfigError

logger = logging.getLogger(__name__)

load_dotenv()

# ---------------------------------------------------------------------------
# Fixed limits and defaults
# ---------------------------------------------------------------------------

MIN_WPM = 150
MAX_WPM = 1000

DEFAULT_WPM = 258
DEFAULT_WPM_STEP = 5
DEFAULT_MODEL = "deepseek/deepseek-r1:free"

COUNTDOWN_SECONDS = 3

APP_NAME = "speedreader"
CONFIG_FILENAME = "config.toml"

OPEN_ROUTER_URL = os.getenv(
    "OPEN_ROUTER_URL", "https://openrouter.ai/api/v1/chat/completions"
)


def clamp_wpm(wpm: int) -> int:
    """Clamp a words-per-minute value into [MIN_WPM, MAX_WPM]."""
    return min(MAX_WPM, max(wpm, MIN_WPM))


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyBindings:
    """The four single-character playback commands.

    RULES:
    - Frozen: bindings never change while a session is running
    - Defaults: q quits, space pauses/resumes, + and - adjust WPM
    - validate() rejects empty, multi-character and duplicate bindings
    """

    quit: str = "q"
    pause: str = " "
    increase_wpm: str = "+"
    decrease_wpm: str = "-"

    def validate(self) -> None:
        """Raise ConfigError if any binding is malformed or two collide.

        WHY: With duplicate bindings one command silently shadows the
        other (e.g. pause == quit makes quit unreachable while paused).
        Rejecting the set up front is clearer than picking a winner.
        """
        seen: dict[str, str] = {}
        for name, key in asdict(self).items():
            if not isinstance(key, str) or len(key) != 1:
                raise ConfigError(
                    f"Key binding '{name}' must be a single character, got {key!r}"
                )
            if key in seen:
                raise ConfigError(
                    f"Key bindings '{seen[key]}' and '{name}' are both set to "
                    f"{describe_key(key)!r}"
                )
            seen[key] = name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeyBindings:
        defaults = cls()
        return cls(
            quit=data.get("quit", defaults.quit),
            pause=data.get("pause", defaults.pause),
            increase_wpm=data.get("increase_wpm", defaults.increase_wpm),
            decrease_wpm=data.get("decrease_wpm", defaults.decrease_wpm),
        )


def describe_key(key: str) -> str:
    """Human-readable label for a key binding (the space bar is invisible)."""
    return "Spacebar" if key == " " else key


@dataclass
class Config:
    """Reader preferences persisted in config.toml.

    WHY: The starting pace, step size and bindings are chosen once and
    reused every session. The evaluation model is configurable because
    free OpenRouter models come and go.

    HOW: load() reads the TOML file (creating it with defaults on first
    run), from_dict() fills in missing keys, validate() enforces the
    invariants below.

    RULES:
    - wpm: starting words per minute, within [MIN_WPM, MAX_WPM]
    - wpm_step: positive integer applied per increase/decrease command
    - model: OpenRouter model id used for summary evaluation
    - keys: KeyBindings, validated for distinctness
    """

    wpm: int = DEFAULT_WPM
    wpm_step: int = DEFAULT_WPM_STEP
    model: str = DEFAULT_MODEL
    keys: KeyBindings = field(default_factory=KeyBindings)

    def validate(self) -> None:
        if isinstance(self.wpm, bool) or not isinstance(self.wpm, int):
            raise ConfigError(f"wpm must be an integer, got {self.wpm!r}")
        if not MIN_WPM <= self.wpm <= MAX_WPM:
            raise ConfigError(
                f"wpm must be between {MIN_WPM} and {MAX_WPM}, got {self.wpm}"
            )
        if isinstance(self.wpm_step, bool) or not isinstance(self.wpm_step, int):
            raise ConfigError(f"wpm_step must be an integer, got {self.wpm_step!r}")
        if self.wpm_step <= 0:
            raise ConfigError(f"wpm_step must be positive, got {self.wpm_step}")
        if not isinstance(self.model, str) or not self.model.strip():
            raise ConfigError("model must be a non-empty string")
        self.keys.validate()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from parsed TOML, defaulting any missing field."""
        keys = data.get("keys", {})
        if not isinstance(keys, dict):
            raise ConfigError("[keys] must be a table")
        config = cls(
            wpm=data.get("wpm", DEFAULT_WPM),
            wpm_step=data.get("wpm_step", DEFAULT_WPM_STEP),
            model=data.get("model", DEFAULT_MODEL),
            keys=KeyBindings.from_dict(keys),
        )
        config.validate()
        return config

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load the config file, writing defaults first if it does not exist.

        RULES:
        - Missing file: defaults are saved and returned
        - Unreadable or malformed file: ConfigError
        - Invalid values: ConfigError from validate()
        """
        config_path = path or get_config_path()

        if not config_path.exists():
            logger.info("No config at %s, writing defaults", config_path)
            config = cls()
            config.save(config_path)
            return config

        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}") from e

        try:
            data = tomllib.loads(raw)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

        return cls.from_dict(data)

    def save(self, path: Path | None = None) -> Path:
        """Write this config as TOML and return the path written."""
        config_path = path or get_config_path()
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

        try:
            config_path.write_text(tomli_w.dumps(self.to_dict()), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write config file: {e}") from e

        logger.debug("Saved config to %s", config_path)
        return config_path

    @classmethod
    def from_args(cls, args: argparse.Namespace, path: Path | None = None) -> Config:
        """Load the config and apply command-line overrides.

        A --wpm value outside the allowed range is clamped, not rejected.
        """
        config = cls.load(path)
        wpm = getattr(args, "wpm", None)
        if wpm is not None:
            config.wpm = clamp_wpm(wpm)
        return config


def get_config_path() -> Path:
    """Return the config file path (SPEEDREADER_CONFIG wins if set)."""
    override = os.getenv("SPEEDREADER_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return Path(platformdirs.user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_api_key() -> str:
    """Load the OpenRouter API key from the environment.

    WHY: The evaluation request is authenticated with a Bearer token.
    Keeping it in the environment (or .env) keeps it out of config.toml.

    RULES:
    - Raises ValueError if the key is missing or blank
    - Never returns a placeholder value
    """
    key = os.getenv("OPEN_ROUTER_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "OpenRouter API key not configured. "
            "Set OPEN_ROUTER_API_KEY in the environment or a .env file."
        )
    return key
