"""Unit tests for the config module.

WHY: A broken config file must produce a clear error before the terminal
is taken over, and conflicting key bindings must never reach playback.

HOW: Every test points SPEEDREADER_CONFIG at a file under tmp_path, so
the real user config directory is never touched.

RULES:
- All file I/O tests use tmp_path fixtures for isolation.
"""

import argparse
import tomllib

import pytest

from speedreader.config import (
    DEFAULT_MODEL,
    DEFAULT_WPM,
    DEFAULT_WPM_STEP,
    MAX_WPM,
    MIN_WPM,
    Config,
    KeyBindings,
    clamp_wpm,
    describe_key,
    get_config_path,
    load_api_key,
)
from speedreader.errors import ConfigError


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "speedreader" / "config.toml"
    monkeypatch.setenv("SPEEDREADER_CONFIG", str(path))
    return path


class TestConfigPath:
    def test_env_override(self, config_path):
        assert get_config_path() == config_path

    def test_default_under_user_config_dir(self, monkeypatch):
        monkeypatch.delenv("SPEEDREADER_CONFIG", raising=False)
        path = get_config_path()
        assert path.name == "config.toml"
        assert path.parent.name == "speedreader"


class TestLoadAndSave:
    def test_missing_file_writes_defaults(self, config_path):
        config = Config.load()

        assert config == Config()
        assert config_path.is_file()
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        assert data["wpm"] == DEFAULT_WPM
        assert data["wpm_step"] == DEFAULT_WPM_STEP
        assert data["model"] == DEFAULT_MODEL
        assert data["keys"]["pause"] == " "

    def test_round_trip_custom_values(self, config_path):
        custom = Config(
            wpm=420,
            wpm_step=20,
            model="some/model",
            keys=KeyBindings(quit="x", pause="p", increase_wpm="k", decrease_wpm="j"),
        )
        custom.save()

        assert Config.load() == custom

    def test_missing_keys_fall_back_to_defaults(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text('wpm = 400\n[keys]\nquit = "x"\n', encoding="utf-8")

        config = Config.load()

        assert config.wpm == 400
        assert config.wpm_step == DEFAULT_WPM_STEP
        assert config.keys.quit == "x"
        assert config.keys.pause == " "

    def test_malformed_toml_raises(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("wpm = = 3", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            Config.load()

    @pytest.mark.parametrize("body", [
        "wpm = 10",
        "wpm = 5000",
        'wpm = "fast"',
        "wpm_step = 0",
        "wpm_step = -5",
        'model = ""',
        'keys = "q"',
    ])
    def test_invalid_values_raise(self, config_path, body):
        config_path.parent.mkdir(parents=True)
        config_path.write_text(body + "\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            Config.load()

    def test_explicit_path_argument(self, tmp_path, config_path):
        other = tmp_path / "elsewhere.toml"
        Config(wpm=500).save(other)

        assert Config.load(other).wpm == 500
        assert not config_path.exists()


class TestFromArgs:
    def test_no_override(self, config_path):
        config = Config.from_args(argparse.Namespace(wpm=None))
        assert config.wpm == DEFAULT_WPM

    def test_override(self, config_path):
        assert Config.from_args(argparse.Namespace(wpm=600)).wpm == 600

    def test_override_is_clamped(self, config_path):
        assert Config.from_args(argparse.Namespace(wpm=5)).wpm == MIN_WPM
        assert Config.from_args(argparse.Namespace(wpm=99999)).wpm == MAX_WPM


class TestKeyBindings:
    def test_defaults_are_valid(self):
        KeyBindings().validate()

    def test_duplicate_bindings_rejected(self):
        with pytest.raises(ConfigError, match="'quit' and 'pause'"):
            KeyBindings(quit="q", pause="q").validate()

    def test_duplicate_space_described(self):
        with pytest.raises(ConfigError, match="Spacebar"):
            KeyBindings(quit=" ").validate()

    @pytest.mark.parametrize("bad", ["", "qq"])
    def test_binding_must_be_single_character(self, bad):
        with pytest.raises(ConfigError, match="single character"):
            KeyBindings(quit=bad).validate()

    def test_conflict_in_file_rejected(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text('[keys]\nquit = " "\n', encoding="utf-8")

        with pytest.raises(ConfigError):
            Config.load()

    def test_describe_key(self):
        assert describe_key(" ") == "Spacebar"
        assert describe_key("q") == "q"


def test_clamp_wpm():
    assert clamp_wpm(MIN_WPM - 1) == MIN_WPM
    assert clamp_wpm(MAX_WPM + 1) == MAX_WPM
    assert clamp_wpm(300) == 300


class TestApiKey:
    def test_loads_key(self, monkeypatch):
        monkeypatch.setenv("OPEN_ROUTER_API_KEY", "  sk-test  ")
        assert load_api_key() == "sk-test"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_key_raises(self, monkeypatch, value):
        monkeypatch.setenv("OPEN_ROUTER_API_KEY", value)
        with pytest.raises(ValueError, match="OPEN_ROUTER_API_KEY"):
            load_api_key()

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("OPEN_ROUTER_API_KEY", raising=False)
        with pytest.raises(ValueError):
            load_api_key()
