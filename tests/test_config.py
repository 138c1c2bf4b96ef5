"""Tests for utils.config module."""

from pathlib import Path

import pytest

from core.errors import ConfigError
from utils.config import AppSettings, Config


@pytest.fixture
def xdg_config(tmp_path, monkeypatch):
    """Point the config directory at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path / "termtype"


class TestConfigDefaults:
    """Tests for Config without a config file."""

    def test_missing_file_uses_defaults(self, xdg_config):
        config = Config()
        assert config.settings == AppSettings()
        assert config.config_path == xdg_config / "config.toml"

    def test_default_history_path(self, xdg_config):
        assert Config().history_path == xdg_config / "history.csv"

    def test_language_dir(self, xdg_config):
        assert Config().language_dir == xdg_config / "language"

    def test_default_values(self):
        settings = AppSettings()
        assert settings.default_language == "english200"
        assert settings.word_count == 50
        assert settings.backtrack_enabled is True
        assert settings.sudden_death is False
        assert settings.save_history is True


class TestConfigFile:
    """Tests for loading config.toml."""

    def test_values_loaded(self, tmp_path, xdg_config):
        path = tmp_path / "config.toml"
        path.write_text(
            'default_language = "german"\n'
            "word_count = 10\n"
            "sudden_death = true\n"
            'history_file = "/tmp/termtype-history.csv"\n'
        )
        config = Config(path)

        assert config.settings.default_language == "german"
        assert config.settings.word_count == 10
        assert config.settings.sudden_death is True
        assert config.history_path == Path("/tmp/termtype-history.csv")

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text('theme = "dark"\nword_count = 5\n')
        config = Config(path)

        assert config.settings.word_count == 5
        assert "theme" in caplog.text

    def test_history_file_expands_user(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        path = tmp_path / "config.toml"
        path.write_text('history_file = "~/results.csv"\n')
        assert Config(path).history_path == tmp_path / "results.csv"

    def test_ill_formed_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("word_count = = 3\n")
        with pytest.raises(ConfigError, match="ill-formed"):
            Config(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("word_count = 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            Config(path)
