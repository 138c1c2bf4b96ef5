"""Configuration management for termtype."""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import ConfigError
from utils.paths import config_dir

log = logging.getLogger("termtype.config")


class AppSettings(BaseModel):
    """Application settings with validation."""

    # Test content
    default_language: str = Field(
        default="english200", min_length=1, description="Language used without --language"
    )
    word_count: int = Field(default=50, ge=1, description="Words per random test")
    allow_repeats: bool = Field(
        default=True,
        description="Repeat words when the count exceeds the language list size",
    )
    random_seed: Optional[int] = Field(
        default=None, description="Seed for reproducible word selection"
    )

    # Session modes
    backtrack_enabled: bool = Field(
        default=True, description="Allow backspacing into completed words"
    )
    sudden_death: bool = Field(default=False, description="Restart on the first error")
    case_insensitive: bool = Field(
        default=False, description="Ignore letter case when comparing keystrokes"
    )

    # History
    save_history: bool = Field(default=True, description="Save completed tests")
    history_file: Optional[Path] = Field(
        default=None, description="History CSV path (default: <config dir>/history.csv)"
    )

    model_config = ConfigDict(extra="ignore")


class Config:
    """Configuration loaded from a TOML file with Pydantic validation."""

    def __init__(self, config_path: Optional[Path] = None):
        """Load configuration.

        Args:
            config_path: TOML file to read; defaults to <config dir>/config.toml.
                A missing file yields default settings.

        Raises:
            ConfigError: If the file is not valid TOML or fails validation
        """
        self.config_dir = config_dir()
        self.config_path = config_path or self.config_dir / "config.toml"
        self.settings = self._load()

    def _load(self) -> AppSettings:
        try:
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            log.debug(f"No config file at {self.config_path}, using defaults")
            return AppSettings()
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Configuration file {self.config_path} is ill-formed: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {self.config_path}: {e}")

        unknown = set(data) - set(AppSettings.model_fields)
        if unknown:
            log.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")

        try:
            return AppSettings(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}")

    @property
    def language_dir(self) -> Path:
        """Directory with user-installed language lists."""
        return self.config_dir / "language"

    @property
    def history_path(self) -> Path:
        """History CSV file."""
        if self.settings.history_file is not None:
            return self.settings.history_file.expanduser()
        return self.config_dir / "history.csv"
