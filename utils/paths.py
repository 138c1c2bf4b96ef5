"""XDG base directories for termtype."""

import os
from pathlib import Path

APP_NAME = "termtype"


def config_dir() -> Path:
    """Directory holding config.toml, language lists and the history file."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def state_dir() -> Path:
    """Directory holding log files."""
    xdg_state_home = os.environ.get("XDG_STATE_HOME") or str(
        Path.home() / ".local" / "state"
    )
    return Path(xdg_state_home) / APP_NAME
