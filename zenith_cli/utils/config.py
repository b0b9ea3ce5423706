"""
Configuration utilities for the zenith CLI.

Environment settings come from ``.zenith.env`` files and the process
environment; user choices made interactively (such as AI consent) are kept in a
small JSON settings file.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

ENV_FILE_NAME = ".zenith.env"
DEFAULT_HOME = Path.home() / ".zenith"

_settings_cache: Optional[Dict[str, Any]] = None


def load_env_vars() -> None:
    """
    Load environment variables from .env files in the following order:
    1. .zenith.env in the current directory
    2. .zenith.env in the user's home directory
    Variables already set in the environment win over both.
    """
    if os.path.exists(ENV_FILE_NAME):
        load_dotenv(ENV_FILE_NAME)

    home_env = Path.home() / ENV_FILE_NAME
    if home_env.exists():
        load_dotenv(home_env)


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get configuration value from environment variables."""
    return os.getenv(key, default)


def get_int_config(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float_config(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_data_file_path() -> Path:
    return Path(get_config("ZENITH_DATA_FILE") or DEFAULT_HOME / "zenith.json").expanduser()


def get_settings_path() -> Path:
    explicit = get_config("ZENITH_SETTINGS_FILE")
    if explicit:
        return Path(explicit).expanduser()
    return get_data_file_path().parent / "settings.json"


def get_settings() -> Dict[str, Any]:
    """Load the user settings file, caching it for subsequent calls."""
    global _settings_cache
    if _settings_cache is not None:
        return _settings_cache

    settings: Dict[str, Any] = {}
    path = get_settings_path()
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            settings.update(json.load(f))

    _settings_cache = settings
    return _settings_cache


def save_settings(new_settings: Dict[str, Any]) -> None:
    """Merge ``new_settings`` into the settings file."""
    global _settings_cache
    path = get_settings_path()

    current: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            current = json.load(f)

    current.update(new_settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(current, f, indent=4)

    # Invalidate the cache
    _settings_cache = None
