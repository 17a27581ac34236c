"""
Helper utilities for the palette engine.

Provides common functions used across packages:
- Settings loading with defaults
- Focus index clamping and wraparound
"""

from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

DATA_DIR = Path.home() / ".local" / "share" / "palette"
SETTINGS_PATH = Path.home() / ".config" / "palette" / "settings.toml"


def default_settings() -> Dict[str, Any]:
    """
    Default settings structure.

        {
            "search": {"debounce_ms": 150, "limit": 0},
            "api": {"base_url": "http://localhost:3000", "timeout": 10.0},
            "preferences": {"db_path": ""}
        }

    A limit of 0 leaves the result count to the server. An empty db_path
    means the preferences database lives under DATA_DIR.
    """
    return {
        "search": {
            "debounce_ms": 150,
            "limit": 0,
        },
        "api": {
            "base_url": "http://localhost:3000",
            "timeout": 10.0,
        },
        "preferences": {
            "db_path": "",
        },
    }


def load_settings(settings_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load palette settings from a TOML file.

    Args:
        settings_path: File to read (defaults to SETTINGS_PATH)

    Returns:
        Dictionary containing settings with defaults applied
    """
    defaults = default_settings()
    settings_path = Path(settings_path) if settings_path else SETTINGS_PATH

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError):
        logger.warning(f"Could not load settings from {settings_path}, using defaults")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def clamp_index(index: int, length: int) -> int:
    """Clamp a focus index into [0, length - 1] (0 for empty lists)."""
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


def wrap_index(index: int, length: int) -> int:
    """Wrap a focus index that stepped one past either end."""
    if length <= 0:
        return 0
    if index < 0:
        return length - 1
    if index >= length:
        return 0
    return index
