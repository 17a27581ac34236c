"""
Preferences Service - Persist palette sort/group choices.

A small key/value table in SQLite:
  palette.sort_mode   → relevance | items | plugin
  palette.group_mode  → none | plugin | type

Values are validated on load; anything unknown or unreadable silently falls
back to the defaults (relevance / none).
"""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from palette.search.organizer import (
    DEFAULT_GROUP_MODE,
    DEFAULT_SORT_MODE,
    GroupMode,
    SortMode,
    normalize_group_mode,
    normalize_sort_mode,
)
from palette.utils.helpers import DATA_DIR

SORT_MODE_KEY = "palette.sort_mode"
GROUP_MODE_KEY = "palette.group_mode"


class PreferencesService:
    """
    Key/value store for palette preferences.

    Methods:
        get(key) / set(key, value): raw string access
        load_modes(): validated (SortMode, GroupMode)
        save_modes(sort, group): persist both modes
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        if db_path is None or str(db_path) == "":
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            db_path = DATA_DIR / "preferences.db"
        self.db_path = db_path

        self._conn = sqlite3.connect(str(self.db_path))
        if str(self.db_path) != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_database()
        logger.debug(f"PreferencesService initialized with db at {self.db_path}")

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS preferences (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> Optional[str]:
        """
        Read a raw preference value.

        Returns:
            The stored string, or None if missing or unreadable
        """
        try:
            row = self._conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error:
            logger.debug(f"Could not read preference {key}")
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Write a raw preference value (best effort)."""
        try:
            self._conn.execute("""
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """, (key, value))
            self._conn.commit()
        except sqlite3.Error:
            logger.exception(f"Failed to save preference {key}")

    def load_modes(self) -> tuple[SortMode, GroupMode]:
        """Load sort and group modes, falling back to defaults."""
        return (
            normalize_sort_mode(self.get(SORT_MODE_KEY)),
            normalize_group_mode(self.get(GROUP_MODE_KEY)),
        )

    def save_modes(self, sort_mode: SortMode, group_mode: GroupMode) -> None:
        self.set(SORT_MODE_KEY, SortMode(sort_mode).value)
        self.set(GROUP_MODE_KEY, GroupMode(group_mode).value)

    def reset(self) -> None:
        """Restore the default modes."""
        self.save_modes(DEFAULT_SORT_MODE, DEFAULT_GROUP_MODE)

    def close(self) -> None:
        self._conn.close()


# Singleton accessor
_preferences_service_instance = None


def get_preferences_service() -> PreferencesService:
    """
    Get the shared PreferencesService instance.

    Returns:
        PreferencesService: The global instance
    """
    global _preferences_service_instance
    if _preferences_service_instance is None:
        _preferences_service_instance = PreferencesService()
    return _preferences_service_instance
