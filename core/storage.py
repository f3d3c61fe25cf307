"""
SQLite configuration store for the Focus Flow timer.
Persists TimerConfig only; session statistics are never written to disk.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import fields
from pathlib import Path
from typing import Optional

from .models import SoundProfile, TimerConfig

logger = logging.getLogger(__name__)


def get_app_data_dir() -> Path:
    """
    Get the appropriate application data directory based on OS.
    Creates the directory if it doesn't exist.
    """
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    elif os.name == 'posix':
        # macOS uses ~/Library/Application Support, Linux uses ~/.local/share
        if os.uname().sysname == 'Darwin':
            base = Path.home() / 'Library' / 'Application Support'
        else:
            base = Path(os.environ.get('XDG_DATA_HOME', Path.home() / '.local' / 'share'))
    else:
        base = Path.home()

    app_dir = base / 'FocusFlow'
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


class ConfigStore:
    """
    Key/value settings table backed by SQLite.
    Missing or malformed entries fall back to TimerConfig defaults.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize storage with database path.

        Args:
            db_path: Optional custom path for database file.
                    If None, uses default app data directory.
        """
        if db_path is None:
            db_path = str(get_app_data_dir() / 'focus_flow.db')

        self.db_path = db_path
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """Initialize database schema if the table doesn't exist."""
        with self._get_connection() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            ''')

    def load(self) -> TimerConfig:
        """Read the stored configuration."""
        defaults = TimerConfig()
        values = {}
        with self._get_connection() as conn:
            rows = conn.execute('SELECT key, value FROM settings').fetchall()

        for row in rows:
            key, raw = row['key'], row['value']
            if not hasattr(defaults, key):
                logger.debug("Ignoring unknown setting %r", key)
                continue
            values[key] = _decode(raw, getattr(defaults, key))

        # TimerConfig clamps anything out of range.
        return TimerConfig(**values)

    def save(self, config: TimerConfig):
        """Write every configuration field."""
        with self._get_connection() as conn:
            for f in fields(config):
                conn.execute('''
                    INSERT OR REPLACE INTO settings (key, value)
                    VALUES (?, ?)
                ''', (f.name, _encode(getattr(config, f.name))))


def _encode(value) -> str:
    if isinstance(value, SoundProfile):
        return value.value
    return str(value)


def _decode(raw: str, default):
    """Convert a stored string to the type of *default*."""
    if isinstance(default, bool):
        return raw.lower() == 'true'
    if isinstance(default, SoundProfile):
        return SoundProfile.parse(raw)
    try:
        return type(default)(raw)
    except ValueError:
        logger.warning("Invalid stored value %r, using default", raw)
        return default
