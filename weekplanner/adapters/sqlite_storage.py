"""SQLite key-value adapter — implements KeyValueStorage.

One row per key in a single `kv_store` table. Every call opens its own
connection and commits on exit. ":memory:" keeps one connection for the
adapter lifetime, since each new connection would see an empty database.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from weekplanner.ports.storage_port import StorageError, StorageWriteError

logger = logging.getLogger(__name__)


class SQLiteStorage:
    """SQLite implementation of KeyValueStorage."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from weekplanner.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._shared: sqlite3.Connection | None = None
        if db_path == ":memory:":
            self._shared = sqlite3.connect(db_path)
            self._shared.row_factory = sqlite3.Row
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._shared is not None:
            return self._shared
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv_store table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key        TEXT PRIMARY KEY,
                    value      TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
        logger.debug("kv_store table initialized at %s", self._db_path)

    def get_item(self, key: str) -> str | None:
        """Return the stored string for key, or None if absent."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return None
        return row["value"]

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value stored under key."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now().isoformat()),
                )
        except sqlite3.Error as exc:
            raise StorageWriteError(f"Failed to write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        """Delete key; missing keys are ignored."""
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageWriteError(f"Failed to remove {key!r}: {exc}") from exc
