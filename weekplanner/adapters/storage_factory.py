"""Storage adapter factory — creates the right adapter based on config."""

from __future__ import annotations

from weekplanner.config import settings
from weekplanner.ports.storage_port import KeyValueStorage


def create_storage(db_path: str | None = None) -> KeyValueStorage:
    """Return the storage adapter matching the STORAGE_BACKEND setting.

    Args:
        db_path: SQLite file override. Ignored by the memory backend.
    """
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "sqlite":
        from weekplanner.adapters.sqlite_storage import SQLiteStorage

        return SQLiteStorage(db_path=db_path or settings.DATABASE_PATH)

    if backend == "memory":
        from weekplanner.adapters.memory_storage import MemoryStorage

        return MemoryStorage()

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")
