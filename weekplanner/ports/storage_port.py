"""Storage port — abstract interface for the key-value backing store.

Stores depend on this protocol, never on a specific backend. Each collection
lives under a single key as one serialized string.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when any storage backend operation fails."""


class StorageWriteError(StorageError):
    """Raised when a value could not be written (e.g. quota exceeded)."""


class KeyValueStorage(Protocol):
    """Abstract key-value interface used by the stores."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...
