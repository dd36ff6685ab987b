"""In-memory key-value adapter — implements KeyValueStorage.

Backs tests and throwaway sessions. An optional byte quota mimics the
"storage full" failure of browser-local storage.
"""

from __future__ import annotations

from weekplanner.ports.storage_port import StorageWriteError


class MemoryStorage:
    """Dict-backed implementation of KeyValueStorage."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            others = sum(
                len(k) + len(v.encode("utf-8"))
                for k, v in self._items.items() if k != key
            )
            needed = others + len(key) + len(value.encode("utf-8"))
            if needed > self._quota_bytes:
                raise StorageWriteError(
                    f"Quota exceeded writing {key!r}: {needed} > {self._quota_bytes} bytes"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)
