"""In-memory storage backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from idlevault.exceptions import StorageQuotaExceededError
from idlevault.storage.base import BaseStorage

if TYPE_CHECKING:
    from collections.abc import Iterator


class MemoryStorage(BaseStorage):
    """Dictionary-backed store with an optional size quota.

    Useful for tests and for headless tools. The quota emulates browser
    storage limits: a write that would push the total size (UTF-8 bytes of
    keys and values) past quota_bytes raises StorageQuotaExceededError and
    leaves the previous value in place.

    Attributes:
        quota_bytes: Maximum total size, or None for unlimited.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        """Initialize an empty store.

        Args:
            quota_bytes: Optional capacity limit in bytes.
        """
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, enforcing the quota."""
        self.validate_key(key)
        if self.quota_bytes is not None:
            current = self._items.get(key)
            new_size = self.size() - (_entry_size(key, current) if current is not None else 0)
            new_size += _entry_size(key, value)
            if new_size > self.quota_bytes:
                msg = f"Storage quota of {self.quota_bytes} bytes exceeded writing '{key}'"
                raise StorageQuotaExceededError(msg)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        """Iterate over stored keys in insertion order."""
        return iter(list(self._items))

    def size(self) -> int:
        """Return the total stored size in bytes."""
        return sum(_entry_size(key, value) for key, value in self._items.items())

    def clear(self) -> None:
        """Remove every key."""
        self._items.clear()


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))
