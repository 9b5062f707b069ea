"""Base class for key-value storage backends."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from idlevault.exceptions import InvalidStorageKeyError

if TYPE_CHECKING:
    from collections.abc import Iterator

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class BaseStorage(ABC):
    """Synchronous string-keyed persistent store.

    One string value per key with overwrite semantics, mirroring a browser's
    localStorage. Each set_item() must replace the value atomically so a
    reader never observes a half-written record.

    Backends raise StorageError subclasses (or OSError) on failure; the save
    service catches them and reports a failed result.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over stored keys."""

    def has_item(self, key: str) -> bool:
        """Return True if key is present."""
        return self.get_item(key) is not None

    @staticmethod
    def validate_key(key: str) -> str:
        """Return key unchanged, or raise InvalidStorageKeyError.

        Keys are limited to letters, digits, "_", "." and "-" so every
        backend can map them to file names safely.
        """
        if not KEY_PATTERN.match(key) or key in {".", ".."}:
            msg = f"Invalid storage key: {key!r}"
            raise InvalidStorageKeyError(msg)
        return key
