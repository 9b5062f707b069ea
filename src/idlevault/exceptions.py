"""Exceptions raised inside idlevault.

These are internal: SaveService catches every one of them at its public
boundary and reports a result object instead. They are still public so custom
storage backends and subsystems can raise the right type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idlevault.saves.results import SaveErrorKind


class IdleVaultError(Exception):
    """Base class for all idlevault errors."""


class StorageError(IdleVaultError):
    """The key-value store could not complete an operation."""


class StorageUnavailableError(StorageError):
    """The store cannot be read or written at all (disabled, I/O failure)."""


class StorageQuotaExceededError(StorageError):
    """A write would exceed the store's capacity."""


class InvalidStorageKeyError(StorageError):
    """A storage key contains characters the backend cannot accept."""


class SaveParseError(IdleVaultError):
    """A stored save string is not valid JSON or not a JSON object."""


class ImportFormatError(IdleVaultError):
    """An import string was rejected.

    Attributes:
        kind: Machine-readable reason (EMPTY_INPUT, INVALID_FORMAT, INVALID_JSON).
    """

    def __init__(self, kind: SaveErrorKind, message: str | None = None) -> None:
        """Initialize with the rejection kind and an optional detail message."""
        super().__init__(message or kind.value)
        self.kind = kind


class DuplicateSubsystemError(IdleVaultError):
    """A subsystem name was registered twice on a strict registry."""


class MigrationError(IdleVaultError):
    """A save migration step failed."""


class ImproperlyConfiguredError(IdleVaultError):
    """A persistence setting has an unusable value."""
