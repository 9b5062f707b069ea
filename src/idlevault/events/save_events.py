"""Events published by the save service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idlevault.events.base import Event


@dataclass
class GameSavedEvent(Event):
    """Fired after a save was written to storage.

    Attributes:
        timestamp: Save time in milliseconds since the epoch.
        size: Size of the written envelope in bytes.
    """

    timestamp: int
    size: int


@dataclass
class SaveFailedEvent(Event):
    """Fired when a save could not be built or written.

    The primary save key is untouched when this fires because of a write error.

    Attributes:
        reason: Description of the failure.
    """

    reason: str


@dataclass
class GameLoadedEvent(Event):
    """Fired after save data was applied to every registered subsystem.

    Attributes:
        data: The loaded (sanitized and migrated) save data.
        checksum_valid: False if the data failed integrity verification.
    """

    data: dict[str, Any] = field(default_factory=dict)
    checksum_valid: bool = True


@dataclass
class ChecksumMismatchEvent(Event):
    """Fired when a stored envelope's checksum does not match its data.

    The data is still loaded; this event only exists so the game can log or
    report the corruption.

    Attributes:
        expected: Checksum stored in the envelope, or None if it was not an integer.
        actual: Checksum recomputed from the data.
    """

    expected: int | None
    actual: int


@dataclass
class SaveImportedEvent(Event):
    """Fired after an import string was written to the primary key.

    Live state is unchanged until the game calls load().
    """


@dataclass
class BackupRestoredEvent(Event):
    """Fired after a backup slot was copied back into the primary key.

    Attributes:
        slot: The restored slot number.
    """

    slot: int


@dataclass
class SaveDeletedEvent(Event):
    """Fired after the primary save (and optionally backups) was deleted.

    Attributes:
        include_backups: Whether backup slots were deleted too.
    """

    include_backups: bool = False
