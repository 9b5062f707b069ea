"""Result types returned by the save service.

No exception crosses SaveService's public API. Each operation instead returns
one of these dataclasses, carrying a success flag and, on failure (or on a
non-fatal warning such as a checksum mismatch), a SaveErrorKind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SaveErrorKind(Enum):
    """Machine-readable reasons attached to results.

    The values match the error strings of earlier save formats so they can be
    shown, logged or compared as plain strings.
    """

    STORAGE_UNAVAILABLE = "storage_unavailable"
    PARSE_ERROR = "parse_error"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    NOT_FOUND = "not_found"
    INVALID_SLOT = "invalid_slot"
    EMPTY_INPUT = "empty_input"
    INVALID_FORMAT = "invalid_format"
    INVALID_JSON = "invalid_json"


class SaveState(Enum):
    """Phase of the most recent save cycle."""

    IDLE = "idle"
    SAVING = "saving"
    SAVE_FAILED = "save_failed"


@dataclass
class LoadResult:
    """Outcome of load() and restore_backup().

    Attributes:
        success: False only when the save could not be read or parsed.
        data: Loaded save data, or None for a fresh game or a failure.
        error: Failure reason, or CHECKSUM_MISMATCH as a warning on success.
        message: Human-readable detail for logs and error dialogs.
    """

    success: bool
    data: dict[str, Any] | None = None
    error: SaveErrorKind | None = None
    message: str | None = None

    @property
    def is_fresh(self) -> bool:
        """True when there was no save to load."""
        return self.success and self.data is None

    @property
    def checksum_valid(self) -> bool:
        """False when the data loaded but failed integrity verification."""
        return self.error is not SaveErrorKind.CHECKSUM_MISMATCH


@dataclass
class ImportResult:
    """Outcome of import_save()."""

    success: bool
    error: SaveErrorKind | None = None
    message: str | None = None


@dataclass
class BackupInfo:
    """Summary of one backup slot for a restore menu.

    Attributes:
        slot: Slot number (1-based).
        timestamp: Save time in milliseconds since the epoch (0 if unknown).
        date: Formatted UTC date, or "unknown".
        version: Save format version, or None if unreadable.
        core: Scalar core fields (gold, wave, ...) for a preview line.
        readable: False if the slot holds a string that failed to parse.
    """

    slot: int
    timestamp: int = 0
    date: str = "unknown"
    version: int | None = None
    core: dict[str, Any] = field(default_factory=dict)
    readable: bool = True
