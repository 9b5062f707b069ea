"""Save orchestration for idle games.

This module provides SaveService, the single entry point the game uses to
persist and restore progress. It gathers snapshots from every registered
subsystem, wraps them in a checksummed envelope, keeps backup copies of the
previous save and reads everything back through sanitization and migrations.

The save flow:
1. Gather core fields (gold, wave, ...) from the caller and a snapshot from
   every registered subsystem, in registration order
2. Wrap version, timestamp, core fields and snapshots in an envelope with a
   checksum of the data
3. Copy the current primary save into backup slot 1
4. Write the envelope string to the primary key

The load flow:
1. Read the primary key (absent means a fresh game)
2. Parse the envelope (or legacy payload) and verify its checksum
3. Strip prototype-pollution keys at every depth
4. Migrate the data to the current save version
5. Hand each registered subsystem its slice (or None)

No exception crosses the public API. Every method returns a bool or a result
object and logs the failure, so a broken save never takes the game down.

Example usage:
    service = SaveService(MemoryStorage(), event_bus=event_bus)
    service.register_subsystem("wallet", wallet_provider)

    service.save({"wave": 12})

    result = service.load()
    if not result.success:
        show_error(result.message)
    elif not result.checksum_valid:
        logger.warning("Save was modified outside the game")
"""

from __future__ import annotations

import logging
import math
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from idlevault.bignum.formatting import format_bytes
from idlevault.conf import settings
from idlevault.events import (
    BackupRestoredEvent,
    ChecksumMismatchEvent,
    GameLoadedEvent,
    GameSavedEvent,
    SaveDeletedEvent,
    SaveFailedEvent,
    SaveImportedEvent,
)
from idlevault.exceptions import ImportFormatError, SaveParseError
from idlevault.saves.backups import BackupRotator
from idlevault.saves.envelope import RESERVED_KEYS, EnvelopeCodec, canonical_json, parse_json
from idlevault.saves.migrations import MigrationRegistry, get_version
from idlevault.saves.registry import SubsystemRegistry
from idlevault.saves.results import BackupInfo, ImportResult, LoadResult, SaveErrorKind, SaveState
from idlevault.saves.sanitize import contains_dangerous_keys, sanitize_json
from idlevault.saves.transfer import decode_import, encode_export

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from idlevault.events import Event, EventBus
    from idlevault.saves.envelope import SaveEnvelope
    from idlevault.storage.base import BaseStorage

logger = logging.getLogger(__name__)


class SaveService:
    """Persists and restores the state of every registered subsystem.

    Attributes:
        storage: Key-value store holding the primary save and its backups.
        registry: Registered save handlers.
        migrations: Upgrade chain applied to older saves on load.
        codec: Envelope wrapper and parser.
        version: Save format version written by this build.
        event_bus: Optional bus receiving save/load events.
    """

    def __init__(
        self,
        storage: BaseStorage,
        *,
        storage_key: str | None = None,
        version: int | None = None,
        backup_slots: int | None = None,
        event_bus: EventBus | None = None,
        registry: SubsystemRegistry | None = None,
        migrations: MigrationRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the save service.

        Args:
            storage: Key-value store to persist into.
            storage_key: Primary save key. Defaults to settings.STORAGE_KEY.
            version: Save format version. Defaults to settings.SAVE_VERSION.
            backup_slots: Number of backup slots. Defaults to settings.BACKUP_SLOTS.
            event_bus: Bus to publish save/load events on.
            registry: Subsystem registry to use instead of a new one.
            migrations: Migration chain to use instead of an empty one.
            clock: Returns the current time in seconds since the epoch.
        """
        self.storage = storage
        self.version = version if version is not None else settings.SAVE_VERSION
        self.event_bus = event_bus
        self.registry = registry if registry is not None else SubsystemRegistry()
        self.migrations = migrations if migrations is not None else MigrationRegistry()
        self.codec = EnvelopeCodec()
        self.clock = clock

        self._backup_slots = backup_slots if backup_slots is not None else settings.BACKUP_SLOTS
        self._storage_key = storage_key or settings.STORAGE_KEY
        self.backups = BackupRotator(storage, self._storage_key, self._backup_slots)

        self._state = SaveState.IDLE
        self._is_saving = False
        self._queued: dict[str, Any] | None = None

    def init(self, storage_key: str | None = None) -> SaveService:
        """Point the service at a different primary key.

        Args:
            storage_key: New primary key. None keeps the current key.

        Returns:
            The service, for chaining.
        """
        if storage_key:
            self._storage_key = storage_key
            self.backups = BackupRotator(self.storage, storage_key, self._backup_slots)
            logger.info("Save service using storage key '%s'", storage_key)
        return self

    @property
    def storage_key(self) -> str:
        """Key of the primary save."""
        return self._storage_key

    @property
    def state(self) -> SaveState:
        """Phase of the most recent save cycle."""
        return self._state

    @property
    def is_saving(self) -> bool:
        """True while a save is being written."""
        return self._is_saving

    # Subsystems

    def register_subsystem(self, name: str, handler: object) -> bool:
        """Register a save handler. See SubsystemRegistry.register()."""
        return self.registry.register(name, handler)

    def unregister_subsystem(self, name: str) -> bool:
        """Remove a save handler. Returns True if it was registered."""
        return self.registry.unregister(name)

    def _gather_snapshots(self) -> dict[str, Any]:
        snapshots: dict[str, Any] = {}
        for name, handler in self.registry.all():
            try:
                snapshots[name] = handler.get_snapshot()
            except Exception:
                logger.exception("Failed to get snapshot from subsystem '%s'", name)
                snapshots[name] = None
            else:
                logger.debug("Gathered snapshot from subsystem: %s", name)
        return snapshots

    def _build_envelope(self, core_fields: Mapping[str, Any]) -> SaveEnvelope:
        return self.codec.wrap(
            version=self.version,
            timestamp=int(self.clock() * 1000),
            core_fields=core_fields,
            snapshots=self._gather_snapshots(),
        )

    def create_save_data(self, core_fields: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Build the save data for the current game state without writing it.

        A subsystem whose get_snapshot() raises is logged and saved as None.

        Args:
            core_fields: Top-level game fields (gold, wave, ...).

        Returns:
            Dictionary of version, timestamp, core fields and subsystem snapshots.

        Raises:
            TypeError: If a snapshot is not JSON-serializable.
            ValueError: If a snapshot contains NaN or infinity.
        """
        return self._build_envelope(core_fields or {}).data

    # Saving

    def save(self, core_fields: Mapping[str, Any] | None = None) -> bool:
        """Save the game.

        A save requested while another save is in progress (for example from
        a GameSavedEvent handler or a subsystem's get_snapshot()) is queued;
        only the latest queued request is written, right after the current
        one finishes.

        Args:
            core_fields: Top-level game fields (gold, wave, ...).

        Returns:
            True if the save was written (or queued), False if it failed.
        """
        request = dict(core_fields or {})
        if self._is_saving:
            self._queued = request
            logger.debug("Save in progress, queued the latest request")
            return True

        self._is_saving = True
        try:
            result = self._save_once(request)
            while self._queued is not None:
                queued, self._queued = self._queued, None
                self._save_once(queued)
        finally:
            self._is_saving = False
        return result

    def _save_once(self, core_fields: Mapping[str, Any]) -> bool:
        self._state = SaveState.SAVING
        try:
            envelope = self._build_envelope(core_fields)
            raw = envelope.to_json()
            self.backups.create_backup(1)
            self.storage.set_item(self.storage_key, raw)
        except Exception as e:
            logger.exception("Failed to save game")
            self._state = SaveState.SAVE_FAILED
            self._publish(SaveFailedEvent(reason=str(e) or type(e).__name__))
            return False
        else:
            self._state = SaveState.IDLE
            size = len(raw.encode("utf-8"))
            logger.info("Game saved (%s)", format_bytes(size))
            self._publish(GameSavedEvent(timestamp=envelope.timestamp, size=size))
            return True

    # Loading

    def load(self) -> LoadResult:
        """Load the primary save into every registered subsystem.

        Returns:
            LoadResult. A missing save is a success with data None. A checksum
            mismatch still loads and is reported as error CHECKSUM_MISMATCH.
        """
        try:
            raw = self.storage.get_item(self.storage_key)
        except Exception as e:
            logger.exception("Failed to read save")
            return LoadResult(success=False, error=SaveErrorKind.STORAGE_UNAVAILABLE, message=str(e))

        if raw is None:
            logger.info("No save found, starting fresh")
            return LoadResult(success=True)

        return self._load_raw(raw)

    def _load_raw(self, raw: str) -> LoadResult:
        try:
            unwrapped = self.codec.unwrap(raw)
        except SaveParseError as e:
            logger.exception("Failed to parse save")
            return LoadResult(success=False, error=SaveErrorKind.PARSE_ERROR, message=str(e))

        try:
            if contains_dangerous_keys(unwrapped.data):
                logger.warning("Stripped dangerous keys from save data")
            data = self.migrations.migrate(sanitize_json(unwrapped.data), self.version)
        except Exception as e:
            logger.exception("Failed to prepare save data")
            return LoadResult(success=False, error=SaveErrorKind.PARSE_ERROR, message=str(e))
        self.apply_save_data(data)

        error = None
        message = None
        if unwrapped.corrupted:
            error = SaveErrorKind.CHECKSUM_MISMATCH
            message = "Save data failed checksum verification"
            self._publish(
                ChecksumMismatchEvent(
                    expected=unwrapped.stored_checksum,
                    actual=unwrapped.computed_checksum or 0,
                )
            )

        logger.info("Game loaded (version %s)", data.get("version", 1))
        self._publish(GameLoadedEvent(data=data, checksum_valid=not unwrapped.corrupted))
        return LoadResult(success=True, data=data, error=error, message=message)

    def apply_save_data(self, data: Mapping[str, Any]) -> None:
        """Hand each registered subsystem its slice of data.

        Subsystems without a slice receive None. A subsystem that raises is
        logged and skipped; the others still load.

        Args:
            data: Sanitized, migrated save data.
        """
        for name, handler in self.registry.all():
            try:
                handler.apply_snapshot(data.get(name))
            except Exception:
                logger.exception("Failed to apply snapshot to subsystem '%s'", name)
            else:
                logger.debug("Applied snapshot to subsystem: %s", name)

    # Backups

    def create_backup(self, slot: int = 1) -> bool:
        """Copy the primary save into a backup slot.

        Returns:
            True if copied; False for an invalid slot, no save, or a storage error.
        """
        try:
            return self.backups.create_backup(slot)
        except Exception:
            logger.exception("Failed to create backup in slot %s", slot)
            return False

    def restore_backup(self, slot: int) -> LoadResult:
        """Copy a backup slot into the primary key and load it.

        Returns:
            The load result, or a failure with INVALID_SLOT, NOT_FOUND or
            STORAGE_UNAVAILABLE.
        """
        if not self.backups.is_valid_slot(slot):
            logger.warning("Cannot restore invalid backup slot %r", slot)
            return LoadResult(success=False, error=SaveErrorKind.INVALID_SLOT, message=f"Invalid backup slot {slot}")

        try:
            restored = self.backups.restore(slot)
        except Exception as e:
            logger.exception("Failed to restore backup slot %d", slot)
            return LoadResult(success=False, error=SaveErrorKind.STORAGE_UNAVAILABLE, message=str(e))

        if not restored:
            logger.warning("No backup in slot %d", slot)
            return LoadResult(success=False, error=SaveErrorKind.NOT_FOUND, message=f"No backup in slot {slot}")

        self._publish(BackupRestoredEvent(slot=slot))
        return self.load()

    def get_backups_info(self) -> list[BackupInfo]:
        """Summarize every non-empty backup slot, in slot order.

        Slots that cannot be read or parsed are reported with readable=False.
        """
        backups: list[BackupInfo] = []
        for slot in self.backups.slots:
            try:
                raw = self.backups.read(slot)
            except Exception:
                logger.exception("Failed to read backup slot %d", slot)
                backups.append(BackupInfo(slot=slot, readable=False))
                continue
            if raw is None:
                continue
            try:
                info = _describe_backup(slot, raw)
            except Exception:
                logger.exception("Failed to describe backup slot %d", slot)
                info = BackupInfo(slot=slot, readable=False)
            backups.append(info)
        return backups

    # Management

    def has_save(self) -> bool:
        """Return True if a primary save exists."""
        try:
            return self.storage.get_item(self.storage_key) is not None
        except Exception:
            logger.exception("Failed to check for save")
            return False

    def delete_save(self, include_backups: bool = False) -> bool:
        """Delete the primary save, and optionally every backup slot.

        Returns:
            True if deleted, False on a storage error.
        """
        try:
            self.storage.remove_item(self.storage_key)
            if include_backups:
                self.backups.clear_all()
        except Exception:
            logger.exception("Failed to delete save")
            return False
        else:
            logger.info("Deleted save%s", " and backups" if include_backups else "")
            self._publish(SaveDeletedEvent(include_backups=include_backups))
            return True

    def get_save_size(self) -> int:
        """Return the size of the primary save in UTF-8 bytes (0 if none)."""
        try:
            raw = self.storage.get_item(self.storage_key)
        except Exception:
            logger.exception("Failed to read save size")
            return 0
        return len(raw.encode("utf-8")) if raw is not None else 0

    def get_formatted_save_size(self) -> str:
        """Return the save size as "512 B", "1.50 KB" or "2.00 MB"."""
        return format_bytes(self.get_save_size())

    # Import / export

    def export_save(self) -> str:
        """Return the primary save as a shareable string, or "" if there is none."""
        try:
            raw = self.storage.get_item(self.storage_key)
        except Exception:
            logger.exception("Failed to read save for export")
            return ""
        if raw is None:
            return ""
        return encode_export(raw)

    def import_save(self, text: object) -> ImportResult:
        """Validate an export string and write it to the primary key.

        Live state is not touched; call load() afterwards to apply it. The
        current save is copied into backup slot 1 first.

        Returns:
            ImportResult, failing with EMPTY_INPUT, INVALID_FORMAT,
            INVALID_JSON or STORAGE_UNAVAILABLE.
        """
        try:
            data = decode_import(text)
        except ImportFormatError as e:
            logger.warning("Rejected save import: %s", e)
            return ImportResult(success=False, error=e.kind, message=str(e))

        try:
            serialized = canonical_json(data)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning("Rejected save import: %s", e)
            return ImportResult(success=False, error=SaveErrorKind.INVALID_JSON, message=str(e))

        try:
            self.backups.create_backup(1)
            self.storage.set_item(self.storage_key, serialized)
        except Exception as e:
            logger.exception("Failed to write imported save")
            return ImportResult(success=False, error=SaveErrorKind.STORAGE_UNAVAILABLE, message=str(e))

        logger.info("Imported save")
        self._publish(SaveImportedEvent())
        return ImportResult(success=True)

    def _publish(self, event: Event) -> None:
        if self.event_bus is None:
            return
        try:
            self.event_bus.publish(event)
        except Exception:
            logger.exception("Event handler failed for %s", type(event).__name__)


def _describe_backup(slot: int, raw: str) -> BackupInfo:
    try:
        parsed = parse_json(raw)
    except SaveParseError:
        logger.warning("Backup slot %d is not valid JSON", slot)
        return BackupInfo(slot=slot, readable=False)

    if isinstance(parsed, dict) and isinstance(parsed.get("data"), dict):
        parsed = parsed["data"]
    if not isinstance(parsed, dict):
        return BackupInfo(slot=slot, readable=False)

    data = sanitize_json(parsed)
    timestamp = data.get("timestamp") or data.get("lastSaveTime") or 0
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        timestamp = 0
    elif isinstance(timestamp, float) and not math.isfinite(timestamp):
        logger.warning("Backup slot %d has an out-of-range timestamp", slot)
        return BackupInfo(slot=slot, readable=False)

    core = {
        key: value
        for key, value in data.items()
        if key not in RESERVED_KEYS and (value is None or isinstance(value, (str, int, float, bool)))
    }
    return BackupInfo(
        slot=slot,
        timestamp=int(timestamp),
        date=format_date(int(timestamp)),
        version=get_version(data),
        core=core,
    )


def format_date(timestamp_ms: int) -> str:
    """Format a millisecond timestamp as "YYYY-MM-DD HH:MM" (UTC), or "unknown"."""
    if timestamp_ms <= 0:
        return "unknown"
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, UTC).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return "unknown"
