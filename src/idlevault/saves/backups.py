"""Fixed-slot backup rotation for the primary save."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idlevault.storage.base import BaseStorage

logger = logging.getLogger(__name__)


class BackupRotator:
    """Copies the primary save into numbered backup keys and back.

    Backups are verbatim copies of the primary envelope string stored under
    "<storage_key>_backup_<slot>" for slots 1..slot_count. The save service
    calls create_backup(1) before every write, so slot 1 always holds the
    save that was overwritten last.

    Storage errors propagate; the save service decides how to report them.

    Attributes:
        storage: Backing key-value store.
        storage_key: Key of the primary save.
        slot_count: Number of backup slots.
    """

    def __init__(self, storage: BaseStorage, storage_key: str, slot_count: int = 3) -> None:
        """Initialize the rotator.

        Args:
            storage: Backing key-value store.
            storage_key: Key of the primary save.
            slot_count: Number of backup slots (at least 1).
        """
        if slot_count < 1:
            msg = f"slot_count must be at least 1, got {slot_count}"
            raise ValueError(msg)
        self.storage = storage
        self.storage_key = storage_key
        self.slot_count = slot_count

    @property
    def slots(self) -> range:
        """Valid slot numbers."""
        return range(1, self.slot_count + 1)

    def is_valid_slot(self, slot: object) -> bool:
        """Return True if slot is an integer in 1..slot_count."""
        return isinstance(slot, int) and not isinstance(slot, bool) and slot in self.slots

    def backup_key(self, slot: int) -> str:
        """Return the storage key of a backup slot."""
        return f"{self.storage_key}_backup_{slot}"

    def create_backup(self, slot: int = 1) -> bool:
        """Copy the primary save into slot.

        Returns:
            True if copied; False if the slot is invalid or there is no primary save.
        """
        if not self.is_valid_slot(slot):
            logger.warning("Invalid backup slot: %r", slot)
            return False

        current = self.storage.get_item(self.storage_key)
        if current is None:
            return False

        self.storage.set_item(self.backup_key(slot), current)
        logger.debug("Created backup in slot %d", slot)
        return True

    def read(self, slot: int) -> str | None:
        """Return the raw envelope string in slot, or None if empty or invalid."""
        if not self.is_valid_slot(slot):
            return None
        return self.storage.get_item(self.backup_key(slot))

    def restore(self, slot: int) -> bool:
        """Copy slot back into the primary key.

        Returns:
            True if restored; False if the slot is invalid or empty.
        """
        backup = self.read(slot)
        if backup is None:
            return False

        self.storage.set_item(self.storage_key, backup)
        logger.info("Restored primary save from backup slot %d", slot)
        return True

    def clear(self, slot: int) -> None:
        """Delete one backup slot."""
        if self.is_valid_slot(slot):
            self.storage.remove_item(self.backup_key(slot))

    def clear_all(self) -> None:
        """Delete every backup slot."""
        for slot in self.slots:
            self.storage.remove_item(self.backup_key(slot))
