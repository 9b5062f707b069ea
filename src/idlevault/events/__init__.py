"""Module for events."""

from idlevault.events.base import Event, EventBus
from idlevault.events.save_events import (
    BackupRestoredEvent,
    ChecksumMismatchEvent,
    GameLoadedEvent,
    GameSavedEvent,
    SaveDeletedEvent,
    SaveFailedEvent,
    SaveImportedEvent,
)

__all__ = [
    "BackupRestoredEvent",
    "ChecksumMismatchEvent",
    "Event",
    "EventBus",
    "GameLoadedEvent",
    "GameSavedEvent",
    "SaveDeletedEvent",
    "SaveFailedEvent",
    "SaveImportedEvent",
]
