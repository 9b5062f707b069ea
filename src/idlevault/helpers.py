"""Helper functions for wiring idlevault into a game.

This module provides high-level functions to build the persistence layer from
settings. Most games only need create_context(); the other helpers exist for
games that assemble the pieces themselves.
"""

import logging
from pathlib import Path

from rich.logging import RichHandler

from idlevault.cloud import MockCloudSave
from idlevault.conf import settings
from idlevault.context import PersistenceContext
from idlevault.events import EventBus
from idlevault.providers import DisplaySettingsProvider
from idlevault.saves.loader import SaveLoader
from idlevault.saves.service import SaveService
from idlevault.storage import BaseStorage, FileStorage, MemoryStorage

logger = logging.getLogger(__name__)


def setup_logging(log_level: str | None = None) -> None:
    """Configure logging for the game.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to settings.LOG_LEVEL.

    Side effects:
        - Configures the root logger with RichHandler
        - Sets the specified log level
    """
    level = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, markup=False)],
    )


def create_storage() -> BaseStorage:
    """Create the storage backend selected by settings.STORAGE_BACKEND.

    Returns:
        FileStorage rooted at SAVES_DIR (relative paths resolve against the
        working directory), or MemoryStorage limited to STORAGE_QUOTA_BYTES.

    Raises:
        ValueError: If STORAGE_BACKEND is not "file" or "memory".
    """
    backend = settings.STORAGE_BACKEND
    if backend == "memory":
        return MemoryStorage(quota_bytes=settings.STORAGE_QUOTA_BYTES)
    if backend == "file":
        saves_dir = Path(settings.SAVES_DIR)
        if not saves_dir.is_absolute():
            saves_dir = Path.cwd() / saves_dir
        return FileStorage(saves_dir)

    msg = f"Unknown STORAGE_BACKEND: {backend!r}"
    raise ValueError(msg)


def create_context(storage: BaseStorage | None = None, *, with_cloud: bool = False) -> PersistenceContext:
    """Build a PersistenceContext from settings.

    Creates the storage backend, event bus and save service, then registers
    every provider listed in INSTALLED_SAVES. If a DisplaySettingsProvider is
    installed, its formatter becomes the context's formatter so loading a save
    restores the player's notation.

    Args:
        storage: Storage to use instead of the configured backend.
        with_cloud: Also attach a MockCloudSave sharing the same storage.

    Returns:
        Context ready for register_system() and setup().

    Example:
        >>> from idlevault.helpers import create_context, setup_logging
        >>> setup_logging()
        >>> context = create_context()
        >>> result = context.save_service.load()
    """
    storage = storage if storage is not None else create_storage()
    event_bus = EventBus()
    save_service = SaveService(storage, event_bus=event_bus)

    loader = SaveLoader(settings.INSTALLED_SAVES)
    registered = loader.register_all(save_service.registry)
    logger.info("Registered %d save providers", registered)

    display = loader.get_provider(DisplaySettingsProvider.name)
    formatter = display.formatter if isinstance(display, DisplaySettingsProvider) else None

    return PersistenceContext(
        storage=storage,
        event_bus=event_bus,
        save_service=save_service,
        formatter=formatter,
        loader=loader,
        cloud=MockCloudSave(storage) if with_cloud else None,
    )
