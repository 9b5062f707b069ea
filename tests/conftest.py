"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from idlevault.conf import settings
from idlevault.storage import MemoryStorage

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def configure_test_settings() -> Generator[None]:
    """Configure settings for each test and reset them afterwards.

    Tests never touch the disk through the configured backend: the default
    backend is switched to memory and autosave runs on a short interval.

    Yields:
        None
    """
    settings.configure(
        STORAGE_KEY="test_save",
        SAVE_VERSION=1,
        BACKUP_SLOTS=3,
        AUTOSAVE_ENABLED=True,
        AUTOSAVE_INTERVAL=30.0,
        QUICK_SAVE_KEY="F5",
        QUICK_LOAD_KEY="F9",
        NUMBER_NOTATION="standard",
        NUMBER_PRECISION=2,
        STORAGE_BACKEND="memory",
        STORAGE_QUOTA_BYTES=None,
        CLOUD_MOCK_LATENCY=(0.0, 0.0),
        LOG_LEVEL="DEBUG",
    )
    yield
    settings.reset()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Return an empty unlimited in-memory store."""
    return MemoryStorage()
