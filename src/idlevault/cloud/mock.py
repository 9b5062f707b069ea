"""Mock cloud save service.

Stores a single cloud save in the local key-value store under EC_CLOUD_MOCK
and sleeps for a random delay on every call to simulate network latency. It
exists so cloud-sync UI (login form, conflict prompt, last-sync label) can be
built and tested before a real backend exists.
"""

from __future__ import annotations

import json
import logging
import math
import random
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from idlevault.conf import settings

if TYPE_CHECKING:
    from collections.abc import Callable

    from idlevault.storage.base import BaseStorage

logger = logging.getLogger(__name__)

CLOUD_STORAGE_KEY = "EC_CLOUD_MOCK"

CONFLICT_BUFFER_MS = 60_000
"""Timestamps closer than this are considered in sync."""

MIN_USERNAME_LENGTH = 4


class CloudError(Enum):
    """Reasons a cloud call failed."""

    USERNAME_TOO_SHORT = "username_too_short"
    NOT_LOGGED_IN = "not_logged_in"
    NO_CLOUD_SAVE = "no_cloud_save"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class CloudConflict(Enum):
    """Comparison of the local save against the cloud save."""

    NO_CLOUD = "no_cloud"
    CLOUD_NEWER = "cloud_newer"
    LOCAL_NEWER = "local_newer"
    SYNCED = "synced"


@dataclass
class CloudResult:
    """Outcome of a cloud call.

    Attributes:
        success: Whether the call succeeded.
        error: Failure reason.
        data: Save string returned by load().
        timestamp: Cloud save time in milliseconds since the epoch.
    """

    success: bool
    error: CloudError | None = None
    data: str | None = None
    timestamp: int | None = None


class MockCloudSave:
    """Single-account cloud save backed by local storage.

    Attributes:
        storage: Store holding the mock cloud record.
        latency: (min, max) delay in seconds applied to every call.
        is_logged_in: Whether a user is logged in.
        username: Logged-in user name, or "".
        last_sync_time: Milliseconds timestamp of the last save/load, or 0.
    """

    def __init__(
        self,
        storage: BaseStorage,
        latency: tuple[float, float] | None = None,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        """Initialize the mock.

        Args:
            storage: Store holding the mock cloud record.
            latency: (min, max) delay in seconds. Defaults to settings.CLOUD_MOCK_LATENCY.
            clock: Returns the current time in seconds since the epoch.
            sleep: Called with each simulated delay.
        """
        self.storage = storage
        self.latency = tuple(latency if latency is not None else settings.CLOUD_MOCK_LATENCY)
        self.clock = clock
        self.sleep = sleep

        self.is_logged_in = False
        self.username = ""
        self.last_sync_time = 0

    def _simulate_latency(self) -> None:
        low, high = self.latency
        if high <= 0:
            return
        self.sleep(random.uniform(low, high))  # noqa: S311

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _get_cloud_data(self) -> dict[str, Any] | None:
        try:
            stored = self.storage.get_item(CLOUD_STORAGE_KEY)
            if stored is None:
                return None
            data = json.loads(stored)
        except Exception:
            logger.exception("Failed to read cloud data")
            return None
        return data if isinstance(data, dict) else None

    def login(self, username: str, password: str) -> CloudResult:  # noqa: ARG002
        """Log in. Any password is accepted; the username must be longer than 3 characters."""
        self._simulate_latency()

        if not username or len(username) < MIN_USERNAME_LENGTH:
            logger.info("Cloud login rejected: username too short")
            return CloudResult(success=False, error=CloudError.USERNAME_TOO_SHORT)

        self.is_logged_in = True
        self.username = username

        cloud_data = self._get_cloud_data()
        if cloud_data:
            self.last_sync_time = _record_timestamp(cloud_data)

        logger.info("Logged in to cloud as %s", username)
        return CloudResult(success=True)

    def logout(self) -> None:
        """Log out and forget the last sync time."""
        self._simulate_latency()
        self.is_logged_in = False
        self.username = ""
        self.last_sync_time = 0
        logger.info("Logged out of cloud")

    def save(self, save_data: str) -> CloudResult:
        """Upload a save string.

        Args:
            save_data: Envelope string (or export string) to store.

        Returns:
            CloudResult with the cloud timestamp, or NOT_LOGGED_IN.
        """
        self._simulate_latency()

        if not self.is_logged_in:
            return CloudResult(success=False, error=CloudError.NOT_LOGGED_IN)

        timestamp = self._now_ms()
        record = {"data": save_data, "timestamp": timestamp, "username": self.username}
        try:
            self.storage.set_item(CLOUD_STORAGE_KEY, json.dumps(record))
        except Exception:
            logger.exception("Failed to write cloud save")
            return CloudResult(success=False, error=CloudError.STORAGE_UNAVAILABLE)

        self.last_sync_time = timestamp
        logger.info("Uploaded cloud save")
        return CloudResult(success=True, timestamp=timestamp)

    def load(self) -> CloudResult:
        """Download the cloud save string.

        Returns:
            CloudResult with data and timestamp, or NOT_LOGGED_IN / NO_CLOUD_SAVE.
        """
        self._simulate_latency()

        if not self.is_logged_in:
            return CloudResult(success=False, error=CloudError.NOT_LOGGED_IN)

        cloud_data = self._get_cloud_data()
        if not cloud_data:
            return CloudResult(success=False, error=CloudError.NO_CLOUD_SAVE)

        timestamp = _record_timestamp(cloud_data)
        self.last_sync_time = timestamp
        return CloudResult(success=True, data=cloud_data.get("data"), timestamp=timestamp)

    def check_conflict(self, local_timestamp: int) -> CloudConflict:
        """Compare a local save time (ms) with the cloud save time.

        Differences within CONFLICT_BUFFER_MS count as SYNCED. Does not
        require login.
        """
        self._simulate_latency()

        cloud_data = self._get_cloud_data()
        cloud_timestamp = _record_timestamp(cloud_data) if cloud_data else 0
        if not cloud_timestamp:
            return CloudConflict.NO_CLOUD

        if cloud_timestamp > local_timestamp + CONFLICT_BUFFER_MS:
            return CloudConflict.CLOUD_NEWER
        if local_timestamp > cloud_timestamp + CONFLICT_BUFFER_MS:
            return CloudConflict.LOCAL_NEWER
        return CloudConflict.SYNCED

    def last_sync_formatted(self) -> str:
        """Return the last sync time as "YYYY-MM-DD HH:MM" (UTC), or "--"."""
        if not self.last_sync_time:
            return "--"
        try:
            return datetime.fromtimestamp(self.last_sync_time / 1000, UTC).strftime("%Y-%m-%d %H:%M")
        except (OverflowError, OSError, ValueError):
            return "--"

    def clear(self) -> None:
        """Delete the cloud record."""
        self.storage.remove_item(CLOUD_STORAGE_KEY)
        self.last_sync_time = 0


def _record_timestamp(record: dict[str, Any]) -> int:
    """Return a cloud record's timestamp in ms, or 0 if it is missing or unusable."""
    timestamp = record.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        if timestamp is not None:
            logger.warning("Ignoring non-numeric cloud timestamp %r", timestamp)
        return 0
    if isinstance(timestamp, float) and not math.isfinite(timestamp):
        logger.warning("Ignoring out-of-range cloud timestamp %r", timestamp)
        return 0
    return max(int(timestamp), 0)
