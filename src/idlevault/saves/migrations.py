"""Save format migrations.

Each migration upgrades save data by exactly one version. Migrations are
registered under the version they produce, so a save at version 1 loaded by a
build at version 3 runs the migrations registered for 2 and then 3.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from idlevault.exceptions import MigrationError

if TYPE_CHECKING:
    from collections.abc import Callable

    Migration = Callable[[dict[str, Any]], dict[str, Any] | None]

logger = logging.getLogger(__name__)

DEFAULT_VERSION = 1
"""Version assumed for saves written before the version field existed."""


def get_version(data: dict[str, Any]) -> int:
    """Return the save format version of data, defaulting to 1.

    Missing, non-numeric, non-finite and non-positive versions all count as 1.
    """
    version = data.get("version", DEFAULT_VERSION)
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        logger.warning("Save has non-numeric version %r, assuming %d", version, DEFAULT_VERSION)
        return DEFAULT_VERSION
    if (isinstance(version, float) and not math.isfinite(version)) or version < DEFAULT_VERSION:
        logger.warning("Save has out-of-range version %r, assuming %d", version, DEFAULT_VERSION)
        return DEFAULT_VERSION
    return int(version)


class MigrationRegistry:
    """Ordered chain of one-step save upgrades.

    Example:
        migrations = MigrationRegistry()

        @migrations.register(2)
        def split_gold(data):
            data["wallet"] = {"gold": data.pop("gold", 0)}
            return data
    """

    def __init__(self) -> None:
        """Initialize an empty chain."""
        self._migrations: dict[int, Migration] = {}

    def register(self, target_version: int, fn: Migration | None = None) -> Any:  # noqa: ANN401
        """Register the migration that produces target_version.

        Can be called directly or used as a decorator.

        Args:
            target_version: Version the migration upgrades to (>= 2).
            fn: Callable receiving save data and returning the upgraded data.
                Returning None means the data was modified in place.

        Returns:
            fn, or a decorator when fn is omitted.

        Raises:
            ValueError: If target_version is below 2 or already registered.
        """
        if target_version <= DEFAULT_VERSION:
            msg = f"Migration target version must be greater than {DEFAULT_VERSION}, got {target_version}"
            raise ValueError(msg)
        if target_version in self._migrations:
            msg = f"A migration to version {target_version} is already registered"
            raise ValueError(msg)

        def decorator(func: Migration) -> Migration:
            self._migrations[target_version] = func
            logger.debug("Registered migration to version %d: %s", target_version, getattr(func, "__name__", func))
            return func

        if fn is None:
            return decorator
        return decorator(fn)

    def has_migration(self, target_version: int) -> bool:
        """Check if a migration to target_version is registered."""
        return target_version in self._migrations

    def migrate(self, data: dict[str, Any], current_version: int) -> dict[str, Any]:
        """Upgrade data to current_version.

        Versions without a registered migration are stepped over unchanged.
        After each step the data's "version" is set to the step's target. A
        step that raises stops the chain: the data is returned at the last
        version that migrated cleanly and the failure is logged.

        Args:
            data: Sanitized save data. Not modified; a copy is migrated.
            current_version: Version the running build writes.

        Returns:
            Migrated save data.
        """
        version = get_version(data)
        if version > current_version:
            logger.warning("Save version %d is newer than supported version %d", version, current_version)
            return data
        if version == current_version:
            return data

        migrated = dict(data)
        for target in range(version + 1, current_version + 1):
            migration = self._migrations.get(target)
            if migration is not None:
                try:
                    migrated = self._run_step(migration, migrated, target)
                except MigrationError:
                    logger.exception("Stopping save migration at version %d", target - 1)
                    return migrated
            migrated["version"] = target

        logger.info("Migrated save from version %d to %d", version, current_version)
        return migrated

    def _run_step(self, migration: Migration, data: dict[str, Any], target: int) -> dict[str, Any]:
        try:
            result = migration(data)
        except Exception as e:
            msg = f"Migration to version {target} failed: {e}"
            raise MigrationError(msg) from e

        if result is None:
            return data
        if not isinstance(result, dict):
            msg = f"Migration to version {target} returned {type(result).__name__}, expected dict"
            raise MigrationError(msg)
        return result

    def __len__(self) -> int:
        return len(self._migrations)
