"""Persistence context shared by the game and its systems.

This module provides the PersistenceContext class, which holds every
persistence collaborator the game needs: the storage backend, the save
service, the event bus, the number formatter and the registered systems.
There are no module-level singletons; the game builds one context at startup
(usually with idlevault.helpers.create_context) and passes it around.

Example usage:
    context = create_context()
    context.register_system(AutoSaveSystem(core_fields=lambda: {"wave": game.wave}))
    context.setup()

    # In the game view
    def on_update(self, delta_time):
        context.update(delta_time)

    def on_key_press(self, symbol, modifiers):
        context.on_key_press(symbol, modifiers)

    label.text = context.formatter.format(wallet.get("gold"))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from idlevault.bignum.formatting import NumberFormatter

if TYPE_CHECKING:
    from idlevault.cloud import MockCloudSave
    from idlevault.events import EventBus
    from idlevault.saves.loader import SaveLoader
    from idlevault.saves.service import SaveService
    from idlevault.storage.base import BaseStorage
    from idlevault.systems.base import BaseSystem

logger = logging.getLogger(__name__)


class PersistenceContext:
    """Central object giving access to the persistence layer.

    Attributes:
        storage: Key-value store for saves and backups.
        event_bus: Publish/subscribe bus for save/load events.
        save_service: Save orchestrator.
        formatter: Number formatter used for display.
        loader: Loader of the configured save providers, if any.
        cloud: Cloud save collaborator, if any.
    """

    def __init__(
        self,
        storage: BaseStorage,
        event_bus: EventBus,
        save_service: SaveService,
        formatter: NumberFormatter | None = None,
        loader: SaveLoader | None = None,
        cloud: MockCloudSave | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            storage: Key-value store for saves and backups.
            event_bus: Bus the save service publishes on.
            save_service: Save orchestrator.
            formatter: Number formatter. Defaults to a standard-notation formatter.
            loader: Loader that registered the configured save providers.
            cloud: Cloud save collaborator.
        """
        self.storage = storage
        self.event_bus = event_bus
        self.save_service = save_service
        self.formatter = formatter or NumberFormatter()
        self.loader = loader
        self.cloud = cloud

        self._systems: dict[str, BaseSystem] = {}

    def register_system(self, system: BaseSystem) -> None:
        """Register a system under its name, replacing any previous one."""
        if system.name in self._systems:
            logger.warning("Replacing system: %s", system.name)
        self._systems[system.name] = system

    def get_system(self, name: str) -> BaseSystem | None:
        """Get a registered system by name."""
        return self._systems.get(name)

    def get_systems(self) -> dict[str, BaseSystem]:
        """Return registered systems in registration order."""
        return dict(self._systems)

    def setup(self) -> None:
        """Call setup() on every system."""
        for system in self._systems.values():
            system.setup(self)
            logger.debug("Set up system: %s", system.name)

    def update(self, delta_time: float) -> None:
        """Forward a frame update to every system."""
        for system in self._systems.values():
            system.update(delta_time, self)

    def on_key_press(self, symbol: int, modifiers: int) -> bool:
        """Forward a key press until a system handles it.

        Returns:
            True if a system handled the key.
        """
        return any(system.on_key_press(symbol, modifiers, self) for system in self._systems.values())

    def cleanup(self) -> None:
        """Call cleanup() on every system."""
        for system in self._systems.values():
            system.cleanup()
        logger.debug("Cleaned up %d systems", len(self._systems))
