"""Base class for pluggable systems.

This module provides the abstract base class for systems that hook the
persistence layer into the game loop. The game view forwards its update and
keyboard callbacks to each system, passing the PersistenceContext along.

Example:
    Creating a custom system::

        from idlevault.systems.base import BaseSystem

        class OfflineProgressSystem(BaseSystem):
            name = "offline_progress"

            def setup(self, context):
                context.event_bus.subscribe(GameLoadedEvent, self._on_loaded)

            def cleanup(self):
                ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from idlevault.context import PersistenceContext


class BaseSystem(ABC):
    """Base class for all pluggable systems.

    Attributes:
        name: Unique identifier for the system. Must be defined as a class variable.
    """

    name: ClassVar[str]

    @abstractmethod
    def setup(self, context: PersistenceContext) -> None:
        """Initialize the system before the game loop starts.

        Use it to keep references and subscribe to events.

        Args:
            context: Persistence context holding the save service and event bus.
        """

    def update(self, delta_time: float, context: PersistenceContext) -> None:  # noqa: B027
        """Called every frame during the game loop.

        Args:
            delta_time: Time elapsed since the last frame, in seconds.
            context: Persistence context.
        """

    def cleanup(self) -> None:  # noqa: B027
        """Called when the game exits. Unsubscribe from events here."""

    def on_key_press(self, symbol: int, modifiers: int, context: PersistenceContext) -> bool:  # noqa: ARG002
        """Handle key press events.

        Args:
            symbol: Arcade key constant for the pressed key.
            modifiers: Bitfield of modifier keys held.
            context: Persistence context.

        Returns:
            True if the event was handled and should stop propagating, False otherwise.
        """
        return False
