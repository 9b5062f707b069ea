"""Event system for decoupled save/load notifications.

This module provides a publish/subscribe event bus that lets the rest of the
game react to persistence activity without the save service knowing who is
listening. A toast can announce "Game saved", an analytics hook can count
checksum mismatches, and a settings screen can refresh after an import.

The event system consists of:
- Event: Base class for all events
- EventBus: Central hub for subscribing to and publishing events

Example usage:
    # Create an event bus
    event_bus = EventBus()

    # Subscribe to save events
    def on_saved(event: GameSavedEvent):
        print(f"Saved {event.size} bytes")

    event_bus.subscribe(GameSavedEvent, on_saved)

    # Publish an event
    event_bus.publish(GameSavedEvent(timestamp=1700000000000, size=2048))

    # Clean up when done
    event_bus.clear()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class Event:
    """Base event class."""


class EventBus:
    """Central event bus for publish/subscribe event handling.

    Publishers emit events without knowing who (if anyone) will handle them,
    and subscribers listen without knowing who publishes them.

    Thread safety: This implementation is NOT thread-safe. All subscribe,
    publish, and unsubscribe calls should happen on the main game thread.

    Example usage:
        bus = EventBus()
        bus.subscribe(SaveFailedEvent, show_error_toast)
        bus.publish(SaveFailedEvent(reason="quota exceeded"))
        bus.unsubscribe(SaveFailedEvent, show_error_toast)
    """

    def __init__(self) -> None:
        """Initialize an event bus with no registered listeners."""
        self.listeners: dict[type[Event], list[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """Subscribe a handler to an event type.

        Handlers for the same event type are called in registration order.
        The same handler subscribed twice is called twice.

        Args:
            event_type: The type of event to listen for (e.g., GameSavedEvent).
            handler: Callback that receives the event instance.
        """
        if event_type not in self.listeners:
            self.listeners[event_type] = []
        self.listeners[event_type].append(handler)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """Remove every subscription of handler for event_type.

        Unsubscribing a handler that is not subscribed does nothing.
        """
        if event_type in self.listeners:
            self.listeners[event_type] = [h for h in self.listeners[event_type] if h != handler]

    def publish(self, event: Event) -> None:
        """Publish an event to all handlers subscribed to its exact type.

        Handlers run synchronously. If a handler raises, the exception
        propagates and later handlers are not called; callers that must not
        fail (such as SaveService) guard the call themselves.

        Args:
            event: The event instance to publish.
        """
        for handler in list(self.listeners.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        """Remove all listeners for all event types."""
        self.listeners.clear()

    def unregister_all(self, subscriber: object) -> None:
        """Remove every bound-method handler belonging to subscriber.

        Args:
            subscriber: Instance whose bound methods should be unsubscribed.
        """
        for event_type in self.listeners:
            self.listeners[event_type] = [
                h for h in self.listeners[event_type] if not (hasattr(h, "__self__") and h.__self__ == subscriber)
            ]
