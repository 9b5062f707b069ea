"""Registry of save-capable subsystems."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from idlevault.exceptions import DuplicateSubsystemError
from idlevault.saves.base import is_save_handler

if TYPE_CHECKING:
    from collections.abc import Iterator

    from idlevault.saves.base import SaveHandler

logger = logging.getLogger(__name__)


class SubsystemRegistry:
    """Tracks named save handlers in registration order.

    Handlers are checked when they are registered: an object missing either
    get_snapshot() or apply_snapshot() is ignored with a warning, so a bad
    handler is caught at startup instead of crashing the first save.

    Registering a name twice replaces the earlier handler and logs a warning.
    A strict registry raises DuplicateSubsystemError instead, which is useful
    in tests and debug builds to catch two systems claiming the same slice.

    Attributes:
        strict: Raise on duplicate names instead of replacing.
    """

    def __init__(self, *, strict: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            strict: If True, duplicate registrations raise DuplicateSubsystemError.
        """
        self.strict = strict
        self._handlers: dict[str, SaveHandler] = {}

    def register(self, name: str, handler: object) -> bool:
        """Register a save handler under name.

        Args:
            name: Key of the handler's slice in the save data.
            handler: Object exposing get_snapshot() and apply_snapshot().

        Returns:
            True if registered, False if the handler was rejected.

        Raises:
            DuplicateSubsystemError: If strict and name is already registered.
        """
        if not name or not isinstance(name, str):
            logger.warning("Rejected save handler with invalid name %r", name)
            return False
        if not is_save_handler(handler):
            logger.warning("Rejected save handler '%s': missing get_snapshot or apply_snapshot", name)
            return False

        if name in self._handlers:
            if self.strict:
                msg = f"Save handler '{name}' is already registered"
                raise DuplicateSubsystemError(msg)
            # Replacing keeps the original position in the output order
            logger.warning("Re-registering save handler: %s", name)

        self._handlers[name] = handler  # type: ignore[assignment]
        logger.debug("Registered save handler: %s", name)
        return True

    def unregister(self, name: str) -> bool:
        """Remove a handler. Returns True if it was registered."""
        if self._handlers.pop(name, None) is None:
            return False
        logger.debug("Unregistered save handler: %s", name)
        return True

    def get(self, name: str) -> SaveHandler | None:
        """Get a registered handler by name."""
        return self._handlers.get(name)

    def is_registered(self, name: str) -> bool:
        """Check if a handler is registered."""
        return name in self._handlers

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._handlers)

    def all(self) -> list[tuple[str, SaveHandler]]:
        """Return (name, handler) pairs in registration order."""
        return list(self._handlers.items())

    def clear(self) -> None:
        """Remove every handler."""
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))
