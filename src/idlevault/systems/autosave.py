"""Periodic autosave and quick save/load hotkeys.

AutoSaveSystem counts frame time and saves every AUTOSAVE_INTERVAL seconds.
Any successful save (manual, quick or automatic) restarts the countdown, so
the game never writes twice in a row for no reason. F5 quick-saves and F9
quick-loads by default; both keys are configurable by arcade.key name.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import arcade

from idlevault.conf import settings
from idlevault.events import GameSavedEvent
from idlevault.systems.base import BaseSystem

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from idlevault.context import PersistenceContext
    from idlevault.events import EventBus

logger = logging.getLogger(__name__)


def resolve_key(key: str | int) -> int:
    """Return the arcade key code for a key name like "F5" (ints pass through).

    Raises:
        ValueError: If arcade.key has no such constant.
    """
    if isinstance(key, int):
        return key
    code = getattr(arcade.key, key.upper(), None)
    if not isinstance(code, int):
        msg = f"Unknown arcade key name: {key!r}"
        raise ValueError(msg)
    return code


class AutoSaveSystem(BaseSystem):
    """Saves the game on a timer and on hotkeys.

    Attributes:
        interval: Seconds between automatic saves.
        enabled: Whether the timer saves. Hotkeys work either way.
        core_fields: Callable returning the core fields (gold, wave, ...) to save.
        quick_save_key: Arcade key code for quick save.
        quick_load_key: Arcade key code for quick load.
        elapsed: Seconds since the last save.
    """

    name: ClassVar[str] = "autosave"

    def __init__(
        self,
        core_fields: Callable[[], Mapping[str, Any]] | None = None,
        interval: float | None = None,
        *,
        enabled: bool | None = None,
        quick_save_key: str | int | None = None,
        quick_load_key: str | int | None = None,
    ) -> None:
        """Initialize the system, reading unset options from settings.

        Args:
            core_fields: Callable returning the core fields to save.
            interval: Seconds between automatic saves.
            enabled: Whether the timer saves.
            quick_save_key: Key name or code for quick save.
            quick_load_key: Key name or code for quick load.
        """
        self.core_fields = core_fields
        self.interval = float(interval if interval is not None else settings.AUTOSAVE_INTERVAL)
        self.enabled = enabled if enabled is not None else settings.AUTOSAVE_ENABLED
        self.quick_save_key = resolve_key(quick_save_key if quick_save_key is not None else settings.QUICK_SAVE_KEY)
        self.quick_load_key = resolve_key(quick_load_key if quick_load_key is not None else settings.QUICK_LOAD_KEY)
        self.elapsed = 0.0
        self._event_bus: EventBus | None = None

    def setup(self, context: PersistenceContext) -> None:
        """Subscribe to save events so any save restarts the countdown."""
        self.elapsed = 0.0
        self._event_bus = context.event_bus
        self._event_bus.subscribe(GameSavedEvent, self._on_game_saved)
        logger.debug("Autosave every %.1fs (enabled=%s)", self.interval, self.enabled)

    def cleanup(self) -> None:
        """Unsubscribe from events."""
        if self._event_bus is not None:
            self._event_bus.unregister_all(self)
            self._event_bus = None

    def _on_game_saved(self, event: GameSavedEvent) -> None:  # noqa: ARG002
        self.elapsed = 0.0

    def update(self, delta_time: float, context: PersistenceContext) -> None:
        """Advance the timer and save when the interval elapses."""
        if not self.enabled or self.interval <= 0:
            return

        self.elapsed += delta_time
        if self.elapsed < self.interval:
            return

        self.elapsed = 0.0
        if self.save(context):
            logger.debug("Autosave completed")
        else:
            logger.warning("Autosave failed")

    def save(self, context: PersistenceContext) -> bool:
        """Save now with the current core fields."""
        try:
            core = dict(self.core_fields()) if self.core_fields is not None else {}
        except Exception:
            logger.exception("Failed to gather core fields for save")
            return False
        return context.save_service.save(core)

    def on_key_press(self, symbol: int, modifiers: int, context: PersistenceContext) -> bool:  # noqa: ARG002
        """Handle quick save/load hotkeys.

        Returns:
            True if the key was a hotkey.
        """
        if symbol == self.quick_save_key:
            self._handle_quick_save(context)
            return True
        if symbol == self.quick_load_key:
            self._handle_quick_load(context)
            return True
        return False

    def _handle_quick_save(self, context: PersistenceContext) -> None:
        if self.save(context):
            logger.info("Quick save completed")
        else:
            logger.warning("Quick save failed")

    def _handle_quick_load(self, context: PersistenceContext) -> None:
        result = context.save_service.load()
        if not result.success:
            logger.warning("Quick load failed: %s", result.message)
        elif result.is_fresh:
            logger.warning("No save found for quick load")
        else:
            logger.info("Quick load completed")
