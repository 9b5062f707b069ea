"""Save provider for number display preferences."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from idlevault.bignum.formatting import Notation, NumberFormatter
from idlevault.conf import settings
from idlevault.saves.base import BaseSaveProvider

logger = logging.getLogger(__name__)

MAX_PRECISION = 6


class DisplaySettingsProvider(BaseSaveProvider):
    """Persists the player's chosen notation and precision.

    The provider owns the NumberFormatter the game formats every number with,
    so loading a save switches the display immediately.

    Attributes:
        formatter: The formatter whose settings are saved.
    """

    name: ClassVar[str] = "display"

    def __init__(self, formatter: NumberFormatter | None = None) -> None:
        """Initialize with an existing formatter or one built from settings."""
        self.formatter = formatter or NumberFormatter(settings.NUMBER_NOTATION, settings.NUMBER_PRECISION)

    def get_snapshot(self) -> dict[str, Any]:
        """Return notation and precision."""
        return {"notation": self.formatter.notation.value, "precision": self.formatter.precision}

    def apply_snapshot(self, snapshot: Any) -> None:  # noqa: ANN401
        """Restore notation and precision, keeping current values for anything invalid."""
        if not isinstance(snapshot, dict):
            return

        notation = snapshot.get("notation")
        if isinstance(notation, str):
            self.formatter.set_notation(notation)

        precision = snapshot.get("precision")
        if isinstance(precision, int) and not isinstance(precision, bool) and 0 <= precision <= MAX_PRECISION:
            self.formatter.precision = precision
        elif precision is not None:
            logger.warning("Ignoring invalid display precision %r", precision)

    def reset(self) -> None:
        """Restore the configured defaults."""
        self.formatter.notation = Notation(settings.NUMBER_NOTATION)
        self.formatter.precision = settings.NUMBER_PRECISION
