"""idlevault - Persistence and big-number toolkit for idle games built on Arcade.

This package provides the pieces an idle game needs to keep months of progress
safe:
- Decimal: arbitrary-magnitude numbers that never overflow to inf
- NumberFormatter: "1.23K", "4.56e789", "12.3aa" style display
- SaveService: checksummed saves aggregated from independent subsystems
- Backup slots, migrations, and hardened import/export strings
- AutoSaveSystem: interval autosave plus F5/F9 quick save/load

Quick start:
    # Create a settings.py file in your project root:
    # STORAGE_KEY = "mygame_save"
    # AUTOSAVE_INTERVAL = 60.0

    from idlevault import create_context, setup_logging

    setup_logging()
    context = create_context()
    context.save_service.load()

Alternative usage:
    # Customize settings programmatically
    from idlevault.conf import settings

    settings.configure(
        STORAGE_BACKEND="memory",
        NUMBER_NOTATION="scientific",
    )
"""

__version__ = "0.1.0"

from idlevault.bignum import Decimal, Notation, NumberFormatter
from idlevault.conf import settings
from idlevault.context import PersistenceContext
from idlevault.events import EventBus
from idlevault.helpers import create_context, create_storage, setup_logging
from idlevault.saves import BaseSaveProvider, LoadResult, SaveErrorKind, SaveService
from idlevault.systems import AutoSaveSystem

__all__ = [
    "AutoSaveSystem",
    "BaseSaveProvider",
    "Decimal",
    "EventBus",
    "LoadResult",
    "Notation",
    "NumberFormatter",
    "PersistenceContext",
    "SaveErrorKind",
    "SaveService",
    "__version__",
    "create_context",
    "create_storage",
    "settings",
    "setup_logging",
]
