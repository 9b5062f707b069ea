"""Settings for idlevault.

Defaults live in ``idlevault.conf.global_settings``. A game overrides them from
its own settings module, named by the IDLEVAULT_SETTINGS_MODULE environment
variable (``settings`` when unset):

    # mygame/settings.py
    STORAGE_KEY = "mygame_save"
    AUTOSAVE_INTERVAL = 60.0
    PRESTIGE_THRESHOLD = 1e6

    # anywhere in the game
    from idlevault.conf import settings

    settings.AUTOSAVE_INTERVAL  # 60.0

The persistence settings are checked when they are loaded or configured, so a
typo such as ``STORAGE_BACKEND = "flie"`` fails at startup with
ImproperlyConfiguredError instead of on the first save. Custom upper-case
settings are carried through unchecked.
"""

import importlib
import logging
import math
import os
from typing import Any

from idlevault.bignum.formatting import Notation
from idlevault.conf import global_settings
from idlevault.exceptions import ImproperlyConfiguredError

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "IDLEVAULT_SETTINGS_MODULE"

STORAGE_BACKENDS = ("file", "memory")
MAX_NUMBER_PRECISION = 6


def _is_int(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:  # noqa: ANN401
    return _is_int(value) or (isinstance(value, float) and math.isfinite(value))


class Settings:
    """Defaults from global_settings plus any overrides applied on top."""

    def __init__(self) -> None:
        """Copy every upper-case default from global_settings."""
        for name in dir(global_settings):
            if name.isupper():
                value = getattr(global_settings, name)
                # Lists are copied so overrides never mutate the defaults
                setattr(self, name, list(value) if isinstance(value, list) else value)

    def update(self, options: dict[str, Any]) -> None:
        """Apply upper-case overrides; other names are ignored."""
        for name, value in options.items():
            if name.isupper():
                setattr(self, name, value)

    def validate(self) -> None:
        """Check the persistence settings.

        Raises:
            ImproperlyConfiguredError: Listing every setting with a bad value.
        """
        problems = self._problems()
        if problems:
            msg = "; ".join(problems)
            raise ImproperlyConfiguredError(msg)

    def _problems(self) -> list[str]:
        problems = []
        if not isinstance(self.STORAGE_KEY, str) or not self.STORAGE_KEY:
            problems.append(f"STORAGE_KEY must be a non-empty string, got {self.STORAGE_KEY!r}")
        if not _is_int(self.SAVE_VERSION) or self.SAVE_VERSION < 1:
            problems.append(f"SAVE_VERSION must be an integer >= 1, got {self.SAVE_VERSION!r}")
        if not _is_int(self.BACKUP_SLOTS) or self.BACKUP_SLOTS < 1:
            problems.append(f"BACKUP_SLOTS must be an integer >= 1, got {self.BACKUP_SLOTS!r}")
        if not _is_number(self.AUTOSAVE_INTERVAL) or self.AUTOSAVE_INTERVAL < 0:
            problems.append(f"AUTOSAVE_INTERVAL must be a number >= 0, got {self.AUTOSAVE_INTERVAL!r}")
        for name in ("QUICK_SAVE_KEY", "QUICK_LOAD_KEY"):
            value = getattr(self, name)
            if not isinstance(value, str) and not _is_int(value):
                problems.append(f"{name} must be a key name or key code, got {value!r}")
        notations = [notation.value for notation in Notation]
        if self.NUMBER_NOTATION not in notations:
            problems.append(f"NUMBER_NOTATION must be one of {notations}, got {self.NUMBER_NOTATION!r}")
        if not _is_int(self.NUMBER_PRECISION) or not 0 <= self.NUMBER_PRECISION <= MAX_NUMBER_PRECISION:
            problems.append(
                f"NUMBER_PRECISION must be an integer from 0 to {MAX_NUMBER_PRECISION}, got {self.NUMBER_PRECISION!r}"
            )
        if self.STORAGE_BACKEND not in STORAGE_BACKENDS:
            problems.append(f"STORAGE_BACKEND must be one of {list(STORAGE_BACKENDS)}, got {self.STORAGE_BACKEND!r}")
        quota = self.STORAGE_QUOTA_BYTES
        if quota is not None and (not _is_int(quota) or quota <= 0):
            problems.append(f"STORAGE_QUOTA_BYTES must be None or a positive integer, got {quota!r}")
        latency = self.CLOUD_MOCK_LATENCY
        if (
            not isinstance(latency, (tuple, list))
            or len(latency) != 2  # noqa: PLR2004
            or not all(_is_number(bound) and bound >= 0 for bound in latency)
            or latency[0] > latency[1]
        ):
            problems.append(f"CLOUD_MOCK_LATENCY must be a (min, max) pair of seconds, got {latency!r}")
        saves = self.INSTALLED_SAVES
        if not isinstance(saves, list) or not all(isinstance(path, str) for path in saves):
            problems.append("INSTALLED_SAVES must be a list of dotted paths")
        return problems


class LazySettings:
    """Proxy that loads and validates settings on first attribute access.

    Direct assignment (``settings.BACKUP_SLOTS = 5``) is not validated, so tests
    and tools can set values one at a time. configure() validates the result.
    """

    def __init__(self) -> None:
        """Start unloaded."""
        self._wrapped: Settings | None = None

    def _setup(self) -> None:
        settings_module = os.environ.get(ENVIRONMENT_VARIABLE, "settings")
        loaded = Settings()

        try:
            mod = importlib.import_module(settings_module)
        except ImportError:
            logger.debug("No settings module '%s' found, using defaults", settings_module)
        else:
            loaded.update({name: getattr(mod, name) for name in dir(mod)})
            logger.debug("Loaded settings from '%s'", settings_module)

        loaded.validate()
        self._wrapped = loaded

    def _loaded(self) -> Settings:
        if self._wrapped is None:
            self._setup()
        if self._wrapped is None:
            msg = "Settings could not be loaded"
            raise RuntimeError(msg)
        return self._wrapped

    def __getattr__(self, name: str) -> Any:  # noqa: ANN401
        """Get a setting value, loading settings if not yet loaded."""
        return getattr(self._loaded(), name)

    def __setattr__(self, name: str, value: Any) -> None:  # noqa: ANN401
        """Set a setting value without validation."""
        if name == "_wrapped":
            self.__dict__["_wrapped"] = value
        else:
            setattr(self._loaded(), name, value)

    def configure(self, **options: Any) -> None:  # noqa: ANN401
        """Apply options over the defaults (or the loaded settings) and validate.

        Nothing changes if validation fails.

        Example:
            settings.configure(
                STORAGE_BACKEND="memory",
                AUTOSAVE_INTERVAL=5.0,
            )

        Raises:
            ImproperlyConfiguredError: If the resulting settings are invalid.
        """
        candidate = Settings()
        if self._wrapped is not None:
            candidate.update(vars(self._wrapped))
        candidate.update(options)
        candidate.validate()
        self._wrapped = candidate

    def reset(self) -> None:
        """Discard loaded settings so the next access reloads them."""
        self._wrapped = None

    def is_configured(self) -> bool:
        """Check if settings have been loaded."""
        return self._wrapped is not None


settings = LazySettings()

__all__ = [
    "ENVIRONMENT_VARIABLE",
    "ImproperlyConfiguredError",
    "LazySettings",
    "Settings",
    "global_settings",
    "settings",
]
