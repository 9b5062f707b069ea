"""Loader for configured save providers."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from idlevault.saves.base import BaseSaveProvider

if TYPE_CHECKING:
    from idlevault.saves.registry import SubsystemRegistry

logger = logging.getLogger(__name__)


def import_string(dotted_path: str) -> object:
    """Import a class or attribute from a dotted path like "pkg.module.Class".

    Raises:
        ImportError: If the module cannot be imported or lacks the attribute.
    """
    try:
        module_path, attribute = dotted_path.rsplit(".", 1)
    except ValueError as e:
        msg = f"'{dotted_path}' is not a dotted path"
        raise ImportError(msg) from e

    module = importlib.import_module(module_path)
    try:
        return getattr(module, attribute)
    except AttributeError as e:
        msg = f"Module '{module_path}' has no attribute '{attribute}'"
        raise ImportError(msg) from e


class SaveLoader:
    """Instantiates the save providers listed in INSTALLED_SAVES.

    The SaveLoader handles:
    1. Importing each configured provider class by dotted path
    2. Instantiating it
    3. Registering the instance with a SubsystemRegistry under its name

    Example settings.py:
        INSTALLED_SAVES = [
            *global_settings.INSTALLED_SAVES,
            "mygame.research.ResearchSaveProvider",
        ]
    """

    def __init__(self, installed_saves: list[str] | None) -> None:
        """Initialize the save loader.

        Args:
            installed_saves: Dotted paths of BaseSaveProvider subclasses.
        """
        self.installed_saves = list(installed_saves or [])
        self._instances: dict[str, BaseSaveProvider] = {}

    def instantiate_all(self) -> dict[str, BaseSaveProvider]:
        """Import and instantiate every configured provider.

        Returns:
            Dictionary mapping provider names to their instances, in
            configuration order.

        Raises:
            ImportError: If a configured path cannot be imported.
            TypeError: If a configured path is not a BaseSaveProvider subclass.
        """
        for dotted_path in self.installed_saves:
            try:
                provider_class = import_string(dotted_path)
            except ImportError:
                logger.exception("Could not load save provider '%s'", dotted_path)
                raise

            if not (isinstance(provider_class, type) and issubclass(provider_class, BaseSaveProvider)):
                msg = f"'{dotted_path}' is not a BaseSaveProvider subclass"
                raise TypeError(msg)

            name = getattr(provider_class, "name", None)
            if not name:
                msg = f"Save provider {provider_class.__name__} must have a 'name' class attribute"
                raise ValueError(msg)

            self._instances[name] = provider_class()
            logger.debug("Instantiated save provider: %s", name)

        logger.info("Instantiated %d save providers", len(self._instances))
        return self._instances

    def register_all(self, registry: SubsystemRegistry) -> int:
        """Instantiate providers (if needed) and register them.

        Args:
            registry: Registry to register the instances with.

        Returns:
            Number of providers registered.
        """
        if not self._instances:
            self.instantiate_all()
        return sum(1 for name, provider in self._instances.items() if registry.register(name, provider))

    def reset_all(self) -> None:
        """Reset every provider to new-game defaults."""
        for provider in self._instances.values():
            provider.reset()
        logger.debug("Reset all save providers")

    def get_provider(self, name: str) -> BaseSaveProvider | None:
        """Get a save provider instance by name."""
        return self._instances.get(name)
