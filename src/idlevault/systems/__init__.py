"""Game-loop systems for the persistence layer."""

from idlevault.systems.autosave import AutoSaveSystem, resolve_key
from idlevault.systems.base import BaseSystem

__all__ = ["AutoSaveSystem", "BaseSystem", "resolve_key"]
