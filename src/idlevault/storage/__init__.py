"""Key-value storage backends for save data."""

from idlevault.storage.base import BaseStorage
from idlevault.storage.file import FileStorage
from idlevault.storage.memory import MemoryStorage

__all__ = ["BaseStorage", "FileStorage", "MemoryStorage"]
