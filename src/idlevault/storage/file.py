"""File-system storage backend.

Stores each key as one UTF-8 text file in a directory:

    saves/
        idlevault_save.sav
        idlevault_save_backup_1.sav
        ...

Writes go to a temporary file in the same directory which is then moved over
the target with os.replace(), so a crash mid-write leaves the previous value
intact instead of a truncated save.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from idlevault.exceptions import StorageUnavailableError
from idlevault.storage.base import BaseStorage

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

SUFFIX = ".sav"


class FileStorage(BaseStorage):
    """Directory-backed key-value store.

    Attributes:
        directory: Directory holding one file per key.
    """

    def __init__(self, directory: Path | str) -> None:
        """Initialize the store, creating the directory if needed.

        Args:
            directory: Path to the saves directory.

        Raises:
            StorageUnavailableError: If the directory cannot be created.
        """
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create saves directory {self.directory}"
            raise StorageUnavailableError(msg) from e

    def _path(self, key: str) -> Path:
        return self.directory / f"{self.validate_key(key)}{SUFFIX}"

    def get_item(self, key: str) -> str | None:
        """Read the file for key, or return None if it does not exist."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read {path}"
            raise StorageUnavailableError(msg) from e

    def set_item(self, key: str, value: str) -> None:
        """Atomically replace the file for key with value."""
        path = self._path(key)
        fd, temp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            Path(temp_name).replace(path)
        except OSError as e:
            Path(temp_name).unlink(missing_ok=True)
            msg = f"Cannot write {path}"
            raise StorageUnavailableError(msg) from e
        logger.debug("Wrote %d bytes to %s", len(value), path.name)

    def remove_item(self, key: str) -> None:
        """Delete the file for key if it exists."""
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            msg = f"Cannot delete {path}"
            raise StorageUnavailableError(msg) from e

    def keys(self) -> Iterator[str]:
        """Iterate over keys that have a file in the directory."""
        return iter(sorted(path.stem for path in self.directory.glob(f"*{SUFFIX}")))
