"""Unit tests for storage backends."""

import shutil
import tempfile
import unittest
from pathlib import Path

from idlevault.exceptions import InvalidStorageKeyError, StorageQuotaExceededError
from idlevault.storage import FileStorage, MemoryStorage


class TestMemoryStorage(unittest.TestCase):
    """Test the in-memory backend."""

    def test_set_get_remove(self) -> None:
        """Test basic key-value behavior."""
        storage = MemoryStorage()

        storage.set_item("save", "one")
        storage.set_item("save", "two")

        assert storage.get_item("save") == "two"
        assert storage.has_item("save")
        storage.remove_item("save")
        assert storage.get_item("save") is None
        storage.remove_item("save")

    def test_keys_in_insertion_order(self) -> None:
        """Test that keys() lists every stored key."""
        storage = MemoryStorage()
        storage.set_item("b", "1")
        storage.set_item("a", "2")

        assert list(storage.keys()) == ["b", "a"]

    def test_quota_rejects_oversized_write(self) -> None:
        """Test that a write past the quota raises and keeps the old value."""
        storage = MemoryStorage(quota_bytes=10)
        storage.set_item("k", "12345")

        with self.assertRaises(StorageQuotaExceededError):
            storage.set_item("k", "1234567890")

        assert storage.get_item("k") == "12345"

    def test_quota_counts_replaced_value_once(self) -> None:
        """Test that overwriting a key does not count the old value."""
        storage = MemoryStorage(quota_bytes=10)
        storage.set_item("k", "123456789")

        storage.set_item("k", "987654321")

        assert storage.size() == 10

    def test_quota_counts_utf8_bytes(self) -> None:
        """Test that sizes are measured in UTF-8 bytes."""
        storage = MemoryStorage()
        storage.set_item("k", "é")

        assert storage.size() == 3

    def test_invalid_key(self) -> None:
        """Test that keys with path characters are rejected."""
        storage = MemoryStorage()

        with self.assertRaises(InvalidStorageKeyError):
            storage.set_item("../escape", "x")

    def test_clear(self) -> None:
        """Test removing every key."""
        storage = MemoryStorage()
        storage.set_item("a", "1")

        storage.clear()

        assert list(storage.keys()) == []


class TestFileStorage(unittest.TestCase):
    """Test the directory-backed backend."""

    def setUp(self) -> None:
        """Create a temporary saves directory."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.storage = FileStorage(self.temp_dir / "saves")

    def tearDown(self) -> None:
        """Remove the temporary directory."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_creates_directory(self) -> None:
        """Test that the saves directory is created on init."""
        assert (self.temp_dir / "saves").is_dir()

    def test_set_get_remove(self) -> None:
        """Test that values persist as files."""
        self.storage.set_item("idle_save", '{"gold":1}')

        assert (self.temp_dir / "saves" / "idle_save.sav").read_text(encoding="utf-8") == '{"gold":1}'
        assert self.storage.get_item("idle_save") == '{"gold":1}'

        self.storage.remove_item("idle_save")
        assert self.storage.get_item("idle_save") is None

    def test_overwrite_leaves_no_temp_files(self) -> None:
        """Test that atomic replacement cleans up after itself."""
        self.storage.set_item("idle_save", "first")
        self.storage.set_item("idle_save", "second")

        files = [path.name for path in (self.temp_dir / "saves").iterdir()]

        assert files == ["idle_save.sav"]
        assert self.storage.get_item("idle_save") == "second"

    def test_unicode_roundtrip(self) -> None:
        """Test that non-ASCII text is written as UTF-8."""
        self.storage.set_item("idle_save", "Café ☕")

        assert self.storage.get_item("idle_save") == "Café ☕"

    def test_keys(self) -> None:
        """Test listing keys from file names."""
        self.storage.set_item("b", "1")
        self.storage.set_item("a", "2")

        assert list(self.storage.keys()) == ["a", "b"]

    def test_invalid_key(self) -> None:
        """Test that path traversal keys are rejected."""
        with self.assertRaises(InvalidStorageKeyError):
            self.storage.get_item("../outside")
        with self.assertRaises(InvalidStorageKeyError):
            self.storage.set_item("a/b", "x")
