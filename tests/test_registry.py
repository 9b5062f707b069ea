"""Unit tests for the subsystem registry and save provider loader."""

import unittest
from typing import Any, ClassVar

from idlevault.exceptions import DuplicateSubsystemError
from idlevault.providers import DisplaySettingsProvider, WalletSaveProvider
from idlevault.saves import BaseSaveProvider, CallbackSaveProvider, SaveLoader, SubsystemRegistry
from idlevault.saves.loader import import_string


class CounterProvider(BaseSaveProvider):
    """Minimal provider used by the loader tests."""

    name: ClassVar[str] = "counter"

    def __init__(self) -> None:
        self.count = 0

    def get_snapshot(self) -> dict[str, Any]:
        return {"count": self.count}

    def apply_snapshot(self, snapshot: Any) -> None:  # noqa: ANN401
        self.count = (snapshot or {}).get("count", 0)

    def reset(self) -> None:
        self.count = 0


class NotAProvider:
    """A class that does not subclass BaseSaveProvider."""


class TestSubsystemRegistry(unittest.TestCase):
    """Test SubsystemRegistry."""

    def setUp(self) -> None:
        """Create an empty registry."""
        self.registry = SubsystemRegistry()

    def _handler(self) -> CallbackSaveProvider:
        return CallbackSaveProvider(lambda: {}, lambda snapshot: None)

    def test_register_preserves_order(self) -> None:
        """Test that names are kept in registration order."""
        self.registry.register("b", self._handler())
        self.registry.register("a", self._handler())

        assert self.registry.names() == ["b", "a"]
        assert "a" in self.registry
        assert len(self.registry) == 2

    def test_rejects_incomplete_handler(self) -> None:
        """Test that an object without apply_snapshot is refused."""
        with self.assertLogs("idlevault.saves.registry", level="WARNING"):
            assert self.registry.register("bad", object()) is False

        assert not self.registry.is_registered("bad")

    def test_rejects_empty_name(self) -> None:
        """Test that an empty name is refused."""
        with self.assertLogs("idlevault.saves.registry", level="WARNING"):
            assert self.registry.register("", self._handler()) is False

    def test_duplicate_replaces_in_place(self) -> None:
        """Test that re-registering replaces the handler and keeps its position."""
        first = self._handler()
        second = self._handler()
        self.registry.register("a", first)
        self.registry.register("b", self._handler())

        with self.assertLogs("idlevault.saves.registry", level="WARNING"):
            self.registry.register("a", second)

        assert self.registry.names() == ["a", "b"]
        assert self.registry.get("a") is second

    def test_strict_duplicate_raises(self) -> None:
        """Test that a strict registry refuses duplicates."""
        registry = SubsystemRegistry(strict=True)
        registry.register("a", self._handler())

        with self.assertRaises(DuplicateSubsystemError):
            registry.register("a", self._handler())

    def test_unregister(self) -> None:
        """Test removing a handler."""
        self.registry.register("a", self._handler())

        assert self.registry.unregister("a") is True
        assert self.registry.unregister("a") is False
        assert self.registry.get("a") is None


class TestCallbackSaveProvider(unittest.TestCase):
    """Test the callable adapter."""

    def test_delegates_to_callables(self) -> None:
        """Test that snapshots flow through the wrapped functions."""
        received = []
        provider = CallbackSaveProvider(lambda: {"kills": 3}, received.append)

        assert provider.get_snapshot() == {"kills": 3}
        provider.apply_snapshot({"kills": 5})
        assert received == [{"kills": 5}]


class TestImportString(unittest.TestCase):
    """Test dotted path imports."""

    def test_imports_class(self) -> None:
        """Test importing a class by dotted path."""
        assert import_string("idlevault.providers.WalletSaveProvider") is WalletSaveProvider

    def test_not_a_dotted_path(self) -> None:
        """Test that a bare name is rejected."""
        with self.assertRaises(ImportError):
            import_string("WalletSaveProvider")

    def test_missing_attribute(self) -> None:
        """Test that a missing attribute raises ImportError."""
        with self.assertRaises(ImportError):
            import_string("idlevault.providers.Nope")


class TestSaveLoader(unittest.TestCase):
    """Test SaveLoader."""

    def test_instantiate_all(self) -> None:
        """Test that configured providers are created in order."""
        loader = SaveLoader(
            [
                "idlevault.providers.DisplaySettingsProvider",
                f"{__name__}.CounterProvider",
            ]
        )

        instances = loader.instantiate_all()

        assert list(instances) == ["display", "counter"]
        assert isinstance(instances["display"], DisplaySettingsProvider)
        assert isinstance(loader.get_provider("counter"), CounterProvider)

    def test_register_all(self) -> None:
        """Test registering every provider with a registry."""
        registry = SubsystemRegistry()
        loader = SaveLoader([f"{__name__}.CounterProvider", "idlevault.providers.WalletSaveProvider"])

        assert loader.register_all(registry) == 2
        assert registry.names() == ["counter", "wallet"]

    def test_non_provider_class_raises(self) -> None:
        """Test that a class outside the provider hierarchy is rejected."""
        loader = SaveLoader([f"{__name__}.NotAProvider"])

        with self.assertRaises(TypeError):
            loader.instantiate_all()

    def test_missing_module_raises(self) -> None:
        """Test that an unknown module is reported and re-raised."""
        loader = SaveLoader(["idlevault.nonexistent.Provider"])

        with self.assertLogs("idlevault.saves.loader", level="ERROR"), self.assertRaises(ImportError):
            loader.instantiate_all()

    def test_reset_all(self) -> None:
        """Test resetting every provider."""
        loader = SaveLoader([f"{__name__}.CounterProvider"])
        loader.instantiate_all()
        counter = loader.get_provider("counter")
        counter.count = 9

        loader.reset_all()

        assert counter.count == 0
