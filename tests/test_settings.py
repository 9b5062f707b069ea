"""Unit tests for the settings system."""

import sys
import types
import unittest
from unittest.mock import patch

from idlevault.conf import ENVIRONMENT_VARIABLE, LazySettings, Settings, global_settings
from idlevault.exceptions import ImproperlyConfiguredError


class TestLazySettings(unittest.TestCase):
    """Test LazySettings loading and overrides."""

    def test_defaults_without_settings_module(self) -> None:
        """Test that global defaults apply when no module exists."""
        lazy = LazySettings()

        with patch.dict("os.environ", {ENVIRONMENT_VARIABLE: "idlevault_missing_settings"}):
            assert lazy.STORAGE_KEY == global_settings.STORAGE_KEY
            assert lazy.BACKUP_SLOTS == 3

        assert lazy.is_configured()

    def test_loads_settings_module(self) -> None:
        """Test that upper-case names in the settings module override defaults."""
        module = types.ModuleType("mygame_settings")
        module.STORAGE_KEY = "mygame_save"
        module.PRESTIGE_THRESHOLD = 1e6
        module.lowercase = "ignored"
        lazy = LazySettings()

        with (
            patch.dict(sys.modules, {"mygame_settings": module}),
            patch.dict("os.environ", {ENVIRONMENT_VARIABLE: "mygame_settings"}),
        ):
            assert lazy.STORAGE_KEY == "mygame_save"
            assert lazy.PRESTIGE_THRESHOLD == 1e6
            assert lazy.AUTOSAVE_INTERVAL == global_settings.AUTOSAVE_INTERVAL
            assert not hasattr(lazy, "lowercase")

    def test_configure_and_reset(self) -> None:
        """Test manual configuration and reset."""
        lazy = LazySettings()

        lazy.configure(AUTOSAVE_INTERVAL=5.0)

        assert lazy.AUTOSAVE_INTERVAL == 5.0
        assert lazy.SAVE_VERSION == global_settings.SAVE_VERSION
        lazy.reset()
        assert not lazy.is_configured()

    def test_list_defaults_are_copied(self) -> None:
        """Test that mutating a list setting leaves the defaults alone."""
        lazy = LazySettings()
        lazy.configure()

        lazy.INSTALLED_SAVES.append("mygame.Provider")

        assert "mygame.Provider" not in global_settings.INSTALLED_SAVES

    def test_unknown_setting_raises(self) -> None:
        """Test that missing settings raise AttributeError."""
        lazy = LazySettings()
        lazy.configure()

        with self.assertRaises(AttributeError):
            _ = lazy.NOT_A_SETTING

    def test_configure_keeps_earlier_overrides(self) -> None:
        """Test that a second configure call builds on the first."""
        lazy = LazySettings()
        lazy.configure(STORAGE_KEY="mygame_save")

        lazy.configure(BACKUP_SLOTS=5)

        assert lazy.STORAGE_KEY == "mygame_save"
        assert lazy.BACKUP_SLOTS == 5

    def test_reset_reloads_from_module(self) -> None:
        """Test that settings are read again after reset."""
        module = types.ModuleType("mygame_settings")
        module.BACKUP_SLOTS = 7
        lazy = LazySettings()
        lazy.configure(BACKUP_SLOTS=2)

        lazy.reset()
        with (
            patch.dict(sys.modules, {"mygame_settings": module}),
            patch.dict("os.environ", {ENVIRONMENT_VARIABLE: "mygame_settings"}),
        ):
            assert lazy.BACKUP_SLOTS == 7


class TestSettingsValidation(unittest.TestCase):
    """Test that unusable persistence settings are rejected."""

    def test_defaults_are_valid(self) -> None:
        """Test that the shipped defaults pass validation."""
        Settings().validate()

    def test_invalid_values_raise(self) -> None:
        """Test each persistence setting with a bad value."""
        cases = {
            "STORAGE_KEY": "",
            "SAVE_VERSION": 0,
            "BACKUP_SLOTS": 0,
            "AUTOSAVE_INTERVAL": -1.0,
            "QUICK_SAVE_KEY": None,
            "QUICK_LOAD_KEY": 9.5,
            "NUMBER_NOTATION": "runes",
            "NUMBER_PRECISION": 7,
            "STORAGE_BACKEND": "flie",
            "STORAGE_QUOTA_BYTES": 0,
            "CLOUD_MOCK_LATENCY": (2.0, 1.0),
            "INSTALLED_SAVES": "idlevault.providers.WalletSaveProvider",
        }
        for name, value in cases.items():
            with self.subTest(name=name):
                lazy = LazySettings()

                with self.assertRaises(ImproperlyConfiguredError) as ctx:
                    lazy.configure(**{name: value})

                assert name in str(ctx.exception)
                assert not lazy.is_configured()

    def test_bools_are_not_counts(self) -> None:
        """Test that True is not accepted as an integer setting."""
        lazy = LazySettings()

        with self.assertRaises(ImproperlyConfiguredError):
            lazy.configure(BACKUP_SLOTS=True)

    def test_non_finite_interval_is_rejected(self) -> None:
        """Test that an infinite autosave interval is rejected."""
        lazy = LazySettings()

        with self.assertRaises(ImproperlyConfiguredError):
            lazy.configure(AUTOSAVE_INTERVAL=float("inf"))

    def test_failed_configure_keeps_previous_settings(self) -> None:
        """Test that a rejected configure call changes nothing."""
        lazy = LazySettings()
        lazy.configure(BACKUP_SLOTS=4)

        with self.assertRaises(ImproperlyConfiguredError):
            lazy.configure(BACKUP_SLOTS=4, STORAGE_BACKEND="cloud")

        assert lazy.BACKUP_SLOTS == 4
        assert lazy.STORAGE_BACKEND == global_settings.STORAGE_BACKEND

    def test_invalid_settings_module_raises(self) -> None:
        """Test that a bad value in the settings module fails on first access."""
        module = types.ModuleType("mygame_settings")
        module.NUMBER_PRECISION = -1
        lazy = LazySettings()

        with (
            patch.dict(sys.modules, {"mygame_settings": module}),
            patch.dict("os.environ", {ENVIRONMENT_VARIABLE: "mygame_settings"}),
            self.assertRaises(ImproperlyConfiguredError),
        ):
            _ = lazy.NUMBER_PRECISION

        assert not lazy.is_configured()

    def test_direct_assignment_is_not_validated(self) -> None:
        """Test that single attribute assignment skips validation."""
        lazy = LazySettings()
        lazy.configure()

        lazy.STORAGE_BACKEND = "floppy"

        assert lazy.STORAGE_BACKEND == "floppy"

    def test_custom_settings_are_unchecked(self) -> None:
        """Test that game-specific settings pass through."""
        lazy = LazySettings()

        lazy.configure(PRESTIGE_THRESHOLD="whenever")

        assert lazy.PRESTIGE_THRESHOLD == "whenever"
