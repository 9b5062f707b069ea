"""Unit tests for save format migrations."""

import math
import unittest

from idlevault.saves.migrations import MigrationRegistry, get_version


class TestGetVersion(unittest.TestCase):
    """Test version detection."""

    def test_missing_version_is_one(self) -> None:
        """Test saves written before versioning."""
        assert get_version({"gold": 5}) == 1

    def test_numeric_version(self) -> None:
        """Test that float versions are truncated."""
        assert get_version({"version": 3}) == 3
        assert get_version({"version": 2.0}) == 2

    def test_non_numeric_version(self) -> None:
        """Test that garbage versions fall back to one."""
        with self.assertLogs("idlevault.saves.migrations", level="WARNING"):
            assert get_version({"version": "two"}) == 1

    def test_out_of_range_version(self) -> None:
        """Test that non-finite and non-positive versions fall back to one."""
        for version in (math.inf, -math.inf, math.nan, 0, -10**12):
            with self.subTest(version=version), self.assertLogs("idlevault.saves.migrations", level="WARNING"):
                assert get_version({"version": version}) == 1

    def test_huge_integer_version(self) -> None:
        """Test that an integer too big for a float is kept as is."""
        assert get_version({"version": 10**400}) == 10**400

    def test_migrate_with_infinite_version_is_unchanged(self) -> None:
        """Test that migrating data with an infinite version treats it as version one."""
        registry = MigrationRegistry()

        with self.assertLogs("idlevault.saves.migrations", level="WARNING"):
            result = registry.migrate({"version": math.inf, "gold": 5}, 1)

        assert result == {"version": math.inf, "gold": 5}


class TestMigrationRegistry(unittest.TestCase):
    """Test MigrationRegistry."""

    def setUp(self) -> None:
        """Create an empty registry."""
        self.migrations = MigrationRegistry()

    def test_register_as_decorator(self) -> None:
        """Test decorator registration returns the function."""

        @self.migrations.register(2)
        def add_gems(data: dict) -> dict:
            data["gems"] = 0
            return data

        assert self.migrations.has_migration(2)
        assert add_gems({}) == {"gems": 0}
        assert len(self.migrations) == 1

    def test_register_rejects_bad_targets(self) -> None:
        """Test version 1 and duplicates are refused."""
        with self.assertRaises(ValueError):
            self.migrations.register(1, lambda data: data)

        self.migrations.register(2, lambda data: data)
        with self.assertRaises(ValueError):
            self.migrations.register(2, lambda data: data)

    def test_migrate_runs_steps_in_order(self) -> None:
        """Test each step sees the previous step's output."""
        @self.migrations.register(2)
        def move_gold(data: dict) -> dict:
            data["wallet"] = {"gold": data.pop("gold")}
            return data

        self.migrations.register(3, lambda data: {**data, "wallet": {**data["wallet"], "gems": 0}})

        result = self.migrations.migrate({"version": 1, "gold": 7}, 3)

        assert result == {"version": 3, "wallet": {"gold": 7, "gems": 0}}

    def test_migrate_does_not_modify_input(self) -> None:
        """Test that the caller's dict is untouched by the top-level copy."""
        self.migrations.register(2, lambda data: data.update(stage=2))
        original = {"version": 1}

        result = self.migrations.migrate(original, 2)

        assert original == {"version": 1}
        assert result == {"version": 2, "stage": 2}

    def test_missing_steps_are_skipped(self) -> None:
        """Test that versions without a migration only bump the version."""
        self.migrations.register(3, lambda data: {**data, "three": True})

        result = self.migrations.migrate({"gold": 1}, 4)

        assert result == {"gold": 1, "three": True, "version": 4}

    def test_current_version_is_unchanged(self) -> None:
        """Test that up-to-date data is returned as is."""
        data = {"version": 2}

        assert self.migrations.migrate(data, 2) is data

    def test_newer_save_is_unchanged(self) -> None:
        """Test that a save from a newer build is not downgraded."""
        data = {"version": 5}

        with self.assertLogs("idlevault.saves.migrations", level="WARNING"):
            assert self.migrations.migrate(data, 2) is data

    def test_failing_step_stops_chain(self) -> None:
        """Test that a raising step leaves the data at the last good version."""
        self.migrations.register(2, lambda data: {**data, "two": True})

        def broken(data: dict) -> dict:
            raise KeyError("missing")

        self.migrations.register(3, broken)
        self.migrations.register(4, lambda data: {**data, "four": True})

        with self.assertLogs("idlevault.saves.migrations", level="ERROR"):
            result = self.migrations.migrate({"version": 1}, 4)

        assert result == {"version": 2, "two": True}

    def test_non_dict_result_stops_chain(self) -> None:
        """Test that a step returning a non-dict is treated as a failure."""
        self.migrations.register(2, lambda data: [data])

        with self.assertLogs("idlevault.saves.migrations", level="ERROR"):
            result = self.migrations.migrate({"version": 1, "gold": 1}, 2)

        assert result == {"version": 1, "gold": 1}
