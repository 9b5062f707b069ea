"""Unit tests for number formatting."""

import math
import unittest

from idlevault.bignum.decimal import Decimal
from idlevault.bignum.formatting import (
    SUFFIXES,
    Notation,
    NumberFormatter,
    format_bytes,
    format_percent,
    format_time,
    letter_suffix,
)


class TestStandardNotation(unittest.TestCase):
    """Test the default suffix notation."""

    def setUp(self) -> None:
        """Create a standard formatter."""
        self.formatter = NumberFormatter()

    def test_small_numbers_are_fixed_point(self) -> None:
        """Test that values below 1000 trim trailing zeros."""
        assert self.formatter.format(999) == "999"
        assert self.formatter.format(12.5) == "12.5"
        assert self.formatter.format(0.126) == "0.13"
        assert self.formatter.format(0) == "0"

    def test_thousands_and_millions(self) -> None:
        """Test the first suffix tiers."""
        assert self.formatter.format(1000) == "1.00K"
        assert self.formatter.format(1_000_000) == "1.00M"
        assert self.formatter.format(2_500_000_000) == "2.50B"

    def test_large_scaled_values_use_one_decimal(self) -> None:
        """Test that scaled values of 100 or more show one decimal place."""
        assert self.formatter.format(123_456) == "123.5K"

    def test_rounding_carries_into_next_tier(self) -> None:
        """Test that rounding never produces a four-digit scaled value."""
        assert self.formatter.format(999_999) == "1.00M"
        assert self.formatter.format(999.999) == "1.00K"

    def test_beyond_float_range(self) -> None:
        """Test suffixes for Decimals past 1e308 fall back to scientific."""
        assert self.formatter.format(Decimal("1e93")) == "1.00Tg"
        assert self.formatter.format(Decimal("1.5e400")) == "1.50e400"

    def test_negative_values(self) -> None:
        """Test that negative numbers keep their sign."""
        assert self.formatter.format(-1500) == "-1.50K"
        assert self.formatter.format(-12.5) == "-12.5"

    def test_non_finite_values(self) -> None:
        """Test infinity glyphs and NaN handling."""
        assert self.formatter.format(math.inf) == "∞"
        assert self.formatter.format(-math.inf) == "-∞"
        assert self.formatter.format(math.nan) == "0"
        assert self.formatter.format(None) == "0"
        assert self.formatter.format(Decimal.max_value()) == "∞"

    def test_precision_override(self) -> None:
        """Test per-call precision."""
        assert self.formatter.format(1234, precision=1) == "1.2K"
        assert self.formatter.format(3.14159, precision=3) == "3.142"

    def test_suffix_table_has_32_tiers(self) -> None:
        """Test the suffix table ends at Tg."""
        assert len(SUFFIXES) == 32
        assert SUFFIXES[-1] == "Tg"


class TestOtherNotations(unittest.TestCase):
    """Test scientific, engineering and letter notations."""

    def test_scientific(self) -> None:
        """Test scientific notation."""
        formatter = NumberFormatter(Notation.SCIENTIFIC)

        assert formatter.format(Decimal("1.23e45")) == "1.23e45"
        assert formatter.format(1500) == "1.50e3"
        assert formatter.format(Decimal("9.999e10")) == "1.00e11"

    def test_engineering(self) -> None:
        """Test engineering notation groups exponents by three."""
        formatter = NumberFormatter("engineering")

        assert formatter.format(12_340) == "12.34e3"
        assert formatter.format(Decimal("1e400")) == "10.00e399"

    def test_letters(self) -> None:
        """Test letter notation."""
        formatter = NumberFormatter(Notation.LETTERS)

        assert formatter.format(1000) == "1.00a"
        assert formatter.format(2_000_000) == "2.00b"
        assert formatter.format(Decimal("1e81")) == "1.00aa"

    def test_letter_suffix_sequence(self) -> None:
        """Test the bijective letter sequence."""
        assert letter_suffix(1) == "a"
        assert letter_suffix(26) == "z"
        assert letter_suffix(27) == "aa"
        assert letter_suffix(28) == "ab"
        assert letter_suffix(52) == "az"
        assert letter_suffix(53) == "ba"

    def test_small_values_ignore_notation(self) -> None:
        """Test that values below 1000 are fixed point under every notation."""
        for notation in Notation:
            assert NumberFormatter(notation).format(42) == "42"

    def test_set_notation(self) -> None:
        """Test switching notation at runtime."""
        formatter = NumberFormatter()

        assert formatter.set_notation("scientific") is True
        assert formatter.notation is Notation.SCIENTIFIC
        assert formatter.format(1500) == "1.50e3"

    def test_set_unknown_notation_keeps_current(self) -> None:
        """Test that an unknown notation is rejected."""
        formatter = NumberFormatter()

        with self.assertLogs("idlevault.bignum.formatting", level="WARNING"):
            assert formatter.set_notation("hieroglyphs") is False

        assert formatter.notation is Notation.STANDARD


class TestHelpers(unittest.TestCase):
    """Test the supplementary formatting helpers."""

    def test_format_multiplier(self) -> None:
        """Test multiplier formatting."""
        formatter = NumberFormatter()

        assert formatter.format_multiplier(1.5) == "1.50x"
        assert formatter.format_multiplier(12_500) == "12.50Kx"

    def test_format_time(self) -> None:
        """Test duration formatting."""
        assert format_time(45.9) == "45s"
        assert format_time(200) == "3m 20s"
        assert format_time(7500) == "2h 5m"

    def test_format_percent(self) -> None:
        """Test ratio and percentage inputs."""
        assert format_percent(0.25) == "25.0%"
        assert format_percent(42) == "42.0%"

    def test_format_bytes(self) -> None:
        """Test byte size formatting."""
        assert format_bytes(512) == "512 B"
        assert format_bytes(1536) == "1.50 KB"
        assert format_bytes(2 * 1024 * 1024) == "2.00 MB"
