"""Display formatting for Decimal values.

The NumberFormatter turns a Decimal (or a native number) into a short human
string under one of four notations:

- STANDARD: named suffixes (1.00K, 2.50M, ... up to Tg = 10^93), scientific past that
- SCIENTIFIC: 1.23e45
- ENGINEERING: exponent grouped by three, 12.35e3
- LETTERS: a, b, ..., z, aa, ab, ... one letter group per power of 1000

Magnitudes below 1000 are always rendered fixed-point with trailing zeros
trimmed. Non-finite values render as an infinity glyph and never raise.

The selected notation is runtime state. It belongs to one formatter instance
owned by the PersistenceContext, so swapping notations from a settings menu is:

    context.formatter.set_notation(Notation.SCIENTIFIC)
    context.formatter.format(gold)  # "1.50e12"
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING

from idlevault.bignum.decimal import Decimal

if TYPE_CHECKING:
    from collections.abc import Callable

    from idlevault.bignum.decimal import DecimalSource

logger = logging.getLogger(__name__)

INFINITY_GLYPH = "∞"

SUFFIXES = [
    "", "K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp", "Oc", "No", "Dc",
    "UDc", "DDc", "TDc", "QaDc", "QiDc", "SxDc", "SpDc", "OcDc", "NoDc", "Vg",
    "UVg", "DVg", "TVg", "QaVg", "QiVg", "SxVg", "SpVg", "OcVg", "NoVg", "Tg",
]  # fmt: skip
"""Standard suffix per power of 1000; index 31 (Tg) is 10^93."""


class Notation(Enum):
    """Available number notations."""

    STANDARD = "standard"
    SCIENTIFIC = "scientific"
    ENGINEERING = "engineering"
    LETTERS = "letters"


def letter_suffix(tier: int) -> str:
    """Return the letter suffix for a power-of-1000 tier (1 -> "a", 27 -> "aa")."""
    letters = ""
    while tier > 0:
        tier -= 1
        letters = chr(ord("a") + tier % 26) + letters
        tier //= 26
    return letters


def standard_suffix(tier: int) -> str | None:
    """Return the standard suffix for a tier, or None past the table."""
    if 0 <= tier < len(SUFFIXES):
        return SUFFIXES[tier]
    return None


class NumberFormatter:
    """Formats numbers under a selectable notation.

    Attributes:
        notation: Currently selected Notation.
        precision: Decimal places for scaled values (default 2).
    """

    def __init__(self, notation: Notation | str = Notation.STANDARD, precision: int = 2) -> None:
        """Initialize the formatter.

        Args:
            notation: Notation or its string value ("standard", "scientific", ...).
            precision: Decimal places used for scaled values.
        """
        self.notation = Notation(notation)
        self.precision = precision

    def set_notation(self, notation: Notation | str) -> bool:
        """Select a notation.

        Args:
            notation: Notation or its string value.

        Returns:
            True if the notation was changed, False if the value was not recognized.
        """
        try:
            self.notation = Notation(notation)
        except ValueError:
            logger.warning("Unknown notation '%s', keeping %s", notation, self.notation.value)
            return False
        return True

    def format(self, value: DecimalSource, precision: int | None = None) -> str:
        """Format a value for display.

        Args:
            value: Decimal, native number, numeric string or serialized Decimal.
            precision: Overrides the formatter's precision for this call.

        Returns:
            Display string such as "999", "1.00K", "1.23e45" or "∞".
        """
        digits = self.precision if precision is None else precision

        if value is None:
            return "0"
        if isinstance(value, float):
            if math.isnan(value):
                return "0"
            if math.isinf(value):
                return _infinity(value < 0)

        number = Decimal.create(value)
        if not number.is_finite():
            return _infinity(number.is_negative())
        if number.is_zero():
            return "0"

        if number.exponent < 3:
            native = number.to_number()
            if abs(round(native, digits)) < 1000:
                return _format_small(native, digits)
            number = Decimal(round(native, digits))

        if self.notation is Notation.SCIENTIFIC:
            return _format_scientific(number, digits)
        if self.notation is Notation.ENGINEERING:
            return _format_engineering(number, digits)
        if self.notation is Notation.LETTERS:
            return _format_suffixed(number, digits, letter_suffix) or _format_scientific(number, digits)
        return _format_suffixed(number, digits, standard_suffix) or _format_scientific(number, digits)

    def format_multiplier(self, value: DecimalSource, precision: int = 2) -> str:
        """Format a multiplier such as "1.50x" or "12.5Kx"."""
        number = Decimal.create(value)
        if number.lt(10):
            return f"{number.to_number():.{precision}f}x"
        return f"{self.format(number)}x"


def _infinity(negative: bool) -> str:
    return f"-{INFINITY_GLYPH}" if negative else INFINITY_GLYPH


def _format_small(value: float, precision: int) -> str:
    if value.is_integer():
        return str(int(value))
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _format_suffixed(number: Decimal, precision: int, suffix_for: Callable[[int], str | None]) -> str | None:
    tier = number.exponent // 3
    scaled = number.mantissa * 10 ** (number.exponent % 3)
    digits = 1 if abs(scaled) >= 100 else precision
    text = f"{scaled:.{digits}f}"

    # Rounding carried into the next tier (999.99K -> 1.00M)
    if abs(float(text)) >= 1000:
        tier += 1
        text = f"{scaled / 1000:.{precision}f}"

    suffix = suffix_for(tier)
    if suffix is None:
        return None
    return f"{text}{suffix}"


def _format_scientific(number: Decimal, precision: int) -> str:
    mantissa = number.mantissa
    exponent = number.exponent
    text = f"{mantissa:.{precision}f}"
    if abs(float(text)) >= 10:
        exponent += 1
        text = f"{mantissa / 10:.{precision}f}"
    return f"{text}e{exponent}"


def _format_engineering(number: Decimal, precision: int) -> str:
    group = number.exponent - number.exponent % 3
    scaled = number.mantissa * 10 ** (number.exponent - group)
    text = f"{scaled:.{precision}f}"
    if abs(float(text)) >= 1000:
        group += 3
        text = f"{scaled / 1000:.{precision}f}"
    return f"{text}e{group}"


def format_time(seconds: float) -> str:
    """Format a duration as "45s", "3m 20s" or "2h 5m"."""
    if seconds < 60:
        return f"{math.floor(seconds)}s"
    if seconds < 3600:
        return f"{math.floor(seconds / 60)}m {math.floor(seconds % 60)}s"
    return f"{math.floor(seconds / 3600)}h {math.floor((seconds % 3600) / 60)}m"


def format_percent(value: float, precision: int = 1) -> str:
    """Format a ratio as a percentage.

    Values above 1 are assumed to already be percentages (42 -> "42.0%"),
    values up to 1 are ratios (0.25 -> "25.0%").
    """
    percent = value if value > 1 else value * 100
    return f"{percent:.{precision}f}%"


def format_bytes(size: int) -> str:
    """Format a byte count as "512 B", "1.50 KB" or "2.00 MB"."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"
