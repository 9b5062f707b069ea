"""Arbitrary-magnitude numbers and their display formatting."""

from idlevault.bignum.decimal import EXPONENT_LIMIT, Decimal, DecimalSource
from idlevault.bignum.formatting import (
    INFINITY_GLYPH,
    SUFFIXES,
    Notation,
    NumberFormatter,
    format_bytes,
    format_percent,
    format_time,
)

__all__ = [
    "EXPONENT_LIMIT",
    "INFINITY_GLYPH",
    "SUFFIXES",
    "Decimal",
    "DecimalSource",
    "Notation",
    "NumberFormatter",
    "format_bytes",
    "format_percent",
    "format_time",
]
