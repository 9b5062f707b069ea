"""Arbitrary-magnitude decimal numbers for game currencies.

This module provides the Decimal value type used for every currency in an idle
game. Values are stored as a float mantissa and an integer exponent, so they
keep growing long after a native float would overflow to infinity.

Representation:
- mantissa: float with 1 <= |mantissa| < 10, or exactly 0.0 for zero
- exponent: Python int, bounded by EXPONENT_LIMIT
- value = mantissa * 10 ** exponent

Every operation returns a new, normalized Decimal. Bad inputs never poison an
arithmetic chain:
- float("inf") clamps to the signed largest float (about 1.8e308)
- float("nan"), unparseable strings and unsupported types become zero
- division by zero returns zero
- results past EXPONENT_LIMIT saturate to Decimal.max_value()

Example usage:
    gold = Decimal.create("1.5e400")
    income = Decimal.create(250).mul(1.07 ** 30)

    gold = gold + income
    if gold.gte(cost):
        gold = gold - cost

    # Persist and restore bit-exactly
    data = gold.serialize()  # {"mantissa": 1.5, "exponent": 400}
    assert Decimal.deserialize(data) == gold
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Mapping
from decimal import Decimal as ExactDecimal
from decimal import InvalidOperation
from typing import Any, TypeAlias

logger = logging.getLogger(__name__)

MAX_SIGNIFICANT_DIGITS = 17
"""Digits a float mantissa can hold; smaller addends are absorbed."""

EXPONENT_LIMIT = 9_000_000_000_000_000
"""Largest exponent a finite Decimal may carry."""

FLOAT_MAX = sys.float_info.max

# Addition rounds to this many mantissa digits to keep integer sums exact
_ADD_PRECISION = 14


class Decimal:
    """Immutable mantissa/exponent number.

    Build instances with Decimal(value) or Decimal.create(value). Instances
    compare and hash by value, so they can be used as dict keys and mixed with
    native numbers in comparisons and arithmetic operators.

    Attributes:
        mantissa: Normalized mantissa (1 <= |m| < 10, or 0.0).
        exponent: Power of ten applied to the mantissa.
    """

    __slots__ = ("_exponent", "_mantissa")

    def __init__(self, value: DecimalSource = 0) -> None:
        """Create a Decimal from any supported source.

        Args:
            value: Native number, numeric string, Decimal, a mapping with
                "mantissa" and "exponent" keys, or None (zero).
        """
        self._mantissa, self._exponent = _parse(value)

    @classmethod
    def _make(cls, mantissa: float, exponent: int) -> Decimal:
        instance = cls.__new__(cls)
        instance._mantissa = mantissa
        instance._exponent = exponent
        return instance

    @classmethod
    def create(cls, value: DecimalSource = 0) -> Decimal:
        """Return value as a Decimal, reusing it if it already is one."""
        if isinstance(value, Decimal):
            return value
        return cls(value)

    @classmethod
    def from_mantissa_exponent(cls, mantissa: float, exponent: int) -> Decimal:
        """Create a Decimal from raw components, normalizing if needed."""
        return cls({"mantissa": mantissa, "exponent": exponent})

    @classmethod
    def zero(cls) -> Decimal:
        """Return zero."""
        return _ZERO

    @classmethod
    def one(cls) -> Decimal:
        """Return one."""
        return _ONE

    @classmethod
    def max_value(cls) -> Decimal:
        """Return the saturation ceiling used when results overflow."""
        return _MAX

    @property
    def mantissa(self) -> float:
        """Normalized mantissa."""
        return self._mantissa

    @property
    def exponent(self) -> int:
        """Power of ten."""
        return self._exponent

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: DecimalSource) -> Decimal:
        """Return self + other."""
        other = Decimal.create(other)
        if self.is_zero():
            return other
        if other.is_zero():
            return self

        if self._exponent >= other._exponent:
            big, small = self, other
        else:
            big, small = other, self

        diff = big._exponent - small._exponent
        if diff > MAX_SIGNIFICANT_DIGITS:
            return big

        scaled = round(
            big._mantissa * 10.0**_ADD_PRECISION + small._mantissa * 10.0 ** (_ADD_PRECISION - diff),
        )
        return _normalize(float(scaled), big._exponent - _ADD_PRECISION)

    def sub(self, other: DecimalSource) -> Decimal:
        """Return self - other."""
        return self.add(Decimal.create(other).neg())

    def mul(self, other: DecimalSource) -> Decimal:
        """Return self * other."""
        other = Decimal.create(other)
        if self.is_zero() or other.is_zero():
            return _ZERO
        return _normalize(self._mantissa * other._mantissa, self._exponent + other._exponent)

    def div(self, other: DecimalSource) -> Decimal:
        """Return self / other, or zero when other is zero.

        A zero divisor is common for a frame or two (e.g. a rate computed from
        an empty stat) and must not break the simulation loop.
        """
        other = Decimal.create(other)
        if other.is_zero():
            logger.debug("Division by zero, returning zero")
            return _ZERO
        if self.is_zero():
            return _ZERO
        return _normalize(self._mantissa / other._mantissa, self._exponent - other._exponent)

    def pow(self, power: DecimalSource) -> Decimal:
        """Return self raised to power.

        Negative bases only accept integral powers; anything else has no real
        result and yields zero.
        """
        exponent_value = Decimal.create(power).to_number()

        if exponent_value == 0:
            return _ONE
        if self.is_zero():
            # 0 ** negative would divide by zero
            return _ZERO

        negative_result = False
        if self._mantissa < 0:
            if not math.isfinite(exponent_value) or not exponent_value.is_integer():
                logger.debug("Fractional power of a negative number, returning zero")
                return _ZERO
            negative_result = int(exponent_value) % 2 == 1

        # Small values: native pow is exact enough and faster
        if abs(self._exponent) < 300:
            try:
                native = abs(self.to_number()) ** exponent_value
            except OverflowError:
                native = math.inf
            if 1e-300 < native < math.inf:
                result = Decimal(native)
                return result.neg() if negative_result else result

        log_result = exponent_value * self._abs_log10()
        if math.isnan(log_result):
            return _ZERO
        if log_result >= EXPONENT_LIMIT:
            return _MAX.neg() if negative_result else _MAX
        if log_result <= -EXPONENT_LIMIT:
            return _ZERO

        new_exponent = math.floor(log_result)
        mantissa = 10.0 ** (log_result - new_exponent)
        if negative_result:
            mantissa = -mantissa
        return _normalize(mantissa, new_exponent)

    def sqrt(self) -> Decimal:
        """Return the square root, or zero for negative values."""
        if self._mantissa < 0:
            logger.debug("Square root of a negative number, returning zero")
            return _ZERO
        if self.is_zero():
            return _ZERO
        if self._exponent % 2 == 0:
            return _normalize(math.sqrt(self._mantissa), self._exponent // 2)
        return _normalize(math.sqrt(self._mantissa * 10), (self._exponent - 1) // 2)

    def log10(self) -> Decimal:
        """Return the base-10 logarithm.

        log10(0) clamps to the most negative float; negative inputs return zero.
        """
        if self.is_zero():
            return Decimal(-math.inf)
        if self._mantissa < 0:
            return _ZERO
        return Decimal(self._abs_log10())

    def ln(self) -> Decimal:
        """Return the natural logarithm (same edge cases as log10)."""
        if self.is_zero():
            return Decimal(-math.inf)
        if self._mantissa < 0:
            return _ZERO
        return Decimal(self._abs_log10() * math.log(10))

    def floor(self) -> Decimal:
        """Round toward negative infinity."""
        if self.is_zero() or self._exponent >= MAX_SIGNIFICANT_DIGITS:
            return self
        if self._exponent < 0:
            return _ZERO if self._mantissa > 0 else _MINUS_ONE
        return Decimal(math.floor(self.to_number()))

    def ceil(self) -> Decimal:
        """Round toward positive infinity."""
        if self.is_zero() or self._exponent >= MAX_SIGNIFICANT_DIGITS:
            return self
        if self._exponent < 0:
            return _ONE if self._mantissa > 0 else _ZERO
        return Decimal(math.ceil(self.to_number()))

    def round(self) -> Decimal:
        """Round to the nearest integer, halves toward positive infinity."""
        if self.is_zero() or self._exponent >= MAX_SIGNIFICANT_DIGITS:
            return self
        if self._exponent < -1:
            return _ZERO
        return Decimal(math.floor(self.to_number() + 0.5))

    def abs(self) -> Decimal:
        """Return the absolute value."""
        if self._mantissa >= 0:
            return self
        return Decimal._make(-self._mantissa, self._exponent)

    def neg(self) -> Decimal:
        """Return the negated value."""
        if self.is_zero():
            return self
        return Decimal._make(-self._mantissa, self._exponent)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, other: DecimalSource) -> int:
        """Return -1, 0 or 1 as self is less than, equal to or greater than other."""
        other = Decimal.create(other)
        if self._mantissa == other._mantissa and self._exponent == other._exponent:
            return 0
        if self.is_zero():
            return -1 if other._mantissa > 0 else 1
        if other.is_zero():
            return 1 if self._mantissa > 0 else -1
        if (self._mantissa > 0) != (other._mantissa > 0):
            return 1 if self._mantissa > 0 else -1

        sign = 1 if self._mantissa > 0 else -1
        if self._exponent != other._exponent:
            return sign if self._exponent > other._exponent else -sign
        return 1 if self._mantissa > other._mantissa else -1

    def eq(self, other: DecimalSource) -> bool:
        """Return True if self == other."""
        return self.compare(other) == 0

    def gt(self, other: DecimalSource) -> bool:
        """Return True if self > other."""
        return self.compare(other) > 0

    def gte(self, other: DecimalSource) -> bool:
        """Return True if self >= other. Use this to check affordability."""
        return self.compare(other) >= 0

    def lt(self, other: DecimalSource) -> bool:
        """Return True if self < other."""
        return self.compare(other) < 0

    def lte(self, other: DecimalSource) -> bool:
        """Return True if self <= other."""
        return self.compare(other) <= 0

    @staticmethod
    def min(a: DecimalSource, b: DecimalSource) -> Decimal:
        """Return the smaller of a and b."""
        a, b = Decimal.create(a), Decimal.create(b)
        return a if a.lte(b) else b

    @staticmethod
    def max(a: DecimalSource, b: DecimalSource) -> Decimal:
        """Return the larger of a and b."""
        a, b = Decimal.create(a), Decimal.create(b)
        return a if a.gte(b) else b

    def is_zero(self) -> bool:
        """Return True for zero."""
        return self._mantissa == 0

    def is_positive(self) -> bool:
        """Return True for values greater than zero."""
        return self._mantissa > 0

    def is_negative(self) -> bool:
        """Return True for values less than zero."""
        return self._mantissa < 0

    def is_finite(self) -> bool:
        """Return False once a value has saturated at the exponent limit."""
        return self._exponent < EXPONENT_LIMIT

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_number(self) -> float:
        """Convert to a native float.

        Lossy: returns inf past float range and 0.0 below it. Use only where
        exact currency state does not matter (positioning, progress bars).
        """
        if self.is_zero():
            return 0.0
        return float(f"{self._mantissa!r}e{self._exponent}")

    def serialize(self) -> dict[str, float | int]:
        """Return the plain {"mantissa", "exponent"} form for save files."""
        return {"mantissa": self._mantissa, "exponent": self._exponent}

    @classmethod
    def deserialize(cls, data: DecimalSource) -> Decimal:
        """Restore a Decimal from serialize() output (or any create() source)."""
        return cls.create(data)

    def _abs_log10(self) -> float:
        return self._exponent + math.log10(abs(self._mantissa))

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def __add__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return self.add(other)  # type: ignore[arg-type]

    def __radd__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return Decimal.create(other).add(self)  # type: ignore[arg-type]

    def __sub__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return self.sub(other)  # type: ignore[arg-type]

    def __rsub__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return Decimal.create(other).sub(self)  # type: ignore[arg-type]

    def __mul__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return self.mul(other)  # type: ignore[arg-type]

    def __rmul__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return Decimal.create(other).mul(self)  # type: ignore[arg-type]

    def __truediv__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return self.div(other)  # type: ignore[arg-type]

    def __rtruediv__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return Decimal.create(other).div(self)  # type: ignore[arg-type]

    def __pow__(self, other: object) -> Decimal:
        if not _is_operand(other):
            return NotImplemented
        return self.pow(other)  # type: ignore[arg-type]

    def __neg__(self) -> Decimal:
        return self.neg()

    def __abs__(self) -> Decimal:
        return self.abs()

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __float__(self) -> float:
        return self.to_number()

    def __eq__(self, other: object) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.eq(other)  # type: ignore[arg-type]

    def __lt__(self, other: object) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.lt(other)  # type: ignore[arg-type]

    def __le__(self, other: object) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.lte(other)  # type: ignore[arg-type]

    def __gt__(self, other: object) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.gt(other)  # type: ignore[arg-type]

    def __ge__(self, other: object) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.gte(other)  # type: ignore[arg-type]

    def __hash__(self) -> int:
        """Hash consistently with == between Decimals.

        Within float range the hash is that of to_number(), so a Decimal and a
        native float or int it equals exactly share a hash. Outside that range,
        and for ints a float cannot hold exactly, == against native numbers is
        only as precise as the float mantissa, so such Decimals must not be
        mixed with native numbers as dict or set keys.
        """
        if abs(self._exponent) < 300:
            return hash(self.to_number())
        return hash((self._mantissa, self._exponent))

    def __repr__(self) -> str:
        return f"Decimal('{self}')"

    def __str__(self) -> str:
        if self.is_zero():
            return "0"
        if -7 < self._exponent < 21:
            number = self.to_number()
            if number.is_integer():
                return str(int(number))
            return repr(number)
        return f"{self._mantissa!r}e{self._exponent:+d}"


DecimalSource: TypeAlias = "int | float | str | Decimal | Mapping[str, Any] | None"


def _is_operand(value: object) -> bool:
    return isinstance(value, (Decimal, int, float))


def _bounded(mantissa: float, exponent: int) -> Decimal:
    if exponent >= EXPONENT_LIMIT:
        return _MAX.neg() if mantissa < 0 else _MAX
    if exponent <= -EXPONENT_LIMIT:
        return _ZERO
    return Decimal._make(mantissa, exponent)


def _normalize(mantissa: float, exponent: int) -> Decimal:
    """Bring an arbitrary finite mantissa into [1, 10) and adjust the exponent."""
    if mantissa == 0 or math.isnan(mantissa):
        return _ZERO
    if math.isinf(mantissa):
        return _MAX.neg() if mantissa < 0 else _MAX

    magnitude = abs(mantissa)
    if 1 <= magnitude < 10:
        return _bounded(mantissa, exponent)

    shift = math.floor(math.log10(magnitude))
    if shift > 0:
        mantissa /= 10.0**shift
    else:
        mantissa *= 10.0**-shift
    exponent += shift

    # log10 can be off by one ulp around exact powers of ten
    if abs(mantissa) >= 10:
        mantissa /= 10
        exponent += 1
    elif abs(mantissa) < 1:
        mantissa *= 10
        exponent -= 1
    return _bounded(mantissa, exponent)


def _clamp_infinite(negative: bool) -> tuple[float, int]:
    mantissa, exponent = _parse_exact(ExactDecimal(repr(FLOAT_MAX)))
    return (-mantissa if negative else mantissa), exponent


def _parse_exact(exact: ExactDecimal) -> tuple[float, int]:
    """Convert an exact decimal into (mantissa, exponent) to float precision."""
    if exact.is_nan():
        return 0.0, 0
    if exact.is_infinite():
        return _clamp_infinite(exact.is_signed())
    if exact.is_zero():
        return 0.0, 0

    sign, digits, digit_exponent = exact.as_tuple()
    significant = digits[:MAX_SIGNIFICANT_DIGITS]
    exponent = len(digits) + int(digit_exponent) - 1
    mantissa = float(ExactDecimal((sign, significant, 1 - len(significant))))
    result = _normalize(mantissa, exponent)
    return result._mantissa, result._exponent


def _parse_components(data: Mapping[str, Any]) -> tuple[float, int]:
    """Parse the serialized {"mantissa", "exponent"} form."""
    raw_mantissa = data.get("mantissa")
    raw_exponent = data.get("exponent")
    if isinstance(raw_mantissa, bool) or not isinstance(raw_mantissa, (int, float)):
        logger.warning("Invalid Decimal mantissa %r, using zero", raw_mantissa)
        return 0.0, 0

    try:
        mantissa = float(raw_mantissa)
    except OverflowError:
        mantissa = math.inf if raw_mantissa > 0 else -math.inf
    if math.isnan(mantissa) or mantissa == 0:
        return 0.0, 0
    if math.isinf(mantissa):
        return _clamp_infinite(mantissa < 0)

    if isinstance(raw_exponent, bool) or not isinstance(raw_exponent, (int, float)):
        logger.warning("Invalid Decimal exponent %r, using zero", raw_exponent)
        return 0.0, 0

    if isinstance(raw_exponent, int):
        exponent = raw_exponent
    else:
        if math.isnan(raw_exponent):
            return 0.0, 0
        if math.isinf(raw_exponent):
            result = _bounded(mantissa, EXPONENT_LIMIT if raw_exponent > 0 else -EXPONENT_LIMIT)
            return result._mantissa, result._exponent
        exponent = math.floor(raw_exponent)
        fraction = raw_exponent - exponent
        if fraction:
            mantissa *= 10.0**fraction

    result = _normalize(mantissa, exponent)
    return result._mantissa, result._exponent


def _parse(value: DecimalSource) -> tuple[float, int]:
    """Turn any supported source into (mantissa, exponent)."""
    if value is None:
        return 0.0, 0
    if isinstance(value, Decimal):
        return value._mantissa, value._exponent
    if isinstance(value, bool):
        return (1.0, 0) if value else (0.0, 0)
    if isinstance(value, int):
        return _parse_exact(ExactDecimal(value))
    if isinstance(value, float):
        if math.isnan(value):
            return 0.0, 0
        if math.isinf(value):
            return _clamp_infinite(value < 0)
        # repr() is the shortest string that round-trips, so parsing it is exact
        return _parse_exact(ExactDecimal(repr(value)))
    if isinstance(value, str):
        try:
            exact = ExactDecimal(value.strip())
        except InvalidOperation:
            logger.warning("Could not parse number from %r, using zero", value)
            return 0.0, 0
        return _parse_exact(exact)
    if isinstance(value, Mapping):
        return _parse_components(value)

    logger.warning("Unsupported Decimal source %s, using zero", type(value).__name__)
    return 0.0, 0


_ZERO = Decimal._make(0.0, 0)
_ONE = Decimal._make(1.0, 0)
_MINUS_ONE = Decimal._make(-1.0, 0)
_MAX = Decimal._make(1.0, EXPONENT_LIMIT)
