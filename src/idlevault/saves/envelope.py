"""Checksummed save envelope.

A save is stored as one JSON string:

    {"checksum": -1289401, "data": {"version": 2, "timestamp": 1700000000000,
                                    "gold": {...}, "research": {...}}}

The checksum is a 32-bit rolling hash of the canonical JSON string of "data".
It detects accidental corruption (truncated writes, bad edits, disk errors),
not tampering. A stored string without the checksum/data pair is a legacy
save from before envelopes existed and is treated as "data" directly.

A checksum mismatch is never fatal here: migrations and hand edits routinely
change the data, and refusing to load would strand the player. The mismatch is
reported in UnwrapResult.corrupted for the caller to log.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from idlevault.bignum.decimal import Decimal
from idlevault.exceptions import SaveParseError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

RESERVED_KEYS = ("version", "timestamp")
"""Keys of "data" owned by the envelope; core fields and subsystems cannot use them."""


def compute_checksum(text: str) -> int:
    """Return the signed 32-bit rolling hash of text.

    Computes h = h * 31 + unit over the UTF-16 code units of text, wrapping to
    a signed int32. Hashing UTF-16 units keeps checksums identical to saves
    written by the browser build.
    """
    if text.isascii():
        units: Any = text.encode("ascii")
    else:
        encoded = text.encode("utf-16-le")
        units = (int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2))

    value = 0
    for unit in units:
        value = (value * 31 + unit) & 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def verify_checksum(text: str, checksum: object) -> bool:
    """Return True if checksum matches compute_checksum(text)."""
    return isinstance(checksum, int) and not isinstance(checksum, bool) and compute_checksum(text) == checksum


def _encode_default(value: object) -> Any:  # noqa: ANN401
    if isinstance(value, Decimal):
        return value.serialize()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def canonical_json(value: Any) -> str:  # noqa: ANN401
    """Serialize value to the canonical string form used for checksums.

    Compact separators, insertion key order, non-ASCII kept as-is. Decimals
    are written in their {"mantissa", "exponent"} form. NaN and infinity are
    rejected because they are not valid JSON.

    Raises:
        TypeError: If value contains something that is not JSON-serializable.
        ValueError: If value contains NaN or infinity.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False, default=_encode_default)


def reject_constant(name: str) -> Any:  # noqa: ANN401
    """json.loads parse_constant hook refusing NaN and Infinity."""
    msg = f"{name} is not valid JSON"
    raise ValueError(msg)


def parse_finite_float(text: str) -> float:
    """json.loads parse_float hook refusing literals that overflow to inf."""
    value = float(text)
    if not math.isfinite(value):
        msg = f"Number {text} is out of range"
        raise ValueError(msg)
    return value


def parse_json(text: str) -> Any:  # noqa: ANN401
    """Parse strict JSON text, raising SaveParseError on any failure."""
    try:
        return json.loads(text, parse_constant=reject_constant, parse_float=parse_finite_float)
    except (ValueError, RecursionError) as e:
        msg = f"Save data is not valid JSON: {e}"
        raise SaveParseError(msg) from e


@dataclass(frozen=True)
class SaveEnvelope:
    """A wrapped save ready to be written.

    Attributes:
        checksum: Signed 32-bit hash of canonical_json(data).
        data: Save data: version, timestamp, core fields, subsystem snapshots.
    """

    checksum: int
    data: dict[str, Any]

    @property
    def version(self) -> int:
        """Save format version."""
        return int(self.data["version"])

    @property
    def timestamp(self) -> int:
        """Save time in milliseconds since the epoch."""
        return int(self.data["timestamp"])

    def to_json(self) -> str:
        """Return the wire string {"checksum": ..., "data": ...}."""
        return canonical_json({"checksum": self.checksum, "data": self.data})


@dataclass(frozen=True)
class UnwrapResult:
    """A parsed save string.

    Attributes:
        data: The save data (the envelope's "data", or the whole legacy payload).
        corrupted: True if the stored checksum did not match the data.
        legacy: True if the payload had no envelope.
        stored_checksum: Checksum found in the envelope, if any.
        computed_checksum: Checksum recomputed from data, if an envelope was found.
    """

    data: dict[str, Any]
    corrupted: bool = False
    legacy: bool = False
    stored_checksum: int | None = None
    computed_checksum: int | None = None


class EnvelopeCodec:
    """Wraps save data into checksummed envelopes and unwraps them again."""

    def wrap(
        self,
        version: int,
        timestamp: int,
        core_fields: Mapping[str, Any],
        snapshots: Mapping[str, Any],
    ) -> SaveEnvelope:
        """Build a checksummed envelope.

        The data keys are ordered: version, timestamp, core fields, then
        subsystem snapshots in registration order. Core fields or subsystem
        names equal to a reserved key are dropped with a warning; a subsystem
        snapshot replaces a core field of the same name.

        Args:
            version: Save format version.
            timestamp: Save time in milliseconds since the epoch.
            core_fields: Top-level game fields (gold, wave, ...).
            snapshots: Subsystem name -> snapshot.

        Returns:
            The envelope.

        Raises:
            TypeError: If the data is not JSON-serializable.
            ValueError: If the data contains NaN or infinity.
        """
        data: dict[str, Any] = {"version": version, "timestamp": timestamp}

        for key, value in core_fields.items():
            if key in RESERVED_KEYS:
                logger.warning("Ignoring core field '%s': reserved by the save envelope", key)
                continue
            data[key] = value

        for name, snapshot in snapshots.items():
            if name in RESERVED_KEYS:
                logger.warning("Ignoring subsystem '%s': reserved by the save envelope", name)
                continue
            if name in core_fields:
                logger.warning("Subsystem '%s' replaces the core field of the same name", name)
            data[name] = snapshot

        return SaveEnvelope(checksum=compute_checksum(canonical_json(data)), data=data)

    def unwrap(self, raw: str) -> UnwrapResult:
        """Parse a stored save string and verify its checksum.

        Args:
            raw: String read from storage.

        Returns:
            UnwrapResult with the data and the integrity verdict.

        Raises:
            SaveParseError: If raw is not JSON or the data is not a JSON object.
        """
        parsed = parse_json(raw)
        if not isinstance(parsed, dict):
            msg = f"Save root must be an object, got {type(parsed).__name__}"
            raise SaveParseError(msg)

        if "checksum" not in parsed or "data" not in parsed:
            logger.info("Loaded legacy save without checksum envelope")
            return UnwrapResult(data=parsed, legacy=True)

        data = parsed["data"]
        if not isinstance(data, dict):
            msg = f"Save envelope data must be an object, got {type(data).__name__}"
            raise SaveParseError(msg)

        stored = parsed["checksum"]
        try:
            computed = compute_checksum(canonical_json(data))
        except (TypeError, ValueError, RecursionError) as e:
            msg = f"Save envelope data cannot be re-serialized: {e}"
            raise SaveParseError(msg) from e
        corrupted = not (isinstance(stored, int) and not isinstance(stored, bool) and stored == computed)
        if corrupted:
            logger.warning("Save checksum mismatch: stored %r, computed %d", stored, computed)

        return UnwrapResult(
            data=data,
            corrupted=corrupted,
            stored_checksum=stored if isinstance(stored, int) and not isinstance(stored, bool) else None,
            computed_checksum=computed,
        )
