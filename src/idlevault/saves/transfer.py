"""Text codec for sharing saves outside the game.

An export string is the envelope JSON percent-escaped like JavaScript's
encodeURIComponent and then base64-encoded, so it survives chat clients,
forums and clipboard managers. Import validates and decodes in the reverse
order and sanitizes the parsed tree; the string is untrusted input.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import quote, unquote

from idlevault.exceptions import ImportFormatError
from idlevault.saves.envelope import parse_finite_float, reject_constant
from idlevault.saves.results import SaveErrorKind
from idlevault.saves.sanitize import sanitize_json

BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

# Characters encodeURIComponent leaves unescaped besides letters and digits
URI_SAFE = "-_.!~*'()"


def encode_export(raw: str) -> str:
    """Encode a save string for export."""
    escaped = quote(raw, safe=URI_SAFE)
    return base64.b64encode(escaped.encode("ascii")).decode("ascii")


def decode_import(text: object) -> dict[str, Any]:
    """Decode and sanitize an export string.

    Surrounding whitespace is ignored.

    Args:
        text: String produced by encode_export().

    Returns:
        The sanitized save object.

    Raises:
        ImportFormatError: With kind EMPTY_INPUT, INVALID_FORMAT or INVALID_JSON.
    """
    if not isinstance(text, str) or not text.strip():
        raise ImportFormatError(SaveErrorKind.EMPTY_INPUT, "No save data provided")

    text = text.strip()
    if not BASE64_PATTERN.match(text):
        raise ImportFormatError(SaveErrorKind.INVALID_FORMAT, "Save data contains invalid characters")

    try:
        escaped = base64.b64decode(text, validate=True).decode("ascii")
        raw = unquote(escaped, errors="strict")
    except (binascii.Error, UnicodeDecodeError) as e:
        msg = f"Save data could not be decoded: {e}"
        raise ImportFormatError(SaveErrorKind.INVALID_FORMAT, msg) from e

    try:
        parsed = json.loads(raw, parse_constant=reject_constant, parse_float=parse_finite_float)
    except (ValueError, RecursionError) as e:
        msg = f"Save data is not valid JSON: {e}"
        raise ImportFormatError(SaveErrorKind.INVALID_JSON, msg) from e

    if not isinstance(parsed, dict):
        msg = f"Save data must be a JSON object, got {type(parsed).__name__}"
        raise ImportFormatError(SaveErrorKind.INVALID_JSON, msg)

    return sanitize_json(parsed)
