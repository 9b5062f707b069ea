"""Unit tests for import/export encoding and sanitization."""

import base64
import unittest
from urllib.parse import quote

from idlevault.exceptions import ImportFormatError
from idlevault.saves.results import SaveErrorKind
from idlevault.saves.sanitize import contains_dangerous_keys, sanitize_json
from idlevault.saves.transfer import decode_import, encode_export


def _encode(raw: str) -> str:
    return base64.b64encode(quote(raw, safe="-_.!~*'()").encode("ascii")).decode("ascii")


class TestSanitize(unittest.TestCase):
    """Test removal of prototype-pollution keys."""

    def test_strips_dangerous_keys_at_every_depth(self) -> None:
        """Test that __proto__, constructor and prototype are removed recursively."""
        data = {
            "__proto__": {"isAdmin": True},
            "gold": 5,
            "nested": {"constructor": {"prototype": {}}, "ok": [{"prototype": 1, "keep": 2}]},
        }

        result = sanitize_json(data)

        assert result == {"gold": 5, "nested": {"ok": [{"keep": 2}]}}
        assert not contains_dangerous_keys(result)

    def test_does_not_modify_input(self) -> None:
        """Test that the input tree is left untouched."""
        data = {"__proto__": 1}

        sanitize_json(data)

        assert data == {"__proto__": 1}

    def test_scalars_pass_through(self) -> None:
        """Test that scalar values are returned unchanged."""
        assert sanitize_json(5) == 5
        assert sanitize_json("constructor") == "constructor"
        assert sanitize_json(None) is None

    def test_deep_nesting_is_truncated(self) -> None:
        """Test that subtrees deeper than 50 levels become None."""
        data: dict = {}
        node = data
        for _ in range(60):
            node["child"] = {}
            node = node["child"]

        result = sanitize_json(data)

        depth = 0
        node = result
        while isinstance(node, dict):
            node = node.get("child")
            depth += 1
        assert node is None
        assert depth == 51

    def test_contains_dangerous_keys(self) -> None:
        """Test detection in lists and nested objects."""
        assert contains_dangerous_keys([{"a": {"__proto__": 1}}])
        assert not contains_dangerous_keys({"a": ["__proto__"]})

    def test_contains_dangerous_keys_on_very_deep_nesting(self) -> None:
        """Test that detection stops at the sanitizer depth instead of recursing forever."""
        data: dict = {}
        node = data
        for _ in range(5000):
            node["child"] = {}
            node = node["child"]
        node["__proto__"] = {}

        assert contains_dangerous_keys(data) is False
        assert contains_dangerous_keys({"a": {"b": {"constructor": 1}}}) is True

    def test_contains_dangerous_keys_matches_sanitized_depth(self) -> None:
        """Test that a key just inside the depth limit is still found."""
        data: dict = {}
        node = data
        for _ in range(50):
            node["child"] = {}
            node = node["child"]
        node["prototype"] = 1

        assert contains_dangerous_keys(data) is True
        assert contains_dangerous_keys(data, max_depth=10) is False


class TestExportImport(unittest.TestCase):
    """Test the export text codec."""

    def test_encode_matches_uri_escape_and_base64(self) -> None:
        """Test the exact export format."""
        assert encode_export("{}") == "JTdCJTdE"

    def test_roundtrip_with_unicode(self) -> None:
        """Test that non-ASCII save data survives export and import."""
        raw = '{"name":"Café ☕","gold":1}'

        assert decode_import(encode_export(raw)) == {"name": "Café ☕", "gold": 1}

    def test_surrounding_whitespace_is_ignored(self) -> None:
        """Test that pasted text with newlines still imports."""
        assert decode_import(f"  {encode_export('{}')}\n") == {}

    def test_empty_input(self) -> None:
        """Test empty and non-string inputs."""
        for value in ("", "   ", None, 42):
            with self.assertRaises(ImportFormatError) as ctx:
                decode_import(value)
            assert ctx.exception.kind is SaveErrorKind.EMPTY_INPUT

    def test_invalid_characters(self) -> None:
        """Test that text outside the base64 alphabet is rejected before decoding."""
        with self.assertRaises(ImportFormatError) as ctx:
            decode_import("not base64!")

        assert ctx.exception.kind is SaveErrorKind.INVALID_FORMAT

    def test_bad_padding(self) -> None:
        """Test that base64 with broken padding is rejected."""
        with self.assertRaises(ImportFormatError) as ctx:
            decode_import("abc")

        assert ctx.exception.kind is SaveErrorKind.INVALID_FORMAT

    def test_invalid_utf8_escape(self) -> None:
        """Test that percent-escapes that are not UTF-8 are rejected."""
        with self.assertRaises(ImportFormatError) as ctx:
            decode_import(base64.b64encode(b"%FF%FE").decode("ascii"))

        assert ctx.exception.kind is SaveErrorKind.INVALID_FORMAT

    def test_invalid_json(self) -> None:
        """Test that decoded text that is not JSON is rejected."""
        with self.assertRaises(ImportFormatError) as ctx:
            decode_import(_encode("{gold: 5"))

        assert ctx.exception.kind is SaveErrorKind.INVALID_JSON

    def test_out_of_range_number(self) -> None:
        """Test that numbers too large for a float are rejected as invalid JSON."""
        for raw in ('{"gold": 1e999}', '{"gold": [-1e999]}'):
            with self.subTest(raw=raw), self.assertRaises(ImportFormatError) as ctx:
                decode_import(_encode(raw))

            assert ctx.exception.kind is SaveErrorKind.INVALID_JSON

    def test_non_object_json(self) -> None:
        """Test that a JSON array is rejected."""
        with self.assertRaises(ImportFormatError) as ctx:
            decode_import(_encode("[1, 2]"))

        assert ctx.exception.kind is SaveErrorKind.INVALID_JSON

    def test_import_is_sanitized(self) -> None:
        """Test that imported data has dangerous keys removed."""
        payload = '{"__proto__":{"isAdmin":true},"data":{"constructor":{"x":1},"gold":5}}'

        result = decode_import(_encode(payload))

        assert result == {"data": {"gold": 5}}
