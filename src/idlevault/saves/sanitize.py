"""Removal of prototype-pollution keys from untrusted JSON trees.

Save strings can be pasted in by players and end up in web builds, modding
tools or JavaScript companions, where keys like "__proto__" rewrite a shared
base object. The sanitizer drops those keys at every depth before anything
else sees the data.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

DANGEROUS_KEYS = frozenset({"__proto__", "constructor", "prototype"})

MAX_DEPTH = 50
"""Subtrees nested deeper than this are replaced with None."""


def sanitize_json(value: Any, depth: int = 0, max_depth: int = MAX_DEPTH) -> Any:  # noqa: ANN401
    """Return a copy of a parsed JSON value without dangerous keys.

    Args:
        value: Parsed JSON (dict, list or scalar).
        depth: Current nesting depth (used by recursion).
        max_depth: Depth past which subtrees are replaced with None.

    Returns:
        A new tree with every "__proto__", "constructor" and "prototype" key
        removed. Scalars are returned unchanged.
    """
    if depth > max_depth:
        logger.debug("Dropping JSON subtree nested deeper than %d levels", max_depth)
        return None

    if isinstance(value, list):
        return [sanitize_json(item, depth + 1, max_depth) for item in value]

    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in DANGEROUS_KEYS:
                logger.debug("Stripped dangerous key '%s' at depth %d", key, depth)
                continue
            result[key] = sanitize_json(item, depth + 1, max_depth)
        return result

    return value


def contains_dangerous_keys(value: Any, depth: int = 0, max_depth: int = MAX_DEPTH) -> bool:  # noqa: ANN401
    """Return True if any dict in the tree has a dangerous key.

    Only the part of the tree sanitize_json() keeps is searched: subtrees
    deeper than max_depth are skipped.
    """
    if depth > max_depth:
        return False
    if isinstance(value, list):
        return any(contains_dangerous_keys(item, depth + 1, max_depth) for item in value)
    if isinstance(value, dict):
        return any(
            key in DANGEROUS_KEYS or contains_dangerous_keys(item, depth + 1, max_depth) for key, item in value.items()
        )
    return False
