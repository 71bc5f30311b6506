"""Alphabet helpers and canonical state encoding."""

import json
import re
from typing import Any, FrozenSet, List

from nfalab.exceptions import PatternSyntaxError

# Every symbol a compact symbol class can expand to, in expansion order.
ALL_SYMBOLS = (
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "_-+*/.@#$%&!?"
)

DEFAULT_SYMBOL_CLASS = "0-9"


def expand_symbol_class(char_class: str) -> List[str]:
    """Expand a character class body (e.g. ``"a-zA-Z0-9_"``) into symbols.

    The result follows the order of ALL_SYMBOLS, not the order of the class.

    Raises:
        PatternSyntaxError: If the class is empty, malformed, or matches
            nothing in ALL_SYMBOLS.
    """
    if not char_class or not char_class.strip():
        raise PatternSyntaxError("Symbol class cannot be empty")

    try:
        regex = re.compile(f"[{char_class}]")
    except re.error as e:
        raise PatternSyntaxError(
            f"Invalid character class pattern: {e.msg}", e.pos
        ) from e

    matches = regex.findall(ALL_SYMBOLS)
    if not matches:
        raise PatternSyntaxError(f"No symbols match the pattern [{char_class}]")
    return matches


def _normalize(value: Any, path: FrozenSet[int] = frozenset()) -> Any:
    """Bring equal values to one JSON spelling.

    Integral floats become ints and tuples become lists. Mapping keys must
    be strings.
    """
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, (list, tuple, dict)):
        if id(value) in path:
            raise ValueError("Circular reference detected")
        path = path | {id(value)}
    if isinstance(value, (list, tuple)):
        return [_normalize(v, path) for v in value]
    if isinstance(value, dict):
        normalized = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Mapping keys must be strings, got {key!r}")
            normalized[key] = _normalize(item, path)
        return normalized
    return value


def canonical_json(value: Any) -> str:
    """Serialize a value to JSON with mapping keys sorted.

    Two mappings holding the same items produce the same string regardless of
    insertion order, and ``1`` and ``1.0`` encode alike.

    Raises:
        TypeError: If the value is not JSON-serializable or a mapping has a
            non-string key.
        ValueError: If the value contains a circular reference.
    """
    return json.dumps(_normalize(value), sort_keys=True, separators=(",", ":"))
