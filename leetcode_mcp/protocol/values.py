"""Typed accessors for dynamic JSON values.

Request parameters, tool arguments and upstream API payloads arrive as plain
decoded JSON. Every access point goes through one of these helpers so the
expected shape is declared where the value is used, and a mismatch surfaces
as a ShapeError instead of a silent coercion.
"""

from typing import Any, Dict, Optional


class ShapeError(TypeError):
    """Raised when a JSON value does not have the expected shape."""

    def __init__(self, path: str, expected: str, value: Any):
        self.path = path
        self.expected = expected
        self.actual = json_type(value)
        super().__init__(f"{path} must be {expected}, got {self.actual}")


_JSON_TYPES = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
    "null": type(None),
}


def json_type(value: Any) -> str:
    """Return the JSON type name of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def matches_json_type(value: Any, type_name: str) -> bool:
    """Check a value against a JSON schema type name.

    Unknown type names always match. Booleans never count as numbers.
    """
    expected = _JSON_TYPES.get(type_name)
    if expected is None:
        return True
    if isinstance(value, bool) and type_name in ("integer", "number"):
        return False
    return isinstance(value, expected)


def expect_object(value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ShapeError(path, "an object", value)
    return value


def expect_string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ShapeError(path, "a string", value)
    return value


def optional_object(value: Any, path: str) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return expect_object(value, path)


def get_string(obj: Dict[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
    """Read a string field; absent or null yields the default."""
    value = obj.get(key)
    if value is None:
        return default
    return expect_string(value, key)


def get_bool(obj: Dict[str, Any], key: str, default: bool) -> bool:
    """Read a boolean field; absent or null yields the default."""
    value = obj.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ShapeError(key, "a boolean", value)
    return value
