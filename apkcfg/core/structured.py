"""Helpers for reading untyped TOML tables.

TOML is parsed into plain dicts; these helpers narrow values at the boundary
and report wrong types instead of letting them leak into the build inputs.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


class FieldTypeError(ValueError):
    """A config key holds a value of the wrong type."""

    def __init__(self, key: str, expected: str, value: object) -> None:
        super().__init__(f"'{key}' must be {expected}, got {type(value).__name__}")
        self.key = key


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table; a non-table value is an error."""
    value = table.get(key)
    if value is None:
        return None
    data = as_str_dict(value)
    if data is None:
        raise FieldTypeError(key, "a table", value)
    return data


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing or empty after stripping.
    """
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise FieldTypeError(key, "a string", value)
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    if value is None:
        return None
    # bool is an int subclass; `min = true` is a typo, not a level
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldTypeError(key, "an integer", value)
    return value


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise FieldTypeError(key, "a boolean", value)
    return value


def get_str_list(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise FieldTypeError(key, "a list of strings", value)
    items = cast(list[object], value)
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise FieldTypeError(key, "a list of strings", item)
        out.append(item)
    return tuple(out)
