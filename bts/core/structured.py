"""Helpers for reading untyped TOML data.

Used at the configuration boundary: they validate shapes at runtime and
narrow types for the checker.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


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


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def unknown_keys(table: Mapping[str, object], allowed: frozenset[str]) -> list[str]:
    """Keys present in `table` that are not in `allowed`, sorted."""
    return sorted(k for k in table if k not in allowed)


def wrong_type_keys(table: Mapping[str, object], keys: frozenset[str]) -> list[str]:
    """Keys of `table` among `keys` whose value is not a string, sorted."""
    return sorted(k for k in keys if k in table and not isinstance(table[k], str))
