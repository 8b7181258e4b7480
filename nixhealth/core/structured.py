"""Helpers for safely working with dynamic (untyped) structures.

Use these at boundaries where we ingest TOML/JSON: override documents and
the output of ``nix show-config --json``. The ``get_*`` helpers return
``None`` when a key is absent; when a key is present with the wrong type
they raise ``ValueError`` so a bad override fails before any check runs.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    value = table.get(key)
    if value is None:
        return None
    nested = as_str_dict(value)
    if nested is None:
        raise ValueError(f"'{key}' must be a table, got {type(value).__name__}")
    return nested


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripping whitespace."""
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")
    return value.strip()


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    """Get a boolean value."""
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}")
    return value


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an integer value (booleans are rejected)."""
    value = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Get a list of strings."""
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list, got {type(value).__name__}")
    items = cast(list[object], value)
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"'{key}' must only contain strings, got {item!r}")
        out.append(item)
    return out
