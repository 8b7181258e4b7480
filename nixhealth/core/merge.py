"""Structural merge of partially specified documents."""

from __future__ import annotations

from collections.abc import Mapping

from .structured import StrDict, as_str_dict

__all__ = ["deep_merge"]


def deep_merge(base: Mapping[str, object], override: Mapping[str, object]) -> StrDict:
    """Return a new document with ``override`` merged onto ``base``.

    Keys present in ``override`` win. When both sides hold a table for the
    same key, the tables are merged recursively, so an override such as
    ``{"nix-version": {"min-required": "2.17.0"}}`` keeps every other
    default of the ``nix-version`` table. Lists and scalars are replaced,
    never concatenated. Neither input is modified.
    """
    merged: StrDict = dict(base)
    for key, value in override.items():
        base_table = as_str_dict(merged.get(key))
        override_table = as_str_dict(value)
        if base_table is not None and override_table is not None:
            merged[key] = deep_merge(base_table, override_table)
        else:
            merged[key] = value
    return merged
