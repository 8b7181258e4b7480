"""Human readable byte sizes for resource thresholds."""

from __future__ import annotations

import re

__all__ = ["parse_size", "format_size"]

_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
}

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$")


def parse_size(value: object) -> int:
    """Parse a size given as bytes (int) or text such as ``"8GB"``.

    Decimal (``KB``, ``MB``, ``GB``, ``TB``) and binary (``KiB`` ...)
    units are accepted, case-insensitively.

    Raises:
        ValueError: For negative numbers, unknown units or other types.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid size {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"size must not be negative: {value}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid size {value!r}")

    match = _SIZE_RE.match(value)
    if not match:
        raise ValueError(f"invalid size '{value}'")
    number, unit = match.groups()
    factor = _UNITS.get(unit.lower())
    if factor is None:
        raise ValueError(f"unknown size unit '{unit}' in '{value}'")
    return int(float(number) * factor)


def format_size(size: int) -> str:
    """Format bytes using decimal units (``1.0 TB``, ``512.0 MB``)."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1000:
            return f"{value:.1f} {unit}" if unit != "B" else f"{size} B"
        value /= 1000
    return f"{value:.1f} TB"
