"""Loading of health-check override documents.

An override document is a TOML or JSON file whose top-level keys name
check units (``nix-version``, ``caches``, ...). This module only reads
and validates the shape of the file; turning it into typed unit
configuration happens in ``nixhealth.services.checkers.registry``.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict

__all__ = [
    "CONFIG_FILENAMES",
    "ConfigError",
    "find_config",
    "load_document",
]

# Looked up, in order, in the project directory
CONFIG_FILENAMES = ("nix-health.toml", "nix-health.json")

# Documents may nest their settings under this table
_WRAPPER_KEY = "nix-health"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when an override document cannot be loaded or validated."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


def _parse(path: Path) -> Result[object, ConfigError]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError("Config file not found", path=path))
    except PermissionError:
        return Err(ConfigError("Permission denied", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    if path.suffix == ".json":
        try:
            return Ok(json.loads(content))
        except json.JSONDecodeError as e:
            return Err(ConfigError(f"Invalid JSON: {e}", path=path))

    try:
        return Ok(tomllib.loads(content))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))


def load_document(path: Path) -> Result[StrDict, ConfigError]:
    """Load an override document (``.json`` as JSON, anything else as TOML).

    A document whose root holds a single ``nix-health`` table is unwrapped,
    so both of these are equivalent:

        [caches]
        required = ["https://cache.nixos.org"]

        [nix-health.caches]
        required = ["https://cache.nixos.org"]
    """
    parsed = _parse(path)
    if isinstance(parsed, Err):
        return parsed

    data = as_str_dict(parsed.value)
    if data is None:
        return Err(ConfigError("Config root must be a table/object", path=path))

    wrapped = as_str_dict(data.get(_WRAPPER_KEY))
    if wrapped is not None:
        return Ok(wrapped)
    return Ok(data)


def find_config(project_dir: Path) -> Path | None:
    """Return the first override document present in ``project_dir``."""
    for name in CONFIG_FILENAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None
