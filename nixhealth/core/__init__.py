"""Core domain types and logic."""

from .config import ConfigError, find_config, load_document
from .errors import ErrorCode
from .merge import deep_merge
from .result import Err, Ok, Result, is_err, is_ok
from .snapshot import (
    Arch,
    ConfigVal,
    DirenvInfo,
    FlakeUrl,
    HostInfo,
    NixConfig,
    NixInfo,
    NixSystem,
    Snapshot,
)
from .version import Version

__all__ = [
    # config
    "ConfigError",
    "find_config",
    "load_document",
    "deep_merge",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # snapshot
    "Arch",
    "ConfigVal",
    "DirenvInfo",
    "FlakeUrl",
    "HostInfo",
    "NixConfig",
    "NixInfo",
    "NixSystem",
    "Snapshot",
    "Version",
]
