"""Operating system and architecture detection.

Detection is cached: the answers do not change during a process lifetime.
"""

from __future__ import annotations

import os as _os
import platform as _platform
import sys as _sys
from functools import lru_cache
from pathlib import Path

from nixhealth.core.snapshot import Arch, NixSystem

__all__ = [
    "NIX_CONF_PATH",
    "detect_arch",
    "detect_nix_system",
]

NIX_CONF_PATH = Path("/etc/nix/nix.conf")
_OS_RELEASE_PATH = Path("/etc/os-release")


def _read_os_release(path: Path = _OS_RELEASE_PATH) -> dict[str, str]:
    """Parse /etc/os-release into a dict (empty if unreadable)."""
    try:
        content = path.read_text()
    except OSError:
        return {}

    fields: dict[str, str] = {}
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key.strip()] = value.strip().strip('"')
    return fields


def _is_symlink(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError:
        return False


def classify_nix_system(
    sys_platform: str,
    os_release: dict[str, str],
    nix_conf_is_symlink: bool,
) -> NixSystem:
    """Classify the host from raw facts.

    nix-darwin, like NixOS, manages /etc/nix/nix.conf as a symlink into the
    store; that is how a nix-darwin Mac is told apart from a plain one.
    """
    if sys_platform.startswith("linux"):
        if os_release.get("ID") == "nixos":
            return NixSystem.NIXOS
        return NixSystem.OTHER_LINUX
    if sys_platform.startswith("darwin"):
        if nix_conf_is_symlink:
            return NixSystem.NIX_DARWIN
        return NixSystem.OTHER_MACOS
    return NixSystem.OTHER


@lru_cache(maxsize=1)
def detect_nix_system() -> NixSystem:
    """Detect how Nix is installed on this host (cached)."""
    return classify_nix_system(
        _sys.platform.lower(),
        _read_os_release(),
        _is_symlink(NIX_CONF_PATH),
    )


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the CPU architecture this process runs as (cached)."""
    # NOTE: avoid platform.machine() on Windows, it may query WMI.
    if _sys.platform.startswith("win"):
        machine = (
            _os.environ.get("PROCESSOR_ARCHITEW6432")
            or _os.environ.get("PROCESSOR_ARCHITECTURE")
            or ""
        ).lower()
    else:
        machine = _platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN
