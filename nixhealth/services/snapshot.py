"""Gathering the environment snapshot.

Everything the checks look at is collected here, once, before any check
runs. Failing to learn about Nix itself aborts the run; host facts that
cannot be determined (memory, disk, direnv) are recorded as unknown and
left for the checks to report.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from nixhealth.core.result import Err, Ok, Result
from nixhealth.core.snapshot import (
    Arch,
    DirenvInfo,
    HostInfo,
    NixConfig,
    NixInfo,
    Snapshot,
)
from nixhealth.core.structured import as_str_dict
from nixhealth.core.version import Version
from nixhealth.platform.detection import detect_arch, detect_nix_system
from nixhealth.platform.process import CommandRunner, DefaultCommandRunner, run

__all__ = [
    "SnapshotError",
    "gather_direnv_info",
    "gather_host_info",
    "gather_nix_info",
    "gather_snapshot",
]

logger = logging.getLogger(__name__)

_NIX_STORE = Path("/nix")
_NIX_COMMAND = ["nix", "--extra-experimental-features", "nix-command"]


@dataclass(frozen=True, slots=True)
class SnapshotError:
    """Error when the environment snapshot cannot be gathered."""

    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


def gather_nix_info(runner: CommandRunner) -> Result[NixInfo, SnapshotError]:
    """Query the installed Nix for its version and effective config."""
    version_result = run(["nix", "--version"], runner=runner)
    if isinstance(version_result, Err):
        return Err(
            SnapshotError(
                f"Unable to run nix: {version_result.error}",
                hint="Install Nix: https://nixos.org/download",
            )
        )
    version = Version.from_output(version_result.value)
    if version is None:
        return Err(SnapshotError(f"Unable to parse nix version from: {version_result.value!r}"))

    config_result = run([*_NIX_COMMAND, "show-config", "--json"], runner=runner)
    if isinstance(config_result, Err):
        return Err(SnapshotError(f"Unable to read nix config: {config_result.error}"))
    try:
        data = as_str_dict(json.loads(config_result.value))
    except json.JSONDecodeError as e:
        return Err(SnapshotError(f"nix show-config printed invalid JSON: {e}"))
    if data is None:
        return Err(SnapshotError("nix show-config did not print a JSON object"))

    logger.debug("nix version = %s", version)
    return Ok(NixInfo(version=version, config=NixConfig.from_dict(data)))


def _current_user() -> str | None:
    user = os.environ.get("USER")
    if user:
        return user
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return None


def _user_groups(user: str) -> tuple[str, ...]:
    """Names of the groups ``user`` belongs to (empty on Windows)."""
    if sys.platform.startswith("win"):
        return ()
    import grp

    try:
        gids = os.getgrouplist(user, os.getgid())
    except OSError:
        gids = os.getgroups()
    names: list[str] = []
    for gid in gids:
        try:
            names.append(grp.getgrgid(gid).gr_name)
        except KeyError:
            continue
    return tuple(dict.fromkeys(names))


def _total_memory(runner: CommandRunner) -> int | None:
    if sys.platform == "darwin":
        result = run(["sysctl", "-n", "hw.memsize"], runner=runner)
        if isinstance(result, Ok) and result.value.strip().isdigit():
            return int(result.value.strip())
        return None
    try:
        return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return None


def _total_disk_space() -> int | None:
    path = _NIX_STORE if _NIX_STORE.exists() else Path("/")
    try:
        return shutil.disk_usage(path).total
    except OSError:
        return None


def _host_arch(runner: CommandRunner) -> Arch:
    """CPU architecture of the machine, not of this process.

    Under Rosetta ``platform.machine()`` reports ``x86_64`` on Apple Silicon;
    ``hw.optional.arm64`` is 1 on that hardware even for translated processes
    and is unknown to Intel Macs.
    """
    arch = detect_arch()
    if sys.platform != "darwin" or arch == Arch.ARM64:
        return arch
    result = run(["sysctl", "-n", "hw.optional.arm64"], runner=runner)
    if isinstance(result, Ok) and result.value.strip() == "1":
        logger.debug("process is translated by Rosetta on arm64 hardware")
        return Arch.ARM64
    return arch


def gather_host_info(runner: CommandRunner) -> Result[HostInfo, SnapshotError]:
    user = _current_user()
    if user is None:
        return Err(SnapshotError("Unable to determine the current user", hint="Set $USER"))
    host = HostInfo(
        current_user=user,
        current_user_groups=_user_groups(user),
        os=detect_nix_system(),
        arch=_host_arch(runner),
        total_memory=_total_memory(runner),
        total_disk_space=_total_disk_space(),
    )
    logger.debug("host = %s", host)
    return Ok(host)


def gather_direnv_info(runner: CommandRunner) -> DirenvInfo | None:
    """Locate direnv and ask for its version; None if it is not on PATH."""
    path = shutil.which("direnv")
    if path is None:
        return None
    version = run([path, "version"], runner=runner).map(Version.from_output).unwrap_or(None)
    return DirenvInfo(bin_path=Path(path), version=version)


def gather_snapshot(runner: CommandRunner | None = None) -> Result[Snapshot, SnapshotError]:
    """Gather the full environment snapshot for one run."""
    runner = runner or DefaultCommandRunner()
    nix = gather_nix_info(runner)
    if isinstance(nix, Err):
        return nix
    host = gather_host_info(runner)
    if isinstance(host, Err):
        return host
    return Ok(
        Snapshot(
            nix=nix.value,
            host=host.value,
            direnv=gather_direnv_info(runner),
        )
    )
