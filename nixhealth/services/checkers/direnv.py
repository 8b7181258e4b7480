# SPDX-License-Identifier: MIT
"""direnv integration check.

Runs up to three stages, each only when the previous one passed:

1. direnv is recent enough for ``direnv status --json``
2. direnv is installed
3. the project's ``.envrc`` is allowed (only for a local project with one)

A failing stage ends the unit: later stages are left out of the report
rather than reported as failures, since they cannot be answered.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from nixhealth.core.snapshot import DirenvInfo, FlakeUrl, Snapshot
from nixhealth.core.structured import as_str_dict, get_str
from nixhealth.core.version import Version
from nixhealth.platform.process import DEFAULT_TIMEOUT, CommandRunner, DefaultCommandRunner

from .base import Outcome
from .common import read_switches

logger = logging.getLogger(__name__)

INSTALL_URL = "https://nixos.asia/en/direnv"

# Value of state.foundRC.allowed in `direnv status --json` for an allowed .envrc
_ALLOWED = 0


@dataclass(frozen=True, slots=True)
class Direnv:
    """Check that direnv is installed, recent, and allowed in the project.

    Attributes:
        min_version: Oldest direnv that supports ``status --json``
        timeout: Seconds ``direnv status`` may take
        runner: Command runner for the status query
    """

    KEY: ClassVar[str] = "direnv"
    TITLE: ClassVar[str] = "Direnv"

    min_version: Version = Version(2, 33, 0)
    enable: bool = True
    required: bool = False
    timeout: float = DEFAULT_TIMEOUT
    runner: CommandRunner = field(
        default_factory=DefaultCommandRunner, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> Direnv:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        min_text = get_str(table, "min-version")
        return cls(
            min_version=Version.parse(min_text) if min_text else defaults.min_version,
            enable=enable,
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enable": self.enable,
            "required": self.required,
            "min-version": str(self.min_version),
        }


def _version_outcome(unit: Direnv, info: DirenvInfo) -> Outcome:
    title = "Direnv version"
    if info.version is None:
        return Outcome.failing(
            title,
            f"direnv = {info.bin_path}",
            "Unable to determine the direnv version",
            f"Check that `{info.bin_path} version` works",
            required=unit.required,
        )
    text = f"direnv version = {info.version}"
    if info.version >= unit.min_version:
        return Outcome.passing(title, text, required=unit.required)
    return Outcome.failing(
        title,
        text,
        f"direnv {info.version} is too old; we require at least {unit.min_version}",
        f"Upgrade direnv, see {INSTALL_URL}",
        required=unit.required,
    )


def _installed_outcome(unit: Direnv, info: DirenvInfo | None) -> Outcome:
    title = "Direnv installed"
    if info is None:
        return Outcome.failing(
            title,
            "direnv binary = not found",
            "direnv is not installed",
            f"Install direnv, see {INSTALL_URL}",
            required=unit.required,
        )
    return Outcome.passing(title, f"direnv binary = {info.bin_path}", required=unit.required)


def direnv_allowed(unit: Direnv, project_dir: Path) -> bool:
    """Ask direnv whether the .envrc in ``project_dir`` is allowed.

    Raises:
        OSError: If direnv cannot be started.
        subprocess.TimeoutExpired: If direnv does not answer in time.
        ValueError: If direnv exits non-zero or prints unexpected output.
    """
    proc = unit.runner.run(
        ["direnv", "status", "--json"], cwd=project_dir, timeout=unit.timeout
    )
    if proc.returncode != 0:
        raise ValueError(f"direnv status exited with {proc.returncode}: {proc.stderr.strip()}")
    try:
        status: object = json.loads(proc.stdout)
    except json.JSONDecodeError as e:
        raise ValueError(f"direnv status printed invalid JSON: {e}") from e

    root = as_str_dict(status)
    if root is None:
        raise ValueError("direnv status printed unexpected JSON")
    state = as_str_dict(root.get("state")) or {}
    # foundRC is null when the directory has no .envrc in scope
    rc = as_str_dict(state.get("foundRC"))
    if rc is None:
        return False
    return rc.get("allowed") == _ALLOWED


def _allowed_outcome(unit: Direnv, project_dir: Path) -> Outcome:
    title = "Direnv allowed"
    info = f"Local flake: {project_dir}"
    suggestion = f"Run `direnv allow` under `{project_dir}`"
    try:
        allowed = direnv_allowed(unit, project_dir)
    except subprocess.TimeoutExpired:
        return Outcome.failing(
            title,
            info,
            f"Unable to check direnv status: timed out after {unit.timeout}s",
            suggestion,
            required=unit.required,
        )
    except (OSError, ValueError) as e:
        logger.debug("direnv status failed in %s: %s", project_dir, e)
        return Outcome.failing(
            title,
            info,
            f"Unable to check direnv status: {e}",
            suggestion,
            required=unit.required,
        )

    if allowed:
        return Outcome.passing(title, info, required=unit.required)
    return Outcome.failing(
        title, info, "direnv is not active", suggestion, required=unit.required
    )


def check_direnv(
    unit: Direnv, snapshot: Snapshot, project: FlakeUrl | None
) -> tuple[Outcome, ...]:
    outcomes: list[Outcome] = []
    info = snapshot.direnv

    # Stage 1 needs a binary to ask; a missing one is reported by stage 2
    if info is not None:
        version = _version_outcome(unit, info)
        outcomes.append(version)
        if version.failed:
            return tuple(outcomes)

    installed = _installed_outcome(unit, info)
    outcomes.append(installed)
    if installed.failed:
        return tuple(outcomes)

    project_dir = project.as_local_path() if project is not None else None
    if project_dir is not None and (project_dir / ".envrc").is_file():
        outcomes.append(_allowed_outcome(unit, project_dir))

    return tuple(outcomes)
