from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from nixhealth.core.errors import ErrorCode
from nixhealth.core.result import Err
from nixhealth.core.snapshot import FlakeUrl, Snapshot
from nixhealth.output.console import ConsoleProtocol, RichConsole
from nixhealth.services.checkers import HealthConfig
from nixhealth.services.health import load_health_config
from nixhealth.services.snapshot import gather_snapshot


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: HealthConfig
    snapshot: Snapshot
    project: FlakeUrl | None
    console: ConsoleProtocol


def resolve_project(flake: str | None, cwd: Path | None = None) -> FlakeUrl | None:
    """The project to check: the argument, else the current directory if it is a flake."""
    if flake is not None:
        return FlakeUrl(flake.strip())
    cwd = cwd or Path.cwd()
    if (cwd / "flake.nix").is_file():
        return FlakeUrl(str(cwd))
    return None


def build_context(flake: str | None = None, config_path: Path | None = None) -> CLIContext:
    console = RichConsole()
    project = resolve_project(flake)

    # Nix is needed before the project flake can be evaluated for its config
    snapshot_result = gather_snapshot()
    if isinstance(snapshot_result, Err):
        error = snapshot_result.error
        console.error(error.message, hint=error.hint)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_health_config(config_path, project)
    if isinstance(config_result, Err):
        console.error(str(config_result.error))
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(
        config=config_result.value,
        snapshot=snapshot_result.value,
        project=project,
        console=console,
    )
