from __future__ import annotations

from pathlib import Path

import typer

from nixhealth import __version__
from nixhealth.cli.context import build_context
from nixhealth.core.errors import ErrorCode
from nixhealth.output.log import setup_logging
from nixhealth.output.report import print_report, report_json
from nixhealth.services.checkers import Verdict
from nixhealth.services.health import HealthService


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))


def health(
    flake: str | None = typer.Argument(
        None,
        help="Project to check (flake URL or path). Defaults to the current directory if it has a flake.nix.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Health config override (TOML or JSON). Defaults to nix-health.toml in the project.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Check the health of your Nix install and suggest fixes."""
    setup_logging(verbose)
    ctx = build_context(flake=flake, config_path=config)

    service = HealthService(config=ctx.config, snapshot=ctx.snapshot, project=ctx.project)
    report = service.run()

    if json_output:
        typer.echo(report_json(report))
    else:
        print_report(report, ctx.console)

    if report.verdict == Verdict.HARD_FAIL:
        raise typer.Exit(code=int(ErrorCode.CHECK_FAILED))
