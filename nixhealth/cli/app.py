from __future__ import annotations

import typer

from nixhealth.cli.commands.health import health

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)

app.command()(health)


def main() -> None:
    app()
