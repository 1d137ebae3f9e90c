from __future__ import annotations

import typer

from bts.cli.commands.sync import sync

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)

# A single command: typer runs it as `bts-sync [OPTIONS]`.
app.command()(sync)


def main() -> None:
    app()
