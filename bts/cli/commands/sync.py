"""Sync command - regenerate artifacts from the upstream repositories."""

from __future__ import annotations

from pathlib import Path

import typer

from bts import __version__
from bts.cli.context import build_context
from bts.cli.questions import make_ask
from bts.core.result import Err, Ok
from bts.core.sync_type import SyncType
from bts.output.console import Style
from bts.output.errors import print_sync_error, sync_error_exit_code
from bts.services.sync import SyncOptions, SyncService


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def sync(
    sync_type: SyncType | None = typer.Option(
        None,
        "--sync-type",
        help="What to regenerate (frontend | backend)",
        case_sensitive=False,
    ),
    schema_repo: str | None = typer.Option(None, "--schema-repo", help="Schema repository URL"),
    guidewire_repo: str | None = typer.Option(
        None,
        "--guidewire-repo",
        help="Guidewire repository URL",
    ),
    schema_hash: str | None = typer.Option(None, "--schema-hash", help="Schema revision to use"),
    guidewire_hash: str | None = typer.Option(
        None,
        "--guidewire-hash",
        help="Guidewire revision to use",
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to bts.toml"),
    no_input: bool = typer.Option(False, "--no-input", help="Never prompt; use fallbacks"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    """Clone the upstream repositories, regenerate artifacts, clean up."""
    ctx = build_context(config)

    service = SyncService(
        config=ctx.config,
        console=ctx.console,
        root=ctx.root,
        ask=make_ask(interactive=not no_input),
    )
    options = SyncOptions(
        sync_type=sync_type.value if sync_type is not None else None,
        schema_repo=schema_repo,
        guidewire_repo=guidewire_repo,
        schema_hash=schema_hash,
        guidewire_hash=guidewire_hash,
    )

    match service.run(options):
        case Err(e):
            ctx.console.newline()
            print_sync_error(e, ctx.console)
            raise typer.Exit(code=sync_error_exit_code(e))
        case Ok(report):
            ctx.console.newline()
            for warning in report.warnings:
                ctx.console.print(f"left behind: {warning.path}", Style.DIM)
            ctx.console.success(
                f"{report.sync_type.value} sync complete ({len(report.artifacts)} artifacts)"
            )
