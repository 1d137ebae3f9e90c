from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from bts.core.config import CONFIG_FILENAME, Config, load_config, load_config_or_default
from bts.core.errors import ErrorCode
from bts.core.result import Err
from bts.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol


def build_context(config_path: Path | None = None, *, root: Path | None = None) -> CLIContext:
    """Resolve the project root and load its configuration.

    An explicit `config_path` must exist; the default `bts.toml` is optional.
    """
    project_root = (root or Path.cwd()).resolve()

    if config_path is not None:
        result = load_config(config_path.expanduser())
    else:
        result = load_config_or_default(project_root / CONFIG_FILENAME)

    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(root=project_root, config=result.value, console=RichConsole())
