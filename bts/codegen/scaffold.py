from __future__ import annotations

from pathlib import Path

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import ArtifactWriteError
from bts.output.console import ConsoleProtocol, Style

OPERATION_KINDS = ("queries", "mutations")


def scaffold_operations(
    operations_dir: Path,
    *,
    console: ConsoleProtocol,
) -> Result[Path, ArtifactWriteError]:
    """Create the operations folder and its per-kind subfolders if missing."""
    for directory in (operations_dir, *(operations_dir / kind for kind in OPERATION_KINDS)):
        if directory.is_dir():
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(ArtifactWriteError(path=directory, reason=str(e)))
        console.print(f"created {directory}", Style.DIM)
    return Ok(operations_dir)
