"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bts.core.errors import ErrorCode
from bts.core.sync_errors import (
    ArtifactWriteError,
    CheckoutError,
    CloneError,
    ConversionError,
    InvalidSyncType,
    SchemaStitchError,
    SchemaValidationError,
    SpecNotFoundError,
    SyncError,
)
from bts.output.console import Style

if TYPE_CHECKING:
    from bts.output.console import ConsoleProtocol

__all__ = ["print_sync_error", "sync_error_exit_code"]


def print_sync_error(error: SyncError, console: ConsoleProtocol) -> None:
    """Print sync error to console with appropriate formatting."""
    console.error(error.message)
    match error:
        case InvalidSyncType():
            console.print("hint: pass --sync-type or set default_sync_type in bts.toml", Style.DIM)
        case CloneError(url=url):
            console.print(f"hint: check that {url} is reachable and you have access", Style.DIM)
        case CheckoutError(revision=revision):
            console.print(f"hint: {revision!r} must be a commit, tag or branch", Style.DIM)
        case SchemaStitchError(fragments=fragments):
            for fragment in fragments:
                console.print(f"  {fragment}", Style.DIM)
        case SchemaValidationError(problems=problems) if len(problems) > 1:
            for problem in problems:
                console.print(f"  {problem}", Style.DIM)
        case SpecNotFoundError(path=path) if path.suffix != ".graphql":
            console.print("hint: set repos.guidewire.spec in bts.toml", Style.DIM)
        case ConversionError() | SchemaValidationError() | SpecNotFoundError() | ArtifactWriteError():
            pass


def sync_error_exit_code(error: SyncError) -> int:
    """Get exit code for a sync error."""
    match error:
        case InvalidSyncType():
            return int(ErrorCode.USER_ERROR)
        case CloneError() | CheckoutError():
            return int(ErrorCode.NETWORK_ERROR)
        case SchemaStitchError() | ConversionError() | SchemaValidationError():
            return int(ErrorCode.CODEGEN_ERROR)
        case SpecNotFoundError() | ArtifactWriteError():
            return int(ErrorCode.IO_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.ENV_ERROR)
