"""Error values of a sync run.

Each failure kind is a frozen dataclass carrying what the user needs to see;
`SyncError` is the union the orchestrator returns. `CleanupWarning` is not
part of the union: a residual clone folder never fails a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InvalidSyncType:
    value: str
    allowed: tuple[str, ...]

    @property
    def message(self) -> str:
        options = " or ".join(f'"{a}"' for a in self.allowed)
        return f'Invalid sync type "{self.value}". Valid options are {options}.'


@dataclass(frozen=True, slots=True)
class CloneError:
    nickname: str
    url: str
    reason: str

    @property
    def message(self) -> str:
        return f"failed to clone {self.nickname} ({self.url}): {self.reason}"


@dataclass(frozen=True, slots=True)
class CheckoutError:
    nickname: str
    revision: str
    reason: str

    @property
    def message(self) -> str:
        return f"failed to check out {self.revision!r} in {self.nickname}: {self.reason}"


@dataclass(frozen=True, slots=True)
class SchemaStitchError:
    source_dir: Path
    fragments: tuple[Path, ...]
    reason: str

    @property
    def message(self) -> str:
        return (
            f"could not stitch {len(self.fragments)} schema fragment(s) "
            f"from {self.source_dir}: {self.reason}"
        )


@dataclass(frozen=True, slots=True)
class SpecNotFoundError:
    path: Path

    @property
    def message(self) -> str:
        return f"input not found: {self.path}"


@dataclass(frozen=True, slots=True)
class ConversionError:
    source: Path
    reason: str

    @property
    def message(self) -> str:
        return f"conversion of {self.source} failed: {self.reason}"


@dataclass(frozen=True, slots=True)
class SchemaValidationError:
    schema_path: Path
    problems: tuple[str, ...]

    @property
    def message(self) -> str:
        return f"schema {self.schema_path} is invalid: " + "; ".join(self.problems)


@dataclass(frozen=True, slots=True)
class ArtifactWriteError:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"could not write {self.path}: {self.reason}"


@dataclass(frozen=True, slots=True)
class CleanupWarning:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"could not fully remove {self.path}: {self.reason}"


RepoError = CloneError | CheckoutError

GenerationError = (
    SchemaStitchError
    | SpecNotFoundError
    | ConversionError
    | SchemaValidationError
    | ArtifactWriteError
)

SyncError = InvalidSyncType | RepoError | GenerationError
