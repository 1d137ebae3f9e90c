"""Sync orchestration: resolve settings, acquire clones, generate, clean up.

A run moves through these states:

    IDLE -> CONFIG_RESOLVED -> REPOS_ACQUIRED -> GENERATING -> CLEANUP -> DONE

and ends in FAILED instead of DONE when any stage fails. An invalid sync
type fails before anything touches the filesystem. Once repositories are
involved, every one of them is removed before the run ends, whatever
happened in between.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from bts.codegen.openapi import OpenApiConverter, SpecConverter
from bts.codegen.targets import GenerationTarget, GeneratorKind, run_target
from bts.core.config import Config, RepoConfig
from bts.core.resolution import Resolution, deferred, fallible, first_non_empty, literal, resolve
from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import CleanupWarning, InvalidSyncType, SyncError
from bts.core.sync_type import SyncType, parse_sync_type
from bts.git.pool import RepositoryFactory, RepositorySet
from bts.git.repository import GitError, RepositorySpec, TransientRepository, remote_latest_revision
from bts.output.console import ConsoleProtocol, Style

__all__ = [
    "Ask",
    "PlannedRepository",
    "RemoteLookup",
    "SyncOptions",
    "SyncPlan",
    "SyncReport",
    "SyncService",
    "SyncState",
]

Ask = Callable[[str], str]
RemoteLookup = Callable[[str], Result[str, GitError]]

SYNC_TYPE_QUESTION = "sync-type"

_REPOSITORIES: dict[SyncType, tuple[str, ...]] = {
    SyncType.frontend: ("schema",),
    SyncType.backend: ("schema", "guidewire"),
}


class SyncState(str, Enum):
    IDLE = "idle"
    CONFIG_RESOLVED = "config-resolved"
    REPOS_ACQUIRED = "repos-acquired"
    GENERATING = "generating"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SyncOptions:
    """Explicit overrides from the command line. None means "not given"."""

    sync_type: str | None = None
    schema_repo: str | None = None
    guidewire_repo: str | None = None
    schema_hash: str | None = None
    guidewire_hash: str | None = None

    def repo_url(self, key: str) -> str | None:
        return self.schema_repo if key == "schema" else self.guidewire_repo

    def repo_hash(self, key: str) -> str | None:
        return self.schema_hash if key == "schema" else self.guidewire_hash


@dataclass(frozen=True, slots=True)
class PlannedRepository:
    spec: RepositorySpec
    revision: Resolution
    config: RepoConfig


@dataclass(frozen=True, slots=True)
class SyncPlan:
    sync_type: SyncType
    repositories: tuple[PlannedRepository, ...]

    def repository(self, nickname: str) -> PlannedRepository:
        return next(r for r in self.repositories if r.spec.nickname == nickname)


@dataclass(frozen=True, slots=True)
class SyncReport:
    """What a successful run produced.

    Attributes:
        sync_type: The resolved sync type
        revisions: Checked-out commit per repository nickname
        artifacts: Written files, in generation order
        warnings: Folders that could not be fully removed
    """

    sync_type: SyncType
    revisions: dict[str, str | None] = field(default_factory=dict)
    artifacts: tuple[Path, ...] = ()
    warnings: tuple[CleanupWarning, ...] = ()


class SyncService:
    """Runs one sync of generated artifacts against upstream repositories.

    Collaborators are injected: `ask` answers a question key with a string
    (empty means "no answer"), `remote_lookup` resolves the default branch
    tip of a URL, `repository_factory` builds transient repositories and
    `converter` turns an OpenAPI document into statements.
    """

    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        root: Path,
        ask: Ask,
        repository_factory: RepositoryFactory | None = None,
        remote_lookup: RemoteLookup | None = None,
        converter: SpecConverter | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._root = root
        self._ask = ask
        self._factory: RepositoryFactory = repository_factory or (
            lambda spec: TransientRepository(spec, root=root, console=console)
        )
        self._remote_lookup: RemoteLookup = remote_lookup or (
            lambda url: remote_latest_revision(url, cwd=root)
        )
        self._converter: SpecConverter = converter or OpenApiConverter()
        self.history: list[SyncState] = [SyncState.IDLE]

    @property
    def state(self) -> SyncState:
        return self.history[-1]

    def _enter(self, state: SyncState) -> None:
        self.history.append(state)

    # Configuration

    def resolve(self, options: SyncOptions) -> Result[SyncPlan, InvalidSyncType]:
        """Resolve sync type, URLs and revisions; no filesystem side effects."""
        default = self._config.default_sync_type
        chosen = resolve(
            literal("flag", options.sync_type),
            deferred("prompt", lambda: self._ask(SYNC_TYPE_QUESTION)),
            literal("config", default.value if default is not None else None),
        )
        allowed = tuple(member.value for member in SyncType)
        if chosen.value is None:
            return Err(InvalidSyncType(value="", allowed=allowed))

        parsed = parse_sync_type(chosen.value)
        if isinstance(parsed, Err):
            return parsed
        sync_type = parsed.value
        self._console.info(f"sync type: {sync_type.value} (from {chosen.source})")

        planned: list[PlannedRepository] = []
        for key in _REPOSITORIES[sync_type]:
            repo_config: RepoConfig = getattr(self._config.repos, key)
            url = first_non_empty(options.repo_url(key), repo_config.url) or repo_config.url
            spec = RepositorySpec(
                url=url,
                local_folder=self._root / repo_config.folder,
                nickname=key,
            )
            revision = self._resolve_revision(key, url, options.repo_hash(key), repo_config.revision)
            planned.append(PlannedRepository(spec=spec, revision=revision, config=repo_config))

        return Ok(SyncPlan(sync_type=sync_type, repositories=tuple(planned)))

    def _resolve_revision(
        self,
        nickname: str,
        url: str,
        flag: str | None,
        default: str | None,
    ) -> Resolution:
        resolution = resolve(
            literal("flag", flag),
            deferred("prompt", lambda: self._ask(f"hash-{nickname}")),
            fallible("remote", lambda: self._remote_lookup(url)),
            literal("config", default),
        )
        for source, error in resolution.failures:
            message = getattr(error, "message", str(error))
            self._console.warning(f"{source} revision lookup for {nickname} failed: {message}")

        if resolution.value is None:
            self._console.info(f"{nickname}: default branch tip")
        else:
            self._console.info(f"{nickname}: {resolution.value} (from {resolution.source})")
        return resolution

    # Generation plan

    def targets(self, plan: SyncPlan) -> list[GenerationTarget]:
        """Ordered generator invocations for the plan's sync type."""
        out_dir = self._root / self._config.output.dir
        operations_dir = self._root / self._config.output.operations
        schema_file = out_dir / "schema.graphql"
        schema_checkout = plan.repository("schema").spec.local_folder

        match plan.sync_type:
            case SyncType.frontend:
                return [
                    GenerationTarget(GeneratorKind.SCAFFOLD, operations_dir, operations_dir),
                    GenerationTarget(GeneratorKind.STITCH, schema_checkout, schema_file),
                    GenerationTarget(
                        GeneratorKind.CONVERT_CLIENT,
                        operations_dir,
                        out_dir / "client_types.py",
                        schema_path=schema_file,
                    ),
                ]
            case SyncType.backend:
                guidewire = plan.repository("guidewire")
                spec_file = guidewire.spec.local_folder / (guidewire.config.spec or "openapi.yaml")
                return [
                    GenerationTarget(GeneratorKind.STITCH, schema_checkout, schema_file),
                    GenerationTarget(
                        GeneratorKind.CONVERT_OPENAPI,
                        spec_file,
                        out_dir / "guidewire_types.py",
                    ),
                    GenerationTarget(
                        GeneratorKind.CONVERT_WITH_RESOLVERS,
                        schema_file,
                        out_dir / "server_types.py",
                    ),
                    GenerationTarget(GeneratorKind.ASSEMBLE, schema_file, out_dir / "schema.json"),
                ]

    # Run

    def run(self, options: SyncOptions) -> Result[SyncReport, SyncError]:
        """Run one sync. Returns the first fatal error, after cleanup."""
        self._console.header("Resolve configuration")
        planned = self.resolve(options)
        if isinstance(planned, Err):
            self._console.error("configuration failed")
            self._enter(SyncState.FAILED)
            return planned
        plan = planned.value
        self._enter(SyncState.CONFIG_RESOLVED)
        self._console.success("configuration resolved")

        with RepositorySet(self._factory) as repos:
            try:
                outcome = self._acquire_and_generate(plan, repos)
            except BaseException:
                self._release(repos)
                self._enter(SyncState.FAILED)
                raise
            warnings = self._release(repos)

        if isinstance(outcome, Err):
            self._enter(SyncState.FAILED)
            return outcome

        revisions, artifacts = outcome.value
        self._enter(SyncState.DONE)
        return Ok(
            SyncReport(
                sync_type=plan.sync_type,
                revisions=revisions,
                artifacts=tuple(artifacts),
                warnings=tuple(warnings),
            )
        )

    def _release(self, repos: RepositorySet) -> list[CleanupWarning]:
        self._enter(SyncState.CLEANUP)
        self._console.header("Cleanup")
        warnings = repos.release_all()
        if not warnings:
            self._console.success("temporary repositories removed")
        return warnings

    def _acquire_and_generate(
        self,
        plan: SyncPlan,
        repos: RepositorySet,
    ) -> Result[tuple[dict[str, str | None], list[Path]], SyncError]:
        self._console.header("Acquire repositories")
        # Clean every target before the first clone.
        prepared = [(planned, repos.prepare(planned.spec)) for planned in plan.repositories]

        revisions: dict[str, str | None] = {}
        for planned, repo in prepared:
            acquired = repos.materialize(repo, revision=planned.revision.value)
            if isinstance(acquired, Err):
                self._console.error(f"{planned.spec.nickname}: acquisition failed")
                return acquired
            match repo.latest_revision():
                case Ok(commit):
                    revisions[planned.spec.nickname] = commit
                    self._console.success(f"{planned.spec.nickname} @ {commit[:12]}")
                case Err(_):
                    revisions[planned.spec.nickname] = planned.revision.value
                    self._console.success(f"{planned.spec.nickname} cloned")
        self._enter(SyncState.REPOS_ACQUIRED)

        self._console.header("Generate artifacts")
        self._enter(SyncState.GENERATING)
        artifacts: list[Path] = []
        for target in self.targets(plan):
            self._console.print(f"{target.label}...", Style.DIM)
            result = run_target(target, console=self._console, converter=self._converter)
            if isinstance(result, Err):
                self._console.error(f"{target.label} failed")
                return result
            artifacts.append(result.value)
            self._console.success(f"{target.label}: {_display(result.value, self._root)}")

        return Ok((revisions, artifacts))


def _display(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
