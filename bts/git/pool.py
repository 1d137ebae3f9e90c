"""Scoped acquisition of a set of transient repositories.

`RepositorySet` is a context manager: every repository registered through it
is removed when the block exits, whether the block succeeded, returned an
error or raised. Every folder is registered and cleaned with `prepare`
before the first clone; repositories are then cloned one at a time with
`materialize` and released in reverse order of registration.

Usage:
    with RepositorySet(factory) as repos:
        repo = repos.prepare(spec)
        match repos.materialize(repo, revision="v2"):
            case Err(e):
                return Err(e)
            case Ok(repo):
                generate(repo.handle.source_dir())
"""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import CleanupWarning, RepoError

from .repository import RepositorySpec, TransientRepository

__all__ = ["RepositoryFactory", "RepositorySet"]

RepositoryFactory = Callable[[RepositorySpec], TransientRepository]


class RepositorySet:
    def __init__(self, factory: RepositoryFactory) -> None:
        self._factory = factory
        self._repos: list[TransientRepository] = []
        self.warnings: list[CleanupWarning] = []
        self._released = False

    def __enter__(self) -> RepositorySet:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release_all()

    @property
    def repositories(self) -> tuple[TransientRepository, ...]:
        return tuple(self._repos)

    def prepare(self, spec: RepositorySpec) -> TransientRepository:
        """Register a repository and clean its target folder.

        Registration happens before the clone so a half-finished clone is
        still removed on release.
        """
        repo = self._factory(spec)
        self._repos.append(repo)
        self._note(repo.cleanup())
        return repo

    def materialize(
        self,
        repo: TransientRepository,
        *,
        revision: str | None,
    ) -> Result[TransientRepository, RepoError]:
        """Clone and check out a repository registered with `prepare`."""
        cloned = repo.clone()
        if isinstance(cloned, Err):
            return cloned

        checked_out = repo.checkout(revision)
        if isinstance(checked_out, Err):
            return checked_out

        return Ok(repo)

    def release_all(self) -> list[CleanupWarning]:
        """Remove every registered repository, exactly once."""
        if self._released:
            return self.warnings
        self._released = True
        for repo in reversed(self._repos):
            self._note(repo.cleanup())
        return self.warnings

    def _note(self, warning: CleanupWarning | None) -> None:
        if warning is not None:
            self.warnings.append(warning)
