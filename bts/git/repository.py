"""Transient git repositories.

A `TransientRepository` owns one ephemeral clone of a remote repository:
it is cloned into a local folder, optionally switched to a revision, read by
the generators and then removed. Removal is idempotent and best-effort, so a
run can always clean up, and the next run can always clean a folder left
behind by an interrupted one.

Usage:
    repo = TransientRepository(spec, root=project_root, console=console)
    match repo.clone():
        case Err(e):
            console.error(e.message)
        case Ok(handle):
            repo.checkout("v2")
            ...
    repo.cleanup()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import CheckoutError, CleanupWarning, CloneError
from bts.output.console import ConsoleProtocol, Style
from bts.platform.files import is_empty_dir, remove_tree
from bts.platform.process import ProcessError
from bts.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Never block on a credential prompt in the middle of a sync.
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}

__all__ = [
    "GitError",
    "RepositoryHandle",
    "RepositorySpec",
    "TransientRepository",
    "remote_latest_revision",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class RepositorySpec:
    """Which remote repository, and where it is materialized locally."""

    url: str
    local_folder: Path
    nickname: str


@dataclass(slots=True)
class RepositoryHandle:
    """Runtime state of a transient clone."""

    spec: RepositorySpec
    cloned: bool = False
    current_revision: str | None = None

    def source_dir(self) -> Path:
        """Folder to read from. Only valid once the clone exists.

        Raises:
            RuntimeError: The repository has not been cloned (or was removed).
        """
        if not self.cloned:
            raise RuntimeError(f"repository {self.spec.nickname} is not cloned")
        return self.spec.local_folder


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


def remote_latest_revision(url: str, *, cwd: Path) -> Result[str, GitError]:
    """Hash of the default branch tip of a remote, without cloning it.

    Runs `git ls-remote <url> HEAD`.
    """
    result = run_process(
        ["git", "ls-remote", url, "HEAD"],
        cwd=cwd,
        env=_GIT_ENV,
        timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
    )
    match result:
        case Err(e):
            return Err(_git_error("ls-remote", e, "ls-remote failed"))
        case Ok(stdout):
            for line in stdout.splitlines():
                parts = line.split()
                if len(parts) == 2 and parts[1] == "HEAD":
                    return Ok(parts[0])
            return Err(GitError(command="ls-remote", message=f"no HEAD advertised by {url}"))


class TransientRepository:
    """One ephemeral clone: clone, checkout, inspect, remove.

    Attributes:
        handle: Current state of the clone
    """

    def __init__(self, spec: RepositorySpec, *, root: Path, console: ConsoleProtocol) -> None:
        """Initialize without touching the filesystem.

        Args:
            spec: Repository to clone
            root: Working directory for git commands (the project root)
            console: Progress output
        """
        self.handle = RepositoryHandle(spec=spec)
        self._root = root
        self._console = console

    @property
    def spec(self) -> RepositorySpec:
        return self.handle.spec

    @property
    def path(self) -> Path:
        folder = self.spec.local_folder
        return folder if folder.is_absolute() else self._root / folder

    def clone(self) -> Result[RepositoryHandle, CloneError]:
        """Clone the remote into the local folder.

        The folder must not exist or be empty; callers clean it first.
        """
        spec = self.spec
        dest = self.path
        if dest.exists() and not is_empty_dir(dest):
            return Err(
                CloneError(
                    nickname=spec.nickname,
                    url=spec.url,
                    reason=f"target folder {dest} already exists and is not empty",
                )
            )

        self._console.print(f"clone {spec.nickname} <- {spec.url}", Style.DIM)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(CloneError(nickname=spec.nickname, url=spec.url, reason=str(e)))

        result = run_process(
            ["git", "clone", "--quiet", spec.url, str(dest)],
            cwd=self._root,
            env=_GIT_ENV,
            timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                CloneError(
                    nickname=spec.nickname,
                    url=spec.url,
                    reason=result.error.detail,
                )
            )

        self.handle.cloned = True
        self.handle.current_revision = None
        return Ok(self.handle)

    def checkout(self, revision: str | None) -> Result[None, CheckoutError]:
        """Switch the working tree to `revision`; None keeps the default branch tip."""
        if revision is None:
            return Ok(None)

        spec = self.spec
        if not self.handle.cloned:
            return Err(
                CheckoutError(
                    nickname=spec.nickname,
                    revision=revision,
                    reason="repository is not cloned",
                )
            )

        self._console.print(f"checkout {spec.nickname} @ {revision}", Style.DIM)
        result = self._run(["checkout", "--quiet", revision])
        if isinstance(result, Err):
            return Err(
                CheckoutError(
                    nickname=spec.nickname,
                    revision=revision,
                    reason=result.error.detail,
                )
            )

        self.handle.current_revision = revision
        return Ok(None)

    def latest_revision(self) -> Result[str, GitError]:
        """Hash of the most recent commit reachable from the current tip."""
        if not self.handle.cloned:
            return Err(GitError(command="log", message=f"{self.spec.nickname} is not cloned"))

        result = self._run(["log", "-1", "--format=%H"])
        match result:
            case Err(e):
                return Err(_git_error("log", e, "git log failed"))
            case Ok(stdout):
                value = stdout.strip()
                if not value:
                    return Err(GitError(command="log", message="repository has no commits"))
                return Ok(value)

    def cleanup(self) -> CleanupWarning | None:
        """Remove the local folder. Safe to call any number of times.

        Returns a warning when the folder could not be fully removed; the
        next run's pre-clone cleanup gets another chance at it.
        """
        dest = self.path
        self.handle.cloned = False
        self.handle.current_revision = None

        if not dest.exists():
            return None

        if dest.resolve() in (self._root.resolve(), *self._root.resolve().parents):
            warning = CleanupWarning(path=dest, reason="refusing to remove the project root")
            self._console.warning(warning.message)
            return warning

        self._console.print(f"remove {self.spec.nickname} ({dest})", Style.DIM)
        error = remove_tree(dest)
        if error is None and not dest.exists():
            return None

        warning = CleanupWarning(
            path=dest,
            reason=str(error) if error is not None else "folder still present",
        )
        self._console.warning(warning.message)
        return warning

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command inside the clone."""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self._root,
            env=_GIT_ENV,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
