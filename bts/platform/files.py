"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

__all__ = ["atomic_write_text", "is_empty_dir", "remove_tree"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    The previous content of `path` survives any failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def is_empty_dir(path: Path) -> bool:
    return path.is_dir() and next(path.iterdir(), None) is None


def _remove_readonly(func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Retry once after making the entry writable (git pack files are read-only)."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
        func(path)
    else:
        raise exc


def remove_tree(path: Path) -> OSError | None:
    """Remove a directory tree, best effort.

    Missing paths are fine. Returns the error that prevented a full removal
    instead of raising it.
    """
    if not path.exists() and not path.is_symlink():
        return None
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path, onexc=_remove_readonly)
        else:
            path.unlink(missing_ok=True)
    except OSError as e:
        return e
    return None
