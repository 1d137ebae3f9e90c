"""Result type for explicit error handling.

Operations that can fail in an expected way (git, filesystem, code
generation) return `Ok(value)` or `Err(error)` instead of raising, so the
orchestrator is the single place that decides between cleanup-and-abort and
continuing.

Usage:
    match repo.clone():
        case Ok(handle):
            print(handle.spec.nickname)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result carrying `value`."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result carrying `error`."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
