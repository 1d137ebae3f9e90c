"""Ordered fallback chains for settings.

A setting (sync type, repository URL, revision) is resolved from a list of
candidate sources tried in order; the first non-empty value wins and later
sources are never evaluated. Sources are lazy, so a prompt is only shown and
a remote lookup is only made when every earlier source came up empty.

Usage:
    resolution = resolve(
        literal("flag", options.schema_hash),
        deferred("prompt", lambda: ask("hash-schema")),
        fallible("remote", lambda: remote_latest_revision(url)),
        literal("config", config.repos.schema.revision),
    )
    resolution.value    # "abc123"
    resolution.source   # "remote"
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .result import Err, Ok, Result

__all__ = [
    "Resolution",
    "Source",
    "deferred",
    "fallible",
    "first_non_empty",
    "literal",
    "resolve",
]


@dataclass(frozen=True, slots=True)
class Source:
    """A named candidate. `fetch` may fail; a failure counts as empty."""

    name: str
    fetch: Callable[[], Result[str | None, object]]


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a fallback chain.

    Attributes:
        value: First non-empty value, None if every source was empty
        source: Name of the source that produced the value
        failures: (source name, error) for every source that failed
    """

    value: str | None
    source: str | None = None
    failures: tuple[tuple[str, object], ...] = field(default_factory=tuple)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def first_non_empty(*values: str | None) -> str | None:
    """Return the first value that is not None or blank."""
    for value in values:
        cleaned = _clean(value)
        if cleaned is not None:
            return cleaned
    return None


def literal(name: str, value: str | None) -> Source:
    """A value that is already known (CLI flag, configured default)."""
    return Source(name=name, fetch=lambda: Ok(value))


def deferred(name: str, produce: Callable[[], str | None]) -> Source:
    """A value computed on demand (interactive prompt)."""
    return Source(name=name, fetch=lambda: Ok(produce()))


def fallible(name: str, lookup: Callable[[], Result[str, object]]) -> Source:
    """A lookup that may fail (remote revision query)."""

    def fetch() -> Result[str | None, object]:
        result = lookup()
        if isinstance(result, Err):
            return result
        return Ok(result.value)

    return Source(name=name, fetch=fetch)


def resolve(*sources: Source) -> Resolution:
    """Try `sources` in order and stop at the first non-empty value."""
    failures: list[tuple[str, object]] = []
    for source in sources:
        match source.fetch():
            case Ok(raw):
                value = _clean(raw)
                if value is not None:
                    return Resolution(value=value, source=source.name, failures=tuple(failures))
            case Err(error):
                failures.append((source.name, error))
    return Resolution(value=None, failures=tuple(failures))
