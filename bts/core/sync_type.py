from __future__ import annotations

from enum import Enum

from .result import Err, Ok, Result
from .sync_errors import InvalidSyncType

__all__ = ["SyncType", "parse_sync_type"]


class SyncType(str, Enum):
    frontend = "frontend"
    backend = "backend"


def parse_sync_type(value: str) -> Result[SyncType, InvalidSyncType]:
    """Validate a sync type coming from a prompt answer or the config file."""
    normalized = value.strip().lower()
    for member in SyncType:
        if member.value == normalized:
            return Ok(member)
    return Err(
        InvalidSyncType(
            value=value,
            allowed=tuple(member.value for member in SyncType),
        )
    )
