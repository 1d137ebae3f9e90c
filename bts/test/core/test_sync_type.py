from __future__ import annotations

import pytest

from bts.core.errors import ErrorCode
from bts.core.result import Err, Ok
from bts.core.sync_errors import InvalidSyncType
from bts.core.sync_type import SyncType, parse_sync_type


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("frontend", SyncType.frontend),
        ("backend", SyncType.backend),
        (" Backend ", SyncType.backend),
        ("FRONTEND", SyncType.frontend),
    ],
)
def test_parse_sync_type(raw: str, expected: SyncType) -> None:
    assert parse_sync_type(raw) == Ok(expected)


@pytest.mark.parametrize("raw", ["", "mobile", "front end"])
def test_parse_sync_type_rejects_unknown(raw: str) -> None:
    result = parse_sync_type(raw)
    assert isinstance(result, Err)
    assert result.error == InvalidSyncType(value=raw, allowed=("frontend", "backend"))


def test_invalid_sync_type_message() -> None:
    error = InvalidSyncType(value="mobile", allowed=("frontend", "backend"))
    assert error.message == 'Invalid sync type "mobile". Valid options are "frontend" or "backend".'


def test_error_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.CODEGEN_ERROR) == 3
    assert int(ErrorCode.NETWORK_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5
    assert ErrorCode.OK.is_success
    assert not ErrorCode.IO_ERROR.is_success
    assert str(ErrorCode.NETWORK_ERROR) == "network error"
