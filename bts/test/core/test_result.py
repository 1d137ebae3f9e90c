"""Tests for bts.core.result module."""

import pytest

from bts.core.result import Err, Ok, Result


def test_ok_carries_value() -> None:
    assert Ok("abc123").value == "abc123"
    assert repr(Ok("abc123")) == "Ok('abc123')"


def test_err_carries_error() -> None:
    assert Err("clone failed").error == "clone failed"
    assert repr(Err("boom")) == "Err('boom')"


def test_results_compare_by_content() -> None:
    assert Ok(1) == Ok(1)
    assert Ok(1) != Err(1)


def test_frozen() -> None:
    result = Ok(42)
    with pytest.raises(AttributeError):
        result.value = 0  # type: ignore[misc]


def test_pattern_matching() -> None:
    result: Result[str, str] = Err("unknown revision")
    match result:
        case Ok(value):
            pytest.fail(f"unexpected Ok({value})")
        case Err(error):
            assert error == "unknown revision"
