"""Unit tests for the Result container used for per-field outcomes."""

from __future__ import annotations

import pytest

from statesaver.core.errors import FieldAccessError
from statesaver.core.result import Err, Result, err, ok


def test_ok_map_and_flat_map() -> None:
    """`Ok` should map/flat_map and keep values typed."""
    r: Result[int, str] = ok(10)
    r2 = r.map(lambda x: x + 5).flat_map(lambda x: ok(x * 2))
    assert r2.is_ok() and r2.unwrap() == 30


def test_err_propagation_and_map_err() -> None:
    """`Err` should propagate through map/flat_map and allow mapping the error."""
    r: Result[int, str] = err("boom")
    assert r.is_err()
    assert r.map(lambda x: x + 1).is_err()
    r2 = r.map_err(lambda e: f"{e}!")
    assert isinstance(r2, Err) and r2.unwrap_err() == "boom!"


def test_get_or_falls_back_on_err() -> None:
    """`get_or` returns the value on Ok and the default on Err, even a falsy one."""
    assert ok(3).get_or(0) == 3
    assert err("nope").get_or(0) == 0


def test_unwrap_reraises_wrapped_exception() -> None:
    """Unwrapping an Err that holds an exception raises that exception."""
    failure: Result[int, FieldAccessError] = err(FieldAccessError("speed", "boom"))
    with pytest.raises(FieldAccessError, match="speed"):
        failure.unwrap()


def test_unwrap_non_exception_error_and_unwrap_err_on_ok() -> None:
    """Plain error payloads and misuse both surface as RuntimeError."""
    with pytest.raises(RuntimeError):
        err("plain").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()
