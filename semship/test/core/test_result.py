"""Tests for semship.core.result module."""

from __future__ import annotations

import pytest

from semship.core.result import Err, Ok, Result


def test_equality_and_repr() -> None:
    assert Ok(3) == Ok(3)
    assert Ok(3) != Err(3)
    assert repr(Ok("x")) == "Ok('x')"
    assert repr(Err("boom")) == "Err('boom')"


def test_frozen() -> None:
    with pytest.raises(AttributeError):
        Ok(1).value = 2  # type: ignore[misc]


def test_pattern_matching() -> None:
    def describe(r: Result[int, str]) -> str:
        match r:
            case Ok(v):
                return f"value {v}"
            case Err(e):
                return f"error {e}"

    assert describe(Ok(1)) == "value 1"
    assert describe(Err("nope")) == "error nope"
