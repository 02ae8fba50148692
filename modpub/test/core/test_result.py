"""Tests for modpub.core.result module."""

from __future__ import annotations

import pytest

from modpub.core.result import Err, Ok, Result


def _parse_port(text: str) -> Result[int, str]:
    if not text.isdigit():
        return Err(f"not a number: {text}")
    return Ok(int(text))


class TestOk:
    def test_value_access(self) -> None:
        assert Ok(42).value == 42

    def test_equality(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"

    def test_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestErr:
    def test_error_access(self) -> None:
        assert Err("boom").error == "boom"

    def test_repr(self) -> None:
        assert repr(Err(3)) == "Err(3)"


class TestNarrowing:
    def test_isinstance(self) -> None:
        assert isinstance(_parse_port("8080"), Ok)
        assert isinstance(_parse_port("http"), Err)

    def test_pattern_matching(self) -> None:
        match _parse_port("abc"):
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert "abc" in error
