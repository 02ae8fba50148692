"""Tests for modpub.core.errors module."""

from modpub.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract and follow sysexits.h."""

    def test_ok_is_zero(self) -> None:
        assert ErrorCode.OK == 0

    def test_usage(self) -> None:
        assert ErrorCode.USAGE == 64

    def test_no_user(self) -> None:
        assert ErrorCode.NO_USER == 67

    def test_software(self) -> None:
        assert ErrorCode.SOFTWARE == 70

    def test_config(self) -> None:
        assert ErrorCode.CONFIG == 78

    def test_values_are_distinct(self) -> None:
        values = [int(c) for c in ErrorCode]
        assert len(values) == len(set(values))
