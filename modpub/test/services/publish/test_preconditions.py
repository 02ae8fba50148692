"""Tests for modpub.services.publish.preconditions."""

from __future__ import annotations

from modpub.core.config import AndroidConfig, AppConfig, Config, ConfigError
from modpub.core.errors import ErrorCode
from modpub.core.result import Err, Ok
from modpub.services.publish.preconditions import (
    PublishSettings,
    check_preconditions,
    load_token,
)


def _config(package: str | None = "com.example.module") -> Config:
    return Config(
        app=AppConfig(id="app-1", flavors={"internal": "app-internal"}),
        android=AndroidConfig(package=package),
    )


class TestLoadToken:
    def test_present(self) -> None:
        assert load_token({"MODPUB_TOKEN": " abc \n"}) == "abc"

    def test_missing_or_blank(self) -> None:
        assert load_token({}) is None
        assert load_token({"MODPUB_TOKEN": "  "}) is None


class TestCheckPreconditions:
    def test_ok(self) -> None:
        result = check_preconditions(config=_config(), token="t", flavor=None)

        assert result == Ok(PublishSettings(app_id="app-1", package="com.example.module"))

    def test_flavor_selects_app_id(self) -> None:
        result = check_preconditions(config=_config(), token="t", flavor="internal")

        assert isinstance(result, Ok)
        assert result.value.app_id == "app-internal"

    def test_no_token(self) -> None:
        result = check_preconditions(config=_config(), token=None, flavor=None)

        assert isinstance(result, Err)
        assert result.error.kind == "auth_required"
        assert result.error.code == ErrorCode.NO_USER

    def test_token_checked_before_config(self) -> None:
        result = check_preconditions(config=ConfigError("broken"), token=None, flavor=None)

        assert isinstance(result, Err)
        assert result.error.kind == "auth_required"

    def test_invalid_config(self) -> None:
        result = check_preconditions(config=ConfigError("Invalid config: x"), token="t", flavor=None)

        assert isinstance(result, Err)
        assert result.error.kind == "config_invalid"
        assert result.error.message == "Invalid config: x"
        assert result.error.code == ErrorCode.CONFIG

    def test_missing_package(self) -> None:
        result = check_preconditions(config=_config(package=None), token="t", flavor=None)

        assert isinstance(result, Err)
        assert result.error.kind == "package_missing"
        assert result.error.code == ErrorCode.CONFIG

    def test_unknown_flavor(self) -> None:
        result = check_preconditions(config=_config(), token="t", flavor="beta")

        assert isinstance(result, Err)
        assert result.error.kind == "unknown_flavor"
        assert "'beta'" in result.error.message
        assert result.error.hint == "Configured flavors: internal"
