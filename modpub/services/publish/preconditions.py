"""Checks that must pass before anything is built or uploaded."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from modpub.core.config import Config, ConfigError
from modpub.core.errors import ErrorCode
from modpub.core.project import CONFIG_FILE_NAME
from modpub.core.result import Err, Ok, Result
from modpub.services.publish.errors import PreconditionFailed

__all__ = ["TOKEN_ENV", "PublishSettings", "check_preconditions", "load_token"]

TOKEN_ENV = "MODPUB_TOKEN"


@dataclass(frozen=True, slots=True)
class PublishSettings:
    """Project metadata the pipeline needs, validated."""

    app_id: str
    package: str


def load_token(env: Mapping[str, str] | None = None) -> str | None:
    value = (env if env is not None else os.environ).get(TOKEN_ENV, "").strip()
    return value or None


def check_preconditions(
    *,
    config: Config | ConfigError,
    token: str | None,
    flavor: str | None,
) -> Result[PublishSettings, PreconditionFailed]:
    if token is None:
        return Err(
            PreconditionFailed(
                kind="auth_required",
                message="You must be logged in to publish.",
                hint=f"Set {TOKEN_ENV} to an API token.",
                code=ErrorCode.NO_USER,
            )
        )

    if isinstance(config, ConfigError):
        return Err(
            PreconditionFailed(
                kind="config_invalid",
                message=config.message,
                hint=f"Fix {CONFIG_FILE_NAME} and try again.",
            )
        )

    if config.android.package is None:
        return Err(
            PreconditionFailed(
                kind="package_missing",
                message=f"Could not find [android] package in {CONFIG_FILE_NAME}.",
                hint='Add: [android] package = "com.example.my_module"',
            )
        )

    app_id = config.app.app_id_for(flavor)
    if app_id is None:
        known = ", ".join(sorted(config.app.flavors)) or "none"
        return Err(
            PreconditionFailed(
                kind="unknown_flavor",
                message=f"No app id configured for flavor '{flavor}'.",
                hint=f"Configured flavors: {known}",
            )
        )

    return Ok(PublishSettings(app_id=app_id, package=config.android.package))
