"""Typed access to ``modpub.toml``.

A project is marked by a ``modpub.toml`` file at its root:

    [app]
    id = "8d3155a8-..."

    [app.flavors]
    internal = "0c2e9a1b-..."

    [android]
    package = "com.example.my_module"

    [service]
    url = "https://api.example.dev"
    timeout = 60

    [toolchain]
    flutter = "flutter"

Only ``[app] id`` is required for the file to be valid; ``[android] package``
is checked later by the publish preconditions since other commands do not
need it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table

__all__ = [
    "Config",
    "AppConfig",
    "AndroidConfig",
    "ServiceConfig",
    "ToolchainConfig",
    "ConfigError",
    "load_config",
    "DEFAULT_SERVICE_URL",
    "DEFAULT_SERVICE_TIMEOUT",
]

DEFAULT_SERVICE_URL = "https://api.example.dev"
DEFAULT_SERVICE_TIMEOUT = 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config file missing, unreadable or structurally invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    id: str
    flavors: Mapping[str, str] = field(default_factory=dict)

    def app_id_for(self, flavor: str | None) -> str | None:
        """App id to publish to, or None when ``flavor`` is not configured."""
        if flavor is None:
            return self.id
        return self.flavors.get(flavor)


@dataclass(frozen=True, slots=True)
class AndroidConfig:
    package: str | None = None


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    url: str = DEFAULT_SERVICE_URL
    timeout: float = DEFAULT_SERVICE_TIMEOUT


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    flutter: str = "flutter"


@dataclass(frozen=True, slots=True)
class Config:
    app: AppConfig
    android: AndroidConfig = field(default_factory=AndroidConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Build a Config from parsed TOML.

        Raises:
            ValueError: if ``[app] id`` is missing.
        """
        app: StrDict = get_table(data, "app") or {}
        android: StrDict = get_table(data, "android") or {}
        service: StrDict = get_table(data, "service") or {}
        toolchain: StrDict = get_table(data, "toolchain") or {}

        app_id = get_str(app, "id")
        if app_id is None:
            raise ValueError("missing [app] id")

        flavors_table: StrDict = get_table(app, "flavors") or {}
        flavors: dict[str, str] = {}
        for name in flavors_table:
            value = get_str(flavors_table, name)
            if value is None:
                raise ValueError(f"invalid app id for flavor '{name}'")
            flavors[name] = value

        return cls(
            app=AppConfig(id=app_id, flavors=flavors),
            android=AndroidConfig(package=get_str(android, "package")),
            service=ServiceConfig(
                url=(get_str(service, "url") or DEFAULT_SERVICE_URL).rstrip("/"),
                timeout=get_number(service, "timeout") or DEFAULT_SERVICE_TIMEOUT,
            ),
            toolchain=ToolchainConfig(flutter=get_str(toolchain, "flutter") or "flutter"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load ``modpub.toml``.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))
