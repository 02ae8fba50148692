from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from modpub.core.errors import ErrorCode

PreconditionKind = Literal[
    "auth_required",
    "not_initialized",
    "config_invalid",
    "package_missing",
    "unknown_flavor",
    "app_not_found",
]


@dataclass(frozen=True, slots=True)
class PreconditionFailed:
    kind: PreconditionKind
    message: str
    hint: str | None = None
    code: ErrorCode = ErrorCode.CONFIG


@dataclass(frozen=True, slots=True)
class BuildFailed:
    message: str
    returncode: int | None = None


@dataclass(frozen=True, slots=True)
class ExtractionFailed:
    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class RemoteServiceFailed:
    operation: str
    message: str
    status: int = 0

    def __str__(self) -> str:
        if self.status:
            return f"{self.operation}: HTTP {self.status}: {self.message}"
        return f"{self.operation}: {self.message}"


PublishError = PreconditionFailed | BuildFailed | ExtractionFailed | RemoteServiceFailed
