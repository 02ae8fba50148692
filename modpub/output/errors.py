"""Error presentation for the publish pipeline.

One human-readable cause per failure, plus a hint when there is something
the user can do, and a stable exit code per failure class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modpub.core.errors import ErrorCode
from modpub.output.console import Style
from modpub.services.publish.errors import (
    BuildFailed,
    ExtractionFailed,
    PreconditionFailed,
    PublishError,
    RemoteServiceFailed,
)

if TYPE_CHECKING:
    from modpub.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code"]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    match error:
        case PreconditionFailed(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case BuildFailed(message=message, returncode=rc):
            suffix = f" (exit {rc})" if rc is not None and rc >= 0 else ""
            console.error(f"Failed to build{suffix}: {message}")
        case ExtractionFailed(archive=archive, message=message):
            console.error(f"Failed to extract {archive}: {message}")
            console.print("hint: rebuild the module; the archive is not usable", Style.DIM)
        case RemoteServiceFailed():
            console.error(f"Failed to {error}")
            console.print("hint: re-run the command; completed steps are skipped", Style.DIM)


def publish_error_exit_code(error: PublishError) -> int:
    match error:
        case PreconditionFailed(code=code):
            return int(code)
        case BuildFailed() | ExtractionFailed() | RemoteServiceFailed():
            return int(ErrorCode.SOFTWARE)
    return int(ErrorCode.SOFTWARE)
