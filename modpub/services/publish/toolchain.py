"""Flutter build toolchain adapter.

Two operations are needed from the toolchain: build the release AAR, and
report the framework revision that will be recorded on a new release.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from modpub.core.result import Err, Ok, Result
from modpub.core.structured import as_str_dict, get_str
from modpub.platform.process import run, run_streaming
from modpub.services.publish.errors import BuildFailed, RemoteServiceFailed

__all__ = ["BuildToolchain", "FlutterToolchain"]

_BUILD_TIMEOUT_SECONDS = 30 * 60.0
_VERSION_TIMEOUT_SECONDS = 60.0


class BuildToolchain(Protocol):
    def build_aar(self, *, build_number: str, flavor: str | None) -> Result[None, BuildFailed]: ...

    def current_revision(self) -> Result[str, RemoteServiceFailed]: ...


class FlutterToolchain:
    """Runs the ``flutter`` executable in the project root."""

    def __init__(self, *, project_root: Path, flutter: str = "flutter") -> None:
        self._root = project_root
        self._flutter = flutter

    def build_command(self, *, build_number: str, flavor: str | None) -> list[str]:
        cmd = [
            self._flutter,
            "build",
            "aar",
            "--no-debug",
            "--no-profile",
            f"--build-number={build_number}",
        ]
        if flavor is not None:
            cmd.append(f"--flavor={flavor}")
        return cmd

    def build_aar(self, *, build_number: str, flavor: str | None) -> Result[None, BuildFailed]:
        cmd = self.build_command(build_number=build_number, flavor=flavor)
        result = run_streaming(cmd, cwd=self._root, timeout=_BUILD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            message = e.stderr.strip() or str(e)
            return Err(BuildFailed(message=message, returncode=e.returncode))
        return Ok(None)

    def current_revision(self) -> Result[str, RemoteServiceFailed]:
        """Framework revision from ``flutter --version --machine``."""
        result = run(
            [self._flutter, "--version", "--machine"],
            cwd=self._root,
            timeout=_VERSION_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                RemoteServiceFailed(
                    operation="fetch toolchain revision",
                    message=result.error.stderr.strip() or str(result.error),
                )
            )

        try:
            obj: object = json.loads(result.value)
        except json.JSONDecodeError as e:
            return Err(
                RemoteServiceFailed(
                    operation="fetch toolchain revision",
                    message=f"invalid JSON from flutter --version: {e}",
                )
            )

        data = as_str_dict(obj)
        revision = get_str(data, "frameworkRevision") if data is not None else None
        if revision is None:
            return Err(
                RemoteServiceFailed(
                    operation="fetch toolchain revision",
                    message="missing frameworkRevision",
                )
            )
        return Ok(revision)
