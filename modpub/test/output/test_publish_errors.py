"""Tests for modpub.output.errors module."""

from __future__ import annotations

from pathlib import Path

from modpub.core.errors import ErrorCode
from modpub.output.console import MockConsole
from modpub.output.errors import print_publish_error, publish_error_exit_code
from modpub.services.publish.errors import (
    BuildFailed,
    ExtractionFailed,
    PreconditionFailed,
    RemoteServiceFailed,
)


class TestExitCodes:
    def test_precondition_uses_its_code(self) -> None:
        error = PreconditionFailed(kind="auth_required", message="login", code=ErrorCode.NO_USER)
        assert publish_error_exit_code(error) == 67

    def test_precondition_defaults_to_config(self) -> None:
        error = PreconditionFailed(kind="package_missing", message="no package")
        assert publish_error_exit_code(error) == int(ErrorCode.CONFIG)

    def test_fatal_pipeline_errors_are_software(self) -> None:
        errors = [
            BuildFailed(message="gradle failed", returncode=1),
            ExtractionFailed(archive=Path("a.aar"), message="bad zip"),
            RemoteServiceFailed(operation="fetch releases", message="timeout"),
        ]
        assert {publish_error_exit_code(e) for e in errors} == {int(ErrorCode.SOFTWARE)}


class TestPrint:
    def test_precondition_with_hint(self) -> None:
        console = MockConsole()
        print_publish_error(
            PreconditionFailed(kind="package_missing", message="no package", hint="add it"),
            console,
        )
        assert console.messages == ["error: no package", "hint: add it"]

    def test_build_failure_includes_exit_code(self) -> None:
        console = MockConsole()
        print_publish_error(BuildFailed(message="gradle failed", returncode=1), console)
        assert console.messages[0] == "error: Failed to build (exit 1): gradle failed"

    def test_remote_failure(self) -> None:
        console = MockConsole()
        print_publish_error(
            RemoteServiceFailed(operation="fetch releases", message="Bad Gateway", status=502),
            console,
        )
        assert console.messages[0] == "error: Failed to fetch releases: HTTP 502: Bad Gateway"
        assert "re-run" in console.messages[1]

    def test_extraction_failure(self) -> None:
        console = MockConsole()
        print_publish_error(ExtractionFailed(archive=Path("x.aar"), message="bad zip"), console)
        assert "bad zip" in console.messages[0]
        assert "x.aar" in console.messages[0]
