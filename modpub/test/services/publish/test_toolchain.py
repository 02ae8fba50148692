"""Tests for modpub.services.publish.toolchain."""

from __future__ import annotations

from pathlib import Path

import pytest

from modpub.core.result import Err, Ok, Result
from modpub.platform.process import ProcessError
from modpub.services.publish import toolchain as toolchain_mod
from modpub.services.publish.toolchain import FlutterToolchain


def _failure(cmd: list[str], returncode: int, stderr: str = "") -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr))


class TestBuildCommand:
    def test_without_flavor(self, tmp_path: Path) -> None:
        tc = FlutterToolchain(project_root=tmp_path)

        assert tc.build_command(build_number="1.0", flavor=None) == [
            "flutter",
            "build",
            "aar",
            "--no-debug",
            "--no-profile",
            "--build-number=1.0",
        ]

    def test_with_flavor_and_custom_executable(self, tmp_path: Path) -> None:
        tc = FlutterToolchain(project_root=tmp_path, flutter="/opt/flutter/bin/flutter")

        cmd = tc.build_command(build_number="2", flavor="internal")

        assert cmd[0] == "/opt/flutter/bin/flutter"
        assert cmd[-1] == "--flavor=internal"


class TestBuildAar:
    def test_success(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[tuple[list[str], Path]] = []

        def fake(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None) -> Result[None, ProcessError]:
            seen.append((cmd, cwd))
            return Ok(None)

        monkeypatch.setattr(toolchain_mod, "run_streaming", fake)

        result = FlutterToolchain(project_root=tmp_path).build_aar(build_number="1.0", flavor=None)

        assert result == Ok(None)
        assert seen[0][1] == tmp_path
        assert seen[0][0][:3] == ["flutter", "build", "aar"]

    def test_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None) -> Result[None, ProcessError]:
            return _failure(cmd, 1)

        monkeypatch.setattr(toolchain_mod, "run_streaming", fake)

        result = FlutterToolchain(project_root=tmp_path).build_aar(build_number="1.0", flavor=None)

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert "flutter build aar" in result.error.message

    def test_missing_executable(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None) -> Result[None, ProcessError]:
            return _failure(cmd, -1, "[Errno 2] No such file or directory: 'flutter'")

        monkeypatch.setattr(toolchain_mod, "run_streaming", fake)

        result = FlutterToolchain(project_root=tmp_path).build_aar(build_number="1.0", flavor=None)

        assert isinstance(result, Err)
        assert "No such file" in result.error.message


class TestCurrentRevision:
    def _patch_run(self, monkeypatch: pytest.MonkeyPatch, result: Result[str, ProcessError]) -> None:
        def fake(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None) -> Result[str, ProcessError]:
            assert cmd[1:] == ["--version", "--machine"]
            return result

        monkeypatch.setattr(toolchain_mod, "run", fake)

    def test_parses_framework_revision(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch_run(monkeypatch, Ok('{"frameworkVersion": "3.22.0", "frameworkRevision": "abc123"}'))

        assert FlutterToolchain(project_root=tmp_path).current_revision() == Ok("abc123")

    def test_invalid_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch_run(monkeypatch, Ok("Flutter 3.22.0"))

        result = FlutterToolchain(project_root=tmp_path).current_revision()

        assert isinstance(result, Err)
        assert result.error.operation == "fetch toolchain revision"
        assert "invalid JSON" in result.error.message

    def test_missing_field(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch_run(monkeypatch, Ok("{}"))

        result = FlutterToolchain(project_root=tmp_path).current_revision()

        assert isinstance(result, Err)
        assert result.error.message == "missing frameworkRevision"

    def test_command_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch_run(monkeypatch, _failure(["flutter", "--version", "--machine"], 1, "boom\n"))

        result = FlutterToolchain(project_root=tmp_path).current_revision()

        assert isinstance(result, Err)
        assert result.error.message == "boom"
