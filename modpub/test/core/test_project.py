"""Tests for modpub.core.project module."""

from __future__ import annotations

from pathlib import Path

import pytest

from modpub.core.project import (
    PROJECT_ROOT_ENV,
    Project,
    detect_project,
    find_project_upward,
    is_project_root,
)
from modpub.core.result import Err, Ok


def _make_project(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "modpub.toml").write_text('[app]\nid = "a"\n', encoding="utf-8")
    return root


class TestProjectPaths:
    def test_config_path(self, tmp_path: Path) -> None:
        assert Project(root=tmp_path).config_path == tmp_path / "modpub.toml"

    def test_aar_path(self, tmp_path: Path) -> None:
        project = Project(root=tmp_path)
        path = project.aar_path(package="com.example.my_module", build_number="1.0")
        assert path == (
            tmp_path
            / "build/host/outputs/repo/com/example/my_module/flutter_release/1.0"
            / "flutter_release-1.0.aar"
        )

    def test_extraction_dir_is_next_to_archive(self, tmp_path: Path) -> None:
        project = Project(root=tmp_path)
        archive = tmp_path / "out" / "flutter_release-1.0.aar"
        assert project.extraction_dir(archive) == tmp_path / "out" / "flutter_release-1.0"


class TestDetection:
    def test_is_project_root(self, tmp_path: Path) -> None:
        assert not is_project_root(tmp_path)
        _make_project(tmp_path)
        assert is_project_root(tmp_path)

    def test_find_upward(self, tmp_path: Path) -> None:
        root = _make_project(tmp_path / "module")
        nested = root / "lib" / "src"
        nested.mkdir(parents=True)
        assert find_project_upward(nested) == root

    def test_detect_from_start_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(PROJECT_ROOT_ENV, raising=False)
        root = _make_project(tmp_path / "module")

        result = detect_project(start_dir=root)

        assert isinstance(result, Ok)
        assert result.value.root == root.resolve()

    def test_detect_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        root = _make_project(tmp_path / "module")
        monkeypatch.setenv(PROJECT_ROOT_ENV, str(root))

        result = detect_project(start_dir=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.root == root.resolve()

    def test_invalid_env_is_an_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(PROJECT_ROOT_ENV, str(tmp_path))

        result = detect_project(start_dir=tmp_path)

        assert isinstance(result, Err)
        assert PROJECT_ROOT_ENV in result.error.message

    def test_not_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(PROJECT_ROOT_ENV, raising=False)
        start = tmp_path / "empty"
        start.mkdir()

        result = detect_project(start_dir=start)

        assert isinstance(result, Err)
        assert "modpub.toml" in result.error.message
