"""Project detection and paths.

A modpub project is a Flutter module checkout with a ``modpub.toml`` file at
its root. The file is both the marker and the configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "CONFIG_FILE_NAME",
    "PROJECT_ROOT_ENV",
    "Project",
    "ProjectError",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

CONFIG_FILE_NAME = "modpub.toml"
PROJECT_ROOT_ENV = "MODPUB_PROJECT_ROOT"


@dataclass(frozen=True)
class ProjectError:
    """Project root could not be found."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected Flutter module project.

    Layout relied on:
    - modpub.toml (required)
    - build/host/outputs/repo/ (written by ``flutter build aar``)
    """

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    @property
    def build_dir(self) -> Path:
        return self.root / "build"

    @property
    def aar_repo_dir(self) -> Path:
        """Local maven repository populated by ``flutter build aar``."""
        return self.build_dir / "host" / "outputs" / "repo"

    def aar_path(self, *, package: str, build_number: str) -> Path:
        """Path of the release AAR for ``package`` at ``build_number``.

        Example: com.example.mod, 1.0 ->
        build/host/outputs/repo/com/example/mod/flutter_release/1.0/flutter_release-1.0.aar
        """
        return (
            self.aar_repo_dir.joinpath(*package.split("."))
            / "flutter_release"
            / build_number
            / f"flutter_release-{build_number}.aar"
        )

    def extraction_dir(self, archive: Path) -> Path:
        """Directory an archive is unpacked into (next to the archive)."""
        return archive.parent / archive.name.removesuffix(archive.suffix)

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILE_NAME).is_file()


def find_project_upward(start: Path) -> Path | None:
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ROOT_ENV,
) -> Result[Project, ProjectError]:
    """Detect the project root.

    Detection order:
    1. ``$MODPUB_PROJECT_ROOT`` (if set, it must be valid)
    2. Search upward from start_dir (or cwd) for ``modpub.toml``
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_project_root(env_path):
            return Ok(Project(root=env_path))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it is not a modpub project",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found is None:
        return Err(
            ProjectError(
                message=f"Could not find project ({CONFIG_FILE_NAME} not found)",
                searched_from=search_start,
            )
        )
    return Ok(Project(root=found))
