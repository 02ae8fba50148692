"""Unpack the AAR produced by ``flutter build aar``.

An AAR is a zip container. After extraction the per-architecture binaries
live at ``<dest>/jni/<abi>/libapp.so``.
"""

from __future__ import annotations

import shutil
import stat
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from modpub.core.result import Err, Ok, Result
from modpub.services.publish.errors import ExtractionFailed

__all__ = ["extract_archive"]


def _safe_relative_path(member_name: str) -> Path | None:
    """Sanitized relative path for a zip member, or None if unsafe."""
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = PurePosixPath(normalized).parts
    if not parts:
        return None
    if any(part in {"", ".", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None

    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root)
    except OSError:
        return False


def extract_archive(archive: Path, dest: Path) -> Result[Path, ExtractionFailed]:
    """Extract ``archive`` into ``dest``, replacing any previous extraction.

    Args:
        archive: Path to the .aar file.
        dest: Directory to extract into. Removed first if it exists.

    Returns:
        Ok(dest) on success, Err(ExtractionFailed) when the archive is missing,
        is not a zip container, or is truncated/corrupt.
    """
    if not archive.is_file():
        return Err(ExtractionFailed(archive=archive, message="Archive not found"))

    try:
        if dest.exists():
            shutil.rmtree(dest)
        dest.mkdir(parents=True, exist_ok=True)
        root = dest.resolve()

        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue

                rel_path = _safe_relative_path(info.filename)
                if rel_path is None:
                    continue

                # No symlinks: only regular files are meaningful in an AAR.
                if (info.external_attr >> 16) & 0o170000 == stat.S_IFLNK:
                    continue

                full_path = dest / rel_path
                if not _is_within_root(root, full_path):
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)

    # NotImplementedError: unsupported compression method.
    # RuntimeError: encrypted member, no password.
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
        detail = str(e) or type(e).__name__
        return Err(ExtractionFailed(archive=archive, message=f"Invalid archive ({detail})"))
    except OSError as e:
        return Err(ExtractionFailed(archive=archive, message=f"IO error: {e}"))

    return Ok(dest)
