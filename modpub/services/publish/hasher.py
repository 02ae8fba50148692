"""Content hashing for artifacts.

The hash identifies artifact content on the service, so it must be stable
across runs and machines: lowercase hex SHA-256 of the raw bytes.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path

__all__ = ["HashFunction", "sha256_hex", "hash_file"]

HashFunction = Callable[[bytes], str]

_CHUNK_SIZE = 1024 * 1024


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> str:
    """SHA-256 of a file, read in chunks. Equal to ``sha256_hex(path.read_bytes())``."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
