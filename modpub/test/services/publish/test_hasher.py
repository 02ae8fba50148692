"""Tests for modpub.services.publish.hasher."""

from __future__ import annotations

import hashlib
from pathlib import Path

from modpub.services.publish.hasher import hash_file, sha256_hex


class TestSha256Hex:
    def test_known_digest(self) -> None:
        assert sha256_hex(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_deterministic(self) -> None:
        data = b"\x7fELF" + bytes(range(256)) * 64
        assert sha256_hex(data) == sha256_hex(bytes(data))

    def test_distinct_content_distinct_hash(self) -> None:
        assert sha256_hex(b"libapp-arm64") != sha256_hex(b"libapp-arm32")

    def test_lowercase_hex(self) -> None:
        digest = sha256_hex(b"x")
        assert len(digest) == 64
        assert digest == digest.lower()


class TestHashFile:
    def test_matches_in_memory_hash(self, tmp_path: Path) -> None:
        data = bytes(range(256)) * 10_000
        path = tmp_path / "libapp.so"
        path.write_bytes(data)
        assert hash_file(path) == sha256_hex(data) == hashlib.sha256(data).hexdigest()
