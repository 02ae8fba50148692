from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

ANDROID_PLATFORM = "android"

# Architecture label reserved for the whole-archive artifact.
AAR_ARCH = "aar"


@dataclass(frozen=True, slots=True)
class Application:
    id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class Release:
    id: str
    app_id: str
    version: str
    toolchain_revision: str


@dataclass(frozen=True, slots=True)
class ArchitectureTarget:
    """One native ABI produced by ``flutter build aar``.

    ``path`` is the directory name under ``jni/`` inside the archive; ``arch``
    is the label the code push service knows the binary by.
    """

    target_id: str
    path: str
    arch: str

    def library_path(self, extracted_root: Path) -> Path:
        return extracted_root / "jni" / self.path / "libapp.so"


# Mirrors the Flutter engine's Android ABI set; changes only with toolchain
# upgrades.
ARCHITECTURES: tuple[ArchitectureTarget, ...] = (
    ArchitectureTarget(target_id="arm32", path="armeabi-v7a", arch="arm"),
    ArchitectureTarget(target_id="arm64", path="arm64-v8a", arch="aarch64"),
    ArchitectureTarget(target_id="x86_64", path="x86_64", arch="x86_64"),
)


@dataclass(frozen=True, slots=True)
class Found:
    """An existing release matched the requested version."""

    release: Release


@dataclass(frozen=True, slots=True)
class Created:
    """No release matched; a new one was created."""

    release: Release


ReleaseLookup = Found | Created


class PublishOutcome(StrEnum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True, slots=True)
class ArtifactResult:
    arch: str
    hash: str
    size: int
    outcome: PublishOutcome
    # Set when the service reported a different hash for the existing artifact.
    hash_mismatch: bool = False


@dataclass(frozen=True, slots=True)
class SummaryEntry:
    arch: str
    path: Path
    hash: str
    outcome: PublishOutcome
    hash_mismatch: bool = False


@dataclass(frozen=True, slots=True)
class SummaryFailure:
    arch: str
    path: Path
    message: str


def _empty_entries() -> list[SummaryEntry]:
    return []


def _empty_failures() -> list[SummaryFailure]:
    return []


@dataclass
class PublishSummary:
    """What one invocation did, per artifact.

    Lives only for the duration of a publish and is discarded after the
    report is printed.
    """

    recorded: list[SummaryEntry] = field(default_factory=_empty_entries)
    failed: list[SummaryFailure] = field(default_factory=_empty_failures)

    def record(self, path: Path, result: ArtifactResult) -> None:
        self.recorded.append(
            SummaryEntry(
                arch=result.arch,
                path=path,
                hash=result.hash,
                outcome=result.outcome,
                hash_mismatch=result.hash_mismatch,
            )
        )

    def record_failure(self, arch: str, path: Path, message: str) -> None:
        self.failed.append(SummaryFailure(arch=arch, path=path, message=message))

    @property
    def entries(self) -> list[SummaryEntry]:
        """Recorded artifacts, sorted by architecture label."""
        return sorted(self.recorded, key=lambda e: e.arch)

    @property
    def failures(self) -> list[SummaryFailure]:
        return sorted(self.failed, key=lambda f: f.arch)

    @property
    def created(self) -> list[str]:
        return [e.arch for e in self.entries if e.outcome is PublishOutcome.CREATED]

    @property
    def already_present(self) -> list[str]:
        return [e.arch for e in self.entries if e.outcome is PublishOutcome.ALREADY_EXISTS]

    @property
    def mismatched(self) -> list[str]:
        return [e.arch for e in self.entries if e.hash_mismatch]

    def lines(self) -> list[str]:
        out: list[str] = []
        for e in self.entries:
            label = "created" if e.outcome is PublishOutcome.CREATED else "already present"
            suffix = " (hash differs from existing artifact)" if e.hash_mismatch else ""
            out.append(f"{e.arch}: {label} {e.hash[:12]}{suffix}")
        for f in self.failures:
            out.append(f"{f.arch}: failed ({f.message})")
        return out


@dataclass(frozen=True, slots=True)
class PublishRequest:
    release_version: str
    # `flutter build aar` defaults to 1.0; so do we.
    build_number: str = "1.0"
    flavor: str | None = None
