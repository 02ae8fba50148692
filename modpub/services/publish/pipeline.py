"""Publish orchestrator.

Drives one publish invocation through a linear sequence of stages:

    INIT -> PRECONDITIONS_CHECKED -> BUILT -> ARCHIVE_EXTRACTED
         -> RELEASE_RESOLVED -> ARTIFACTS_PUBLISHED -> ARCHIVE_PUBLISHED -> DONE

Any fatal error stops the sequence. Nothing is rolled back: artifacts
uploaded before the failure stay on the service, and re-running the command
skips them through the conflict path. ``PublishReport.stage`` records how far
the invocation got.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from modpub.core.config import Config, ConfigError
from modpub.core.errors import ErrorCode
from modpub.core.project import Project
from modpub.core.result import Err, Ok, Result
from modpub.output.console import ConsoleProtocol, Style
from modpub.output.errors import print_publish_error, publish_error_exit_code
from modpub.services.publish.artifacts import publish_artifact
from modpub.services.publish.client import CodePushClient
from modpub.services.publish.errors import BuildFailed, ExtractionFailed, PublishError
from modpub.services.publish.extractor import extract_archive
from modpub.services.publish.hasher import HashFunction, sha256_hex
from modpub.services.publish.model import (
    AAR_ARCH,
    ANDROID_PLATFORM,
    ARCHITECTURES,
    Application,
    Created,
    Found,
    PublishOutcome,
    PublishRequest,
    PublishSummary,
    Release,
)
from modpub.services.publish.preconditions import check_preconditions
from modpub.services.publish.resolver import resolve_app, resolve_release
from modpub.services.publish.toolchain import BuildToolchain

__all__ = [
    "PublishContext",
    "PublishReport",
    "PublishStage",
    "publish_aar",
    "print_report",
    "report_exit_code",
]


class PublishStage(StrEnum):
    INIT = "init"
    PRECONDITIONS_CHECKED = "preconditions_checked"
    BUILT = "built"
    ARCHIVE_EXTRACTED = "archive_extracted"
    RELEASE_RESOLVED = "release_resolved"
    ARTIFACTS_PUBLISHED = "artifacts_published"
    ARCHIVE_PUBLISHED = "archive_published"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class PublishContext:
    """Everything one publish needs, passed explicitly.

    ``config`` is the parsed ``modpub.toml`` or the error loading it produced;
    the precondition stage reports the latter.
    """

    project: Project
    config: Config | ConfigError
    token: str | None
    console: ConsoleProtocol
    client: CodePushClient
    toolchain: BuildToolchain
    hasher: HashFunction = sha256_hex


@dataclass
class PublishReport:
    request: PublishRequest
    stage: PublishStage = PublishStage.INIT
    summary: PublishSummary = field(default_factory=PublishSummary)
    package: str | None = None
    archive: Path | None = None
    app: Application | None = None
    release: Release | None = None
    release_created: bool = False
    error: PublishError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.stage is PublishStage.DONE


def _abort(report: PublishReport, error: PublishError, console: ConsoleProtocol) -> PublishReport:
    report.error = error
    print_publish_error(error, console)
    return report


def _publish_file(
    ctx: PublishContext,
    report: PublishReport,
    *,
    release_id: str,
    arch: str,
    path: Path,
    archive: Path,
) -> Result[None, PublishError]:
    try:
        data = path.read_bytes()
    except OSError as e:
        report.summary.record_failure(arch, path, str(e))
        return Err(ExtractionFailed(archive=archive, message=f"cannot read {path}: {e}"))

    ctx.console.print(f"Creating artifact for {path}", Style.DIM)
    published = publish_artifact(
        ctx.client,
        release_id,
        arch,
        data,
        platform=ANDROID_PLATFORM,
        hasher=ctx.hasher,
    )
    if isinstance(published, Err):
        report.summary.record_failure(arch, path, published.error.message)
        return published

    result = published.value
    report.summary.record(path, result)
    if result.outcome is PublishOutcome.ALREADY_EXISTS:
        ctx.console.info(f"{arch} artifact already exists, continuing...")
    if result.hash_mismatch:
        ctx.console.warning(
            f"{arch} artifact on the service has a different hash than the local build; "
            "it was not replaced"
        )
    return Ok(None)


def publish_aar(ctx: PublishContext, request: PublishRequest) -> PublishReport:
    """Build the module AAR and publish it as release ``request.release_version``.

    Returns:
        A PublishReport. ``report.ok`` is True only when every stage completed;
        otherwise ``report.error`` holds the single fatal cause.
    """
    console = ctx.console
    report = PublishReport(request=request)

    console.step("Checking preconditions")
    settings = check_preconditions(config=ctx.config, token=ctx.token, flavor=request.flavor)
    if isinstance(settings, Err):
        return _abort(report, settings.error, console)
    report.package = settings.value.package
    report.stage = PublishStage.PRECONDITIONS_CHECKED
    console.success("Preconditions met")

    console.step("Building aar")
    built = ctx.toolchain.build_aar(build_number=request.build_number, flavor=request.flavor)
    if isinstance(built, Err):
        return _abort(report, built.error, console)
    archive = ctx.project.aar_path(
        package=settings.value.package, build_number=request.build_number
    )
    if not archive.is_file():
        return _abort(report, BuildFailed(message=f"build output not found: {archive}"), console)
    report.archive = archive
    report.stage = PublishStage.BUILT
    console.success(f"Built {archive.name}")

    console.step("Extracting aar")
    extracted = extract_archive(archive, ctx.project.extraction_dir(archive))
    if isinstance(extracted, Err):
        return _abort(report, extracted.error, console)
    extracted_root = extracted.value
    report.stage = PublishStage.ARCHIVE_EXTRACTED
    console.success(f"Extracted to {extracted_root}")

    console.step("Fetching app")
    app = resolve_app(ctx.client, settings.value.app_id)
    if isinstance(app, Err):
        return _abort(report, app.error, console)
    report.app = app.value
    console.success(f"App: {app.value.display_name} ({app.value.id})")

    console.step(f"Resolving release {request.release_version}")
    lookup = resolve_release(
        ctx.client, app.value.id, request.release_version, ctx.toolchain.current_revision
    )
    if isinstance(lookup, Err):
        return _abort(report, lookup.error, console)
    match lookup.value:
        case Created(release=release):
            report.release_created = True
            console.success(
                f"Created release {release.version} (toolchain {release.toolchain_revision})"
            )
        case Found(release=release):
            console.success(f"Using existing release {release.version}")
    report.release = lookup.value.release
    report.stage = PublishStage.RELEASE_RESOLVED

    release_id = lookup.value.release.id
    console.step("Creating artifacts")
    for target in ARCHITECTURES:
        path = target.library_path(extracted_root)
        if not path.is_file():
            report.summary.record_failure(target.arch, path, "missing from archive")
            return _abort(
                report,
                ExtractionFailed(archive=archive, message=f"missing jni/{target.path}/libapp.so"),
                console,
            )
        ok = _publish_file(
            ctx, report, release_id=release_id, arch=target.arch, path=path, archive=archive
        )
        if isinstance(ok, Err):
            return _abort(report, ok.error, console)
    report.stage = PublishStage.ARTIFACTS_PUBLISHED

    ok = _publish_file(
        ctx, report, release_id=release_id, arch=AAR_ARCH, path=archive, archive=archive
    )
    if isinstance(ok, Err):
        return _abort(report, ok.error, console)
    report.stage = PublishStage.ARCHIVE_PUBLISHED
    console.success("Created artifacts")

    report.stage = PublishStage.DONE
    return report


def print_report(report: PublishReport, console: ConsoleProtocol) -> None:
    """Human-readable summary of what this invocation did."""
    console.header("Publish summary")
    if report.app is not None:
        console.print(f"App: {report.app.display_name} ({report.app.id})")
    if report.request.flavor is not None:
        console.print(f"Flavor: {report.request.flavor}")
    console.print(f"Release version: {report.request.release_version}")
    archs = ", ".join(t.arch for t in ARCHITECTURES)
    console.print(f"Platform: {ANDROID_PLATFORM} ({archs})")

    for line in report.summary.lines():
        console.print(f"  {line}", Style.DIM)

    if report.ok:
        console.success("Published release!")
        return

    console.error(f"Publish stopped after stage: {report.stage}")
    done = report.summary.entries
    if done:
        console.print(f"{len(done)} artifact(s) are already on the service.", Style.DIM)
    console.print("Re-run the same command to resume; published artifacts are skipped.", Style.DIM)


def report_exit_code(report: PublishReport) -> int:
    if report.error is not None:
        return publish_error_exit_code(report.error)
    return int(ErrorCode.OK if report.ok else ErrorCode.SOFTWARE)
