"""Release commands - build a module and publish it to the code push service."""

from __future__ import annotations

import typer

from modpub.cli.context import CLIContext, build_context
from modpub.core.config import ConfigError, DEFAULT_SERVICE_TIMEOUT, DEFAULT_SERVICE_URL
from modpub.core.errors import ErrorCode
from modpub.output.console import Style
from modpub.services.publish.client import CodePushClient, HttpCodePushClient
from modpub.services.publish.model import PublishRequest
from modpub.services.publish.pipeline import (
    PublishContext,
    PublishReport,
    print_report,
    publish_aar,
    report_exit_code,
)
from modpub.services.publish.toolchain import BuildToolchain, FlutterToolchain

release_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _make_client(ctx: CLIContext) -> CodePushClient:
    if isinstance(ctx.config, ConfigError):
        url, timeout = DEFAULT_SERVICE_URL, DEFAULT_SERVICE_TIMEOUT
    else:
        url, timeout = ctx.config.service.url, ctx.config.service.timeout
    return HttpCodePushClient(base_url=url, token=ctx.token or "", timeout=timeout)


def _make_toolchain(ctx: CLIContext) -> BuildToolchain:
    flutter = "flutter" if isinstance(ctx.config, ConfigError) else ctx.config.toolchain.flutter
    return FlutterToolchain(project_root=ctx.project.root, flutter=flutter)


def _print_next_steps(ctx: CLIContext, report: PublishReport) -> None:
    ctx.console.newline()
    ctx.console.print(
        "Your next step is to add this module as a dependency in your app's build.gradle:"
    )
    ctx.console.print(
        "dependencies {\n"
        "  // ...\n"
        f"  releaseImplementation '{report.package}:flutter_release:{report.request.build_number}'\n"
        "  // ...\n"
        "}",
        Style.INFO,
    )


@release_app.command("aar")
def release_aar(
    release_version: str = typer.Option(
        ...,
        "--release-version",
        help='Version of the associated release (e.g. "1.0.0"), i.e. the version '
        "of the Android app that uses this module.",
    ),
    build_number: str = typer.Option("1.0", "--build-number", help="Build number of the aar."),
    flavor: str | None = typer.Option(
        None, "--flavor", help="Product flavor to build.", show_default=False
    ),
) -> None:
    """Build the Android archive and publish it as a release."""
    ctx = build_context()

    if not release_version.strip():
        ctx.console.error("--release-version must not be empty")
        raise typer.Exit(code=int(ErrorCode.USAGE))

    publish_ctx = PublishContext(
        project=ctx.project,
        config=ctx.config,
        token=ctx.token,
        console=ctx.console,
        client=_make_client(ctx),
        toolchain=_make_toolchain(ctx),
    )
    request = PublishRequest(
        release_version=release_version.strip(),
        build_number=build_number,
        flavor=flavor,
    )

    report = publish_aar(publish_ctx, request)
    print_report(report, ctx.console)
    if report.ok:
        _print_next_steps(ctx, report)

    code = report_exit_code(report)
    if code != int(ErrorCode.OK):
        raise typer.Exit(code=code)
