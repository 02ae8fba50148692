from __future__ import annotations

from dataclasses import dataclass

import typer

from modpub.core.config import Config, ConfigError, load_config
from modpub.core.errors import ErrorCode
from modpub.core.project import Project, detect_project
from modpub.core.result import Err
from modpub.output.console import ConsoleProtocol, RichConsole
from modpub.services.publish.preconditions import load_token


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config | ConfigError
    token: str | None
    console: ConsoleProtocol


def build_context() -> CLIContext:
    project_result = detect_project()
    if isinstance(project_result, Err):
        typer.echo(f"error: {project_result.error.message}", err=True)
        typer.echo("hint: run modpub from a Flutter module containing modpub.toml", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG))

    project = project_result.value
    config_result = load_config(project.config_path)
    config = config_result.error if isinstance(config_result, Err) else config_result.value

    return CLIContext(
        project=project,
        config=config,
        token=load_token(),
        console=RichConsole(),
    )
