from __future__ import annotations

import os
from pathlib import Path

import typer

from modpub import __version__
from modpub.cli.commands.release_cmd import release_app
from modpub.core.errors import ErrorCode
from modpub.core.project import CONFIG_FILE_NAME, PROJECT_ROOT_ENV, is_project_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(release_app, name="release", help="Create releases on the code push service.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    del version
    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --project: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USAGE))

        if not root.is_dir() or not is_project_root(root):
            typer.echo(
                f"error: --project '{root}' is not a modpub project (missing {CONFIG_FILE_NAME})",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.CONFIG))

        os.environ[PROJECT_ROOT_ENV] = str(root)


def main() -> None:
    app()
