from __future__ import annotations

import os
from pathlib import Path

import typer

from modship import __version__
from modship.cli.commands.install_cmd import install
from modship.cli.commands.publish_cmd import publish
from modship.cli.commands.release_cmd import release
from modship.cli.commands.repair_cmd import repair
from modship.cli.commands.version_cmd import decide_version
from modship.cli.context import ENV_CONFIG
from modship.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command("decide-version")(decide_version)
app.command()(install)
app.command()(repair)
app.command()(publish)
app.command()(release)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to modship.toml (defaults to ./modship.toml)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.FAILURE))
        os.environ[ENV_CONFIG] = str(path.resolve())

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def main() -> None:
    app()
