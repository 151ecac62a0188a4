from __future__ import annotations

import typer

from modship.cli.commands._helpers import (
    build_client,
    build_installer,
    exit_on_error,
    resolve_credentials,
)
from modship.cli.context import build_context
from modship.core.errors import ErrorCode
from modship.core.result import Err
from modship.registry.installer import parse_package_list


def install(
    packages: list[str] = typer.Argument(
        ..., help="Packages to install, dependencies first (Name or Name@Version)"
    ),
    owner: str | None = typer.Option(None, "--owner", help="Feed owner (GitHub user or org)"),
    token: str | None = typer.Option(
        None, "--token", help="Feed token (defaults to GITHUB_TOKEN)", show_default=False
    ),
    require: list[str] = typer.Option(
        [], "--require", help="Command that must be exported once imported"
    ),
) -> None:
    """Install, case-repair and import a dependency chain."""
    ctx = build_context()

    descriptors = parse_package_list(packages)
    if not descriptors:
        ctx.console.error("no packages given")
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    resolved = resolve_credentials(owner=owner, token=token)
    if isinstance(resolved, Err):
        ctx.console.error(resolved.error)
        raise typer.Exit(code=int(ErrorCode.FAILURE))
    credentials = resolved.value

    built = build_client(ctx)
    if isinstance(built, Err):
        exit_on_error(built, ctx)
        return
    installer = build_installer(ctx, built.value, credentials)

    result = installer.install_chain(descriptors, credentials, require=require)
    if isinstance(result, Err):
        ctx.console.error(str(result.error))
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    session = result.value
    ctx.console.success(f"imported {len(session.modules)} module(s)")
