from __future__ import annotations

from pathlib import Path

import typer

from modship.cli.commands._helpers import (
    build_client,
    build_installer,
    fail,
    finish,
    resolve_credentials,
)
from modship.cli.context import build_context
from modship.core.result import Err
from modship.publish.orchestrator import PublishOrchestrator, PublishRequest
from modship.registry.installer import parse_package_list
from modship.registry.model import PackageDescriptor


def publish(
    name: str = typer.Argument(..., help="Module name"),
    version: str = typer.Option(..., "--version", help="Version being published"),
    path: Path = typer.Option(
        Path("."), "--path", help="Root of the module manifest search", show_default=True
    ),
    owner: str | None = typer.Option(None, "--owner", help="Feed owner (GitHub user or org)"),
    token: str | None = typer.Option(
        None, "--token", help="Feed token (defaults to GITHUB_TOKEN)", show_default=False
    ),
) -> None:
    """Publish a module, falling back to a direct publish."""
    ctx = build_context()
    title = f"Publish {name} {version}"
    failed = {"package-published": False}

    resolved = resolve_credentials(owner=owner, token=token)
    if isinstance(resolved, Err):
        fail(ctx, title=title, signals=failed, error=resolved.error)
    credentials = resolved.value

    built = build_client(ctx)
    if isinstance(built, Err):
        fail(ctx, title=title, signals=failed, error=str(built.error))
    client = built.value

    orchestrator = PublishOrchestrator(
        client=client,
        installer=build_installer(ctx, client, credentials),
        provider_packages=tuple(parse_package_list(ctx.config.provider.modules)),
        console=ctx.console,
    )

    report = orchestrator.publish(
        PublishRequest(
            package=PackageDescriptor(name=name, version=version),
            credentials=credentials,
            target_name=ctx.config.feed.target_name,
            feed_uri=ctx.config.feed.uri_for(credentials.owner),
            search_root=(ctx.cwd / path).resolve(),
        )
    )

    finish(
        ctx,
        title=title,
        success=report.published,
        signals=report.signals(),
        error=report.error,
    )
