from __future__ import annotations

import os

import typer

from modship.cli.commands._helpers import ENV_TOKEN, build_installer, fail, finish
from modship.cli.context import CLIContext, build_context
from modship.core.capability import Capability, Unavailable
from modship.core.result import Err
from modship.registry.client import PwshHost, PwshRegistryClient, ensure_pwsh_available
from modship.registry.installer import parse_package_list
from modship.registry.model import FeedCredentials
from modship.release.gh import ReleaseCli
from modship.release.git import TagRepository
from modship.release.model import ReleaseOutcome, ReleaseRequest
from modship.release.orchestrator import ReleaseOrchestrator, SmartReleaser
from modship.release.smart import negotiate_smart_release

ENV_REPOSITORY = "GITHUB_REPOSITORY"


def release(
    version: str = typer.Argument(..., help="Version to release (e.g. 1.2.3 or 1.2.3-beta)"),
    package: str = typer.Option(..., "--package", help="Module name"),
    bump_type: str = typer.Option("patch", "--bump-type", help="Bump that produced the version"),
    repository: str | None = typer.Option(
        None, "--repo", help="owner/repo (defaults to GITHUB_REPOSITORY)", show_default=False
    ),
    token: str | None = typer.Option(
        None, "--token", help="Feed token (defaults to GITHUB_TOKEN)", show_default=False
    ),
    no_smart: bool = typer.Option(False, "--no-smart", help="Skip the smart-release tool"),
) -> None:
    """Create tags and a GitHub release, falling back to git and gh."""
    ctx = build_context()
    title = f"Release {package} {version}"

    repo = (repository or os.environ.get(ENV_REPOSITORY, "")).strip()
    if "/" not in repo:
        fail(
            ctx,
            title=title,
            signals=ReleaseOutcome(created=False, base_tag="").signals(),
            error=f"invalid repository {repo!r} (expected owner/repo)",
        )

    feed_token = (token or os.environ.get(ENV_TOKEN, "")).strip()
    credentials = FeedCredentials(owner=repo.split("/", 1)[0], token=feed_token)

    def negotiate() -> Capability[SmartReleaser]:
        if no_smart:
            return Unavailable(reason="disabled by --no-smart")
        return _negotiate_smart(ctx, credentials)

    timeouts = ctx.config.timeouts
    orchestrator = ReleaseOrchestrator(
        tags=TagRepository(root=ctx.cwd, timeout=timeouts.git_seconds, console=ctx.console),
        releases=ReleaseCli(
            root=ctx.cwd, repo=repo, timeout=timeouts.gh_seconds, console=ctx.console
        ),
        console=ctx.console,
        negotiate_smart=negotiate,
        settle_seconds=ctx.config.release.settle_seconds,
        prerelease_markers=ctx.config.release.prerelease_markers,
    )

    outcome = orchestrator.release(
        ReleaseRequest(version=version, bump_type=bump_type, package=package, repository=repo)
    )

    finish(
        ctx,
        title=title,
        success=outcome.created,
        signals=outcome.signals(),
        error=outcome.error,
    )


def _negotiate_smart(ctx: CLIContext, credentials: FeedCredentials) -> Capability[SmartReleaser]:
    if not credentials.token:
        return Unavailable(reason=f"no feed token (--token or {ENV_TOKEN})")
    pwsh = ensure_pwsh_available()
    if isinstance(pwsh, Err):
        return Unavailable(reason=str(pwsh.error))

    host = PwshHost(cwd=ctx.cwd, timeout=ctx.config.timeouts.pwsh_seconds)
    client = PwshRegistryClient(host=host, module_root=ctx.config.case_repair.module_root_path)
    smart = ctx.config.smart_release
    return negotiate_smart_release(
        installer=build_installer(ctx, client, credentials),
        packages=parse_package_list(smart.modules),
        credentials=credentials,
        command=smart.command,
        client=client,
        repo_root=ctx.cwd,
    )
