"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, NoReturn

import typer

from modship.core.errors import ErrorCode
from modship.core.result import Err, Ok, Result
from modship.output.console import Style
from modship.registry.case_repair import CaseRepairEngine
from modship.registry.client import PwshHost, PwshRegistryClient, ensure_pwsh_available
from modship.registry.errors import RegistryError
from modship.registry.installer import DependencyInstaller
from modship.registry.model import FeedCredentials

if TYPE_CHECKING:
    from modship.cli.context import CLIContext


ENV_TOKEN = "GITHUB_TOKEN"
ENV_OWNER = "GITHUB_REPOSITORY_OWNER"


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.FAILURE,
) -> None:
    """Exit with error if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def resolve_credentials(*, owner: str | None, token: str | None) -> Result[FeedCredentials, str]:
    """Feed credentials from options, falling back to the CI environment."""
    owner = (owner or os.environ.get(ENV_OWNER, "")).strip()
    token = (token or os.environ.get(ENV_TOKEN, "")).strip()
    if not owner:
        return Err(f"missing feed owner (--owner or {ENV_OWNER})")
    if not token:
        return Err(f"missing feed token (--token or {ENV_TOKEN})")
    return Ok(FeedCredentials(owner=owner, token=token))


def build_client(ctx: CLIContext) -> Result[PwshRegistryClient, RegistryError]:
    available = ensure_pwsh_available()
    if isinstance(available, Err):
        return available
    host = PwshHost(cwd=ctx.cwd, timeout=ctx.config.timeouts.pwsh_seconds)
    return Ok(PwshRegistryClient(host=host, module_root=ctx.config.case_repair.module_root_path))


def build_repair_engine(ctx: CLIContext) -> CaseRepairEngine:
    repair = ctx.config.case_repair
    return CaseRepairEngine(
        module_root=repair.module_root_path,
        console=ctx.console,
        case_sensitive=repair.case_sensitive,
        extra_filenames=repair.filenames,
    )


def build_installer(
    ctx: CLIContext, client: PwshRegistryClient, credentials: FeedCredentials
) -> DependencyInstaller:
    return DependencyInstaller(
        client=client,
        repair=build_repair_engine(ctx),
        console=ctx.console,
        feed_uri=ctx.config.feed.uri_for(credentials.owner),
    )


def finish(
    ctx: CLIContext,
    *,
    title: str,
    success: bool,
    signals: Mapping[str, str | bool],
    error: str | None = None,
) -> NoReturn:
    """Emit signals and the step summary, then exit with the matching code."""
    ctx.signals.emit(signals)
    ctx.signals.summarize(title=title, success=success, details=signals, error=error)
    exit_with_code(int(ErrorCode.from_success(success)))


def fail(
    ctx: CLIContext,
    *,
    title: str,
    signals: Mapping[str, str | bool],
    error: str,
) -> NoReturn:
    """Report a failure that stops a command before its service runs."""
    ctx.console.error(error)
    finish(ctx, title=title, success=False, signals=signals, error=error)
