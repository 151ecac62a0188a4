from __future__ import annotations

import typer

from modship.cli.commands._helpers import finish
from modship.cli.context import build_context
from modship.output.console import Style
from modship.version.decision import decide_version as decide


def decide_version(
    manual_version: str | None = typer.Option(
        None, "--manual-version", help="Explicit version (wins over everything else)"
    ),
    bump_type: str | None = typer.Option(
        None, "--bump-type", help="Detected bump type (major/minor/patch/none)"
    ),
    detected_version: str | None = typer.Option(
        None, "--detected-version", help="Version computed from the detected bump"
    ),
    current_version: str | None = typer.Option(
        None, "--current-version", help="Version currently in the manifest"
    ),
) -> None:
    """Decide the version to release."""
    ctx = build_context()

    decision = decide(
        manual_version=manual_version,
        detected_bump=bump_type,
        detected_version=detected_version,
        current_version=current_version,
    )
    ctx.console.print(f"source: {decision.source}", Style.DIM)
    ctx.console.success(f"version {decision.final_version} ({decision.bump_type})")

    finish(ctx, title="Version decision", success=True, signals=decision.signals())
