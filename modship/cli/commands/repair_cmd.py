from __future__ import annotations

from pathlib import Path

import typer

from modship.cli.commands._helpers import build_repair_engine
from modship.cli.context import build_context
from modship.core.errors import ErrorCode
from modship.output.console import Style
from modship.registry.case_repair import CaseRepairEngine
from modship.registry.installer import parse_package_list


def repair(
    packages: list[str] = typer.Argument(..., help="Installed packages to repair"),
    module_root: Path | None = typer.Option(
        None, "--module-root", help="Override the module install root", show_default=False
    ),
    force: bool = typer.Option(
        False, "--force", help="Repair even if the filesystem is case-insensitive"
    ),
) -> None:
    """Restore canonical casing of installed package trees."""
    ctx = build_context()

    engine = build_repair_engine(ctx)
    if module_root is not None or force:
        engine = CaseRepairEngine(
            module_root=module_root.expanduser() if module_root else engine.module_root,
            console=ctx.console,
            case_sensitive=True if force else engine.case_sensitive,
            extra_filenames=engine.extra_filenames,
        )

    ctx.console.print(f"module root: {engine.module_root}", Style.DIM)
    if not engine.applies():
        ctx.console.info("filesystem is case-insensitive; nothing to repair")
        return

    failed = False
    for package in parse_package_list(packages):
        try:
            report = engine.repair(package)
        except OSError as e:
            ctx.console.error(f"{package.name}: {e}")
            failed = True
            continue
        if report.warnings:
            continue
        if report.changed:
            ctx.console.success(f"{package.name}: {len(report.renames)} rename(s)")
        else:
            ctx.console.success(f"{package.name}: already canonical")

    if failed:
        raise typer.Exit(code=int(ErrorCode.FAILURE))
