from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from modship.core.config import CONFIG_FILENAME, Config, load_config_or_default
from modship.core.errors import ErrorCode
from modship.core.result import Err
from modship.output.console import ConsoleProtocol, RichConsole
from modship.output.signals import SignalWriter

ENV_CONFIG = "MODSHIP_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: Config
    console: ConsoleProtocol
    signals: SignalWriter


def config_path(cwd: Path) -> Path:
    override = os.environ.get(ENV_CONFIG, "").strip()
    if override:
        return Path(override).expanduser()
    return cwd / CONFIG_FILENAME


def build_context() -> CLIContext:
    cwd = Path.cwd()
    path = config_path(cwd)

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    console = RichConsole()
    return CLIContext(
        cwd=cwd,
        config=config_result.value,
        console=console,
        signals=SignalWriter.from_env(console),
    )
