"""Output signals and step summary for the CI collaborator.

The workflow reads these keys from ``$GITHUB_OUTPUT``:

    final-version, should-release, bump-type,
    package-published, release-created, release-tag, release-url

A Markdown report is appended to ``$GITHUB_STEP_SUMMARY``. Outside CI both
files are absent and the signals are echoed to the console instead.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from modship.output.console import ConsoleProtocol, Style

__all__ = ["SignalWriter", "format_signal", "render_summary"]

_ENV_OUTPUT = "GITHUB_OUTPUT"
_ENV_SUMMARY = "GITHUB_STEP_SUMMARY"


def _render_value(value: str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def format_signal(key: str, value: str | bool) -> str:
    """Format one signal in the GITHUB_OUTPUT file syntax.

    Multi-line values use a heredoc with a random delimiter.
    """
    text = _render_value(value)
    if "\n" not in text:
        return f"{key}={text}\n"
    delimiter = f"ghadelim_{uuid4().hex}"
    return f"{key}<<{delimiter}\n{text}\n{delimiter}\n"


def render_summary(
    *,
    title: str,
    success: bool,
    details: Mapping[str, str | bool],
    error: str | None,
) -> str:
    lines = [f"## {title}", "", f"**Success:** `{_render_value(success)}`", ""]
    if details:
        lines.append("| Key | Value |")
        lines.append("| --- | --- |")
        for key, value in details.items():
            lines.append(f"| {key} | `{_render_value(value)}` |")
        lines.append("")
    if error is not None:
        lines.append("### Error")
        lines.append("")
        lines.append("```")
        lines.append(error.rstrip())
        lines.append("```")
        lines.append("")
    return "\n".join(lines) + "\n"


@dataclass(frozen=True, slots=True)
class SignalWriter:
    """Writes output signals and the step summary.

    Attributes:
        output_path: GITHUB_OUTPUT file, None outside CI.
        summary_path: GITHUB_STEP_SUMMARY file, None outside CI.
        console: Where signals are echoed when no output file is set.
    """

    output_path: Path | None
    summary_path: Path | None
    console: ConsoleProtocol

    @classmethod
    def from_env(
        cls, console: ConsoleProtocol, env: Mapping[str, str] | None = None
    ) -> SignalWriter:
        environ = os.environ if env is None else env
        output = environ.get(_ENV_OUTPUT, "").strip()
        summary = environ.get(_ENV_SUMMARY, "").strip()
        return cls(
            output_path=Path(output) if output else None,
            summary_path=Path(summary) if summary else None,
            console=console,
        )

    def emit(self, signals: Mapping[str, str | bool]) -> None:
        if self.output_path is None:
            for key, value in signals.items():
                self.console.print(f"{key}={_render_value(value)}", Style.DIM)
            return

        with self.output_path.open("a", encoding="utf-8") as handle:
            for key, value in signals.items():
                handle.write(format_signal(key, value))

    def summarize(
        self,
        *,
        title: str,
        success: bool,
        details: Mapping[str, str | bool],
        error: str | None = None,
    ) -> None:
        if self.summary_path is None:
            return
        text = render_summary(title=title, success=success, details=details, error=error)
        with self.summary_path.open("a", encoding="utf-8") as handle:
            handle.write(text)
