"""Decide the version a run releases.

Precedence:

1. a manual version always wins;
2. an auto-detected bump (anything but ``none``) with a detected version is
   used as-is;
3. otherwise the patch component of the current version is bumped.

Releases are never skipped: ``should_release`` is always True.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

__all__ = [
    "DEFAULT_FLOOR_VERSION",
    "VersionDecision",
    "bump_patch",
    "decide_version",
    "parse_core_version",
]

DecisionSource = Literal["manual", "auto", "default"]

# Returned by bump_patch when the current version is unknown.
DEFAULT_FLOOR_VERSION = "0.1.0"

_CORE_RE = re.compile(r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-+][0-9A-Za-z.+-]*)?$")


@dataclass(frozen=True, slots=True)
class VersionDecision:
    source: DecisionSource
    bump_type: str
    final_version: str
    should_release: bool = True

    def signals(self) -> dict[str, str | bool]:
        return {
            "final-version": self.final_version,
            "should-release": self.should_release,
            "bump-type": self.bump_type,
        }


def parse_core_version(version: str | None) -> tuple[int, int, int] | None:
    """Parse ``[v]MAJOR.MINOR.PATCH[-pre][+build]`` into its numeric core."""
    if version is None:
        return None
    m = _CORE_RE.match(version.strip())
    if m is None:
        return None
    return (int(m.group(1)), int(m.group(2)), int(m.group(3)))


def bump_patch(version: str | None) -> str:
    """Increment the patch component; unknown versions yield the floor version."""
    core = parse_core_version(version)
    if core is None:
        return DEFAULT_FLOOR_VERSION
    major, minor, patch = core
    return f"{major}.{minor}.{patch + 1}"


def decide_version(
    *,
    manual_version: str | None,
    detected_bump: str | None,
    detected_version: str | None,
    current_version: str | None,
) -> VersionDecision:
    manual = (manual_version or "").strip()
    if manual:
        return VersionDecision(source="manual", bump_type="manual", final_version=manual)

    bump = (detected_bump or "").strip()
    detected = (detected_version or "").strip()
    if bump and bump.lower() != "none" and detected:
        return VersionDecision(source="auto", bump_type=bump, final_version=detected)

    return VersionDecision(
        source="default",
        bump_type="patch",
        final_version=bump_patch(current_version),
    )
