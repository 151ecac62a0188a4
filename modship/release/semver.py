from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from modship.release.model import ReleaseTagSet

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z][0-9A-Za-z.-]*))?(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    def to_tag(self) -> str:
        tag = f"v{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            tag += f"-{self.prerelease}"
        return tag


def parse_version(version: str) -> SemVer | None:
    """Parse ``[v]MAJOR.MINOR.PATCH[-pre][+build]``. Build metadata is dropped."""
    m = _VERSION_RE.match(version.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def is_prerelease(version: str, markers: Sequence[str]) -> bool:
    """True if any prerelease marker appears in the version (case-insensitive)."""
    lowered = version.lower()
    return any(marker.lower() in lowered for marker in markers)


def derive_tag_set(version: str, markers: Sequence[str]) -> ReleaseTagSet | None:
    parsed = parse_version(version)
    if parsed is None:
        return None
    return ReleaseTagSet(
        base=parsed.to_tag(),
        major=f"v{parsed.major}",
        minor=f"v{parsed.major}.{parsed.minor}",
        prerelease=is_prerelease(version, markers),
    )
