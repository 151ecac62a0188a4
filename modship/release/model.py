from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from modship.core.structured import as_str_dict, get_bool, get_str, get_str_list

ReleaseTier = Literal["smart", "manual"]

ReleaseErrorKind = Literal[
    "gh_missing",
    "invalid_version",
    "invalid_input",
    "tag_failed",
    "release_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}: {self.hint}"
        return self.message


@dataclass(frozen=True, slots=True)
class ReleaseToolError:
    """The smart-release tier cannot (or did not) produce the release.

    ``unavailable`` is expected on runners without the tool and is not
    reported as a warning.
    """

    kind: Literal["unavailable", "failed"]
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ReleaseExistsConflict:
    """A release already exists for the tag; recovered by delete and recreate."""

    tag: str

    def __str__(self) -> str:
        return f"release {self.tag} already exists; replacing it"


@dataclass(frozen=True, slots=True)
class ReleaseTagSet:
    """Base tag plus the floating tags moved onto its commit.

    Attributes:
        base: ``vMAJOR.MINOR.PATCH`` (with the prerelease suffix, if any).
        major: ``vMAJOR``.
        minor: ``vMAJOR.MINOR``.
        latest: ``latest``.
        prerelease: The version carries a prerelease marker.
    """

    base: str
    major: str
    minor: str
    latest: str = "latest"
    prerelease: bool = False

    @property
    def floating(self) -> tuple[str, ...]:
        return (self.major, self.minor, self.latest)


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Inputs of one release.

    Attributes:
        version: Version being released (``1.2.3`` or ``1.2.3-beta``).
        bump_type: Bump that produced the version, for the notes.
        package: Module name.
        repository: ``owner/repo`` the release is created in.
    """

    version: str
    bump_type: str
    package: str
    repository: str


@dataclass(frozen=True, slots=True)
class SmartReleaseResult:
    success: bool
    tags_created: tuple[str, ...] = field(default_factory=tuple)
    release_url: str | None = None
    error: str | None = None

    @classmethod
    def from_payload(cls, obj: object) -> SmartReleaseResult:
        """Map the tool's JSON output (``Success``/``TagsCreated``/...)."""
        data = as_str_dict(obj)
        if data is None:
            return cls(success=False, error="unexpected smart release payload")

        # ConvertTo-Json keeps PowerShell's property casing.
        lowered: dict[str, object] = {k.lower(): v for k, v in data.items()}
        return cls(
            success=bool(get_bool(lowered, "success")),
            tags_created=tuple(get_str_list(lowered, "tagscreated") or ()),
            release_url=get_str(lowered, "releaseurl"),
            error=get_str(lowered, "error"),
        )


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Identical shape for both release tiers."""

    created: bool
    base_tag: str
    release_url: str | None = None
    tier: ReleaseTier | None = None
    error: str | None = None

    def signals(self) -> dict[str, str | bool]:
        return {
            "release-created": self.created,
            "release-tag": self.base_tag,
            "release-url": self.release_url or "",
        }
