"""Two-tier release creation with floating tags."""

from .gh import ReleaseCli, ensure_gh_available
from .git import TagRepository
from .model import (
    ReleaseError,
    ReleaseExistsConflict,
    ReleaseOutcome,
    ReleaseRequest,
    ReleaseTagSet,
    ReleaseToolError,
    SmartReleaseResult,
)
from .orchestrator import ReleaseOrchestrator
from .semver import derive_tag_set, is_prerelease, parse_version
from .smart import SmartReleaseTool, negotiate_smart_release

__all__ = [
    "ReleaseCli",
    "ReleaseError",
    "ReleaseExistsConflict",
    "ReleaseOrchestrator",
    "ReleaseOutcome",
    "ReleaseRequest",
    "ReleaseTagSet",
    "ReleaseToolError",
    "SmartReleaseResult",
    "SmartReleaseTool",
    "TagRepository",
    "derive_tag_set",
    "ensure_gh_available",
    "is_prerelease",
    "negotiate_smart_release",
    "parse_version",
]
