"""Version decision logic."""

from .decision import VersionDecision, bump_patch, decide_version

__all__ = ["VersionDecision", "bump_patch", "decide_version"]
