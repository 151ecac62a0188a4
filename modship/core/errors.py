"""Exit codes for CLI commands.

CI consumes these directly, so the values must stay stable:
- 0: Success
- 1: Unrecoverable failure (both tiers failed, install chain aborted, ...)
"""

from __future__ import annotations

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @classmethod
    def from_success(cls, success: bool) -> ErrorCode:
        """Map a final success boolean to an exit code."""
        return cls.OK if success else cls.FAILURE
