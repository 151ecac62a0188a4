"""Two-tier release creation.

Primary tier: the smart-release tool, when it can be negotiated. Fallback
tier: the same externally visible result built from git and gh directly.

Manual tier order:
    1. compose release notes
    2. replace an existing release for the base tag (delete, settle), or
       clear a base tag left without a release by an interrupted run
    3. create and push the annotated base tag
    4. create a draft release
    5. move the floating tags (vMAJOR, vMAJOR.MINOR, latest) to the base commit
    6. publish the draft (stable releases also become latest)
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from modship.core.capability import Capability, Unavailable
from modship.core.config import DEFAULT_PRERELEASE_MARKERS, DEFAULT_SETTLE_SECONDS
from modship.core.result import Err, Escalate, Ok, Result, TierResult
from modship.output.console import ConsoleProtocol
from modship.release.model import (
    ReleaseError,
    ReleaseExistsConflict,
    ReleaseOutcome,
    ReleaseRequest,
    ReleaseTagSet,
    ReleaseToolError,
    SmartReleaseResult,
)
from modship.release.notes import compose_release_notes, release_title
from modship.release.semver import derive_tag_set

__all__ = [
    "ReleaseOperations",
    "ReleaseOrchestrator",
    "SmartReleaser",
    "TagOperations",
]


class TagOperations(Protocol):
    def create_annotated_tag(
        self, tag: str, message: str, ref: str = "HEAD"
    ) -> Result[None, ReleaseError]: ...

    def push_tag(self, tag: str, *, force: bool = False) -> Result[None, ReleaseError]: ...

    def delete_tag(self, tag: str) -> Result[None, ReleaseError]: ...

    def force_tag(self, tag: str, commit: str) -> Result[None, ReleaseError]: ...

    def resolve_commit(self, ref: str) -> Result[str, ReleaseError]: ...


class ReleaseOperations(Protocol):
    def ensure_available(self) -> Result[None, ReleaseError]: ...

    def release_exists(self, tag: str) -> Result[bool, ReleaseError]: ...

    def release_url(self, tag: str) -> Result[str, ReleaseError]: ...

    def create_draft_release(
        self, tag: str, *, title: str, notes: str, prerelease: bool
    ) -> Result[str, ReleaseError]: ...

    def edit_release(
        self, tag: str, *, draft: bool, latest: bool
    ) -> Result[None, ReleaseError]: ...

    def delete_release(self, tag: str) -> Result[None, ReleaseError]: ...


class SmartReleaser(Protocol):
    def release(self, version: str, notes: str) -> Result[SmartReleaseResult, ReleaseToolError]: ...


type SmartNegotiator = Callable[[], Capability[SmartReleaser]]


def _no_smart_release() -> Capability[SmartReleaser]:
    return Unavailable(reason="smart release disabled")


@dataclass(frozen=True, slots=True)
class ReleaseOrchestrator:
    """Creates one release with its tags.

    Attributes:
        tags: Git tag operations.
        releases: Hosted release operations.
        console: Progress output.
        negotiate_smart: Attempts to initialize the smart-release tool.
        settle_seconds: Wait after deleting a conflicting release.
        prerelease_markers: Version substrings marking a prerelease.
        sleep: Delay function (patched in tests).
    """

    tags: TagOperations
    releases: ReleaseOperations
    console: ConsoleProtocol
    negotiate_smart: SmartNegotiator = _no_smart_release
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    prerelease_markers: Sequence[str] = field(default=DEFAULT_PRERELEASE_MARKERS)
    sleep: Callable[[float], None] = time.sleep

    def release(self, request: ReleaseRequest) -> ReleaseOutcome:
        tag_set = derive_tag_set(request.version, self.prerelease_markers)
        if tag_set is None:
            message = f"invalid version: {request.version!r} (expected MAJOR.MINOR.PATCH)"
            self.console.error(message)
            return ReleaseOutcome(created=False, base_tag="", error=message)

        self.console.header(f"Release {request.package} {tag_set.base}")
        match self._release_smart(request, tag_set):
            case Ok(url):
                self.console.success(f"released {tag_set.base} via smart release")
                return ReleaseOutcome(
                    created=True, base_tag=tag_set.base, release_url=url, tier="smart"
                )
            case Escalate(reason):
                self.console.warning(f"smart release failed, falling back: {reason}")
            case Err(reason):
                self.console.info(f"smart release unavailable: {reason}")

        manual = self._release_manual(request, tag_set)
        if isinstance(manual, Err):
            self.console.error(str(manual.error))
            return ReleaseOutcome(
                created=False, base_tag=tag_set.base, tier="manual", error=str(manual.error)
            )

        self.console.success(f"released {tag_set.base}")
        return ReleaseOutcome(
            created=True, base_tag=tag_set.base, release_url=manual.value, tier="manual"
        )

    def _release_smart(
        self, request: ReleaseRequest, tag_set: ReleaseTagSet
    ) -> TierResult[str | None, ReleaseToolError]:
        """Err means the tool is unavailable, Escalate that it failed."""
        capability = self.negotiate_smart()
        if isinstance(capability, Unavailable):
            return Err(ReleaseToolError(kind="unavailable", message=capability.reason))
        tool = capability.handle

        notes = compose_release_notes(request=request, tag_set=tag_set, include_floating_tags=True)
        result = tool.release(request.version, notes)
        if isinstance(result, Err):
            return Escalate(result.error)
        return Ok(result.value.release_url)

    def _release_manual(
        self, request: ReleaseRequest, tag_set: ReleaseTagSet
    ) -> Result[str | None, ReleaseError]:
        available = self.releases.ensure_available()
        if isinstance(available, Err):
            return available

        notes = compose_release_notes(request=request, tag_set=tag_set, include_floating_tags=False)
        base = tag_set.base

        exists = self.releases.release_exists(base)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            replaced = self._replace_existing(base)
            if isinstance(replaced, Err):
                return replaced
        else:
            cleared = self.tags.delete_tag(base)
            if isinstance(cleared, Err):
                return cleared

        created = self.tags.create_annotated_tag(base, f"Release {base}")
        if isinstance(created, Err):
            return created
        pushed = self.tags.push_tag(base)
        if isinstance(pushed, Err):
            return pushed

        draft = self.releases.create_draft_release(
            base,
            title=release_title(request, tag_set),
            notes=notes,
            prerelease=tag_set.prerelease,
        )
        if isinstance(draft, Err):
            return draft

        moved = self._move_floating_tags(tag_set)
        if isinstance(moved, Err):
            return moved

        published = self.releases.edit_release(base, draft=False, latest=not tag_set.prerelease)
        if isinstance(published, Err):
            return published

        url = self.releases.release_url(base)
        if isinstance(url, Ok):
            return Ok(url.value)
        return Ok(draft.value or None)

    def _replace_existing(self, base: str) -> Result[None, ReleaseError]:
        self.console.warning(str(ReleaseExistsConflict(tag=base)))
        deleted = self.releases.delete_release(base)
        if isinstance(deleted, Err):
            return deleted
        removed = self.tags.delete_tag(base)
        if isinstance(removed, Err):
            return removed
        if self.settle_seconds > 0:
            self.sleep(self.settle_seconds)
        return Ok(None)

    def _move_floating_tags(self, tag_set: ReleaseTagSet) -> Result[None, ReleaseError]:
        commit = self.tags.resolve_commit(tag_set.base)
        if isinstance(commit, Err):
            return commit

        for tag in tag_set.floating:
            deleted = self.tags.delete_tag(tag)
            if isinstance(deleted, Err):
                return deleted
            forced = self.tags.force_tag(tag, commit.value)
            if isinstance(forced, Err):
                return forced
        return Ok(None)
