from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep

from modship.core.result import Err, Ok, Result
from modship.core.structured import as_str_dict, get_str
from modship.output.console import ConsoleProtocol, Style
from modship.platform.process import ProcessError
from modship.platform.process import run as run_process
from modship.release.model import ReleaseError

__all__ = ["ReleaseCli", "ensure_gh_available"]

GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

_NOT_FOUND_MARKERS = ("release not found", "could not find", "not found")


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _is_not_found(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return any(marker in text for marker in _NOT_FOUND_MARKERS)


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


@dataclass(frozen=True, slots=True)
class ReleaseCli:
    """GitHub releases of one repository, through ``gh release``.

    Attributes:
        root: Working directory for gh.
        repo: ``owner/repo``.
        timeout: Seconds per gh invocation.
        console: Echo of every mutating command.
    """

    root: Path
    repo: str
    timeout: float
    console: ConsoleProtocol

    def ensure_available(self) -> Result[None, ReleaseError]:
        return ensure_gh_available()

    def release_exists(self, tag: str) -> Result[bool, ReleaseError]:
        result = self._read(["release", "view", tag, "--json", "tagName"])
        if isinstance(result, Err):
            if _is_not_found(result.error):
                return Ok(False)
            return Err(self._error(f"failed to query release {tag}", result.error))
        return Ok(True)

    def release_url(self, tag: str) -> Result[str, ReleaseError]:
        result = self._read(["release", "view", tag, "--json", "url"])
        if isinstance(result, Err):
            return Err(self._error(f"failed to query release {tag}", result.error))

        try:
            obj: object = json.loads(result.value)
        except json.JSONDecodeError as e:
            return Err(
                ReleaseError(
                    kind="release_failed",
                    message=f"gh release view returned invalid JSON: {e}",
                    hint=tag,
                )
            )
        data = as_str_dict(obj)
        url = get_str(data, "url") if data is not None else None
        if url is None:
            return Err(
                ReleaseError(kind="release_failed", message=f"missing url for release {tag}")
            )
        return Ok(url)

    def create_draft_release(
        self,
        tag: str,
        *,
        title: str,
        notes: str,
        prerelease: bool,
    ) -> Result[str, ReleaseError]:
        """Create a draft release for an existing tag. Returns its URL."""
        cmd = [
            "release",
            "create",
            tag,
            "--verify-tag",
            "--draft",
            "--title",
            title,
            "--notes",
            notes,
            "--generate-notes",
        ]
        if prerelease:
            cmd.append("--prerelease")
        result = self._write(cmd)
        if isinstance(result, Err):
            return Err(self._error(f"failed to create release {tag}", result.error))
        return Ok(result.value.strip())

    def edit_release(self, tag: str, *, draft: bool, latest: bool) -> Result[None, ReleaseError]:
        cmd = ["release", "edit", tag, f"--draft={'true' if draft else 'false'}"]
        if latest:
            cmd.append("--latest")
        result = self._write(cmd)
        if isinstance(result, Err):
            return Err(self._error(f"failed to publish release {tag}", result.error))
        return Ok(None)

    def delete_release(self, tag: str) -> Result[None, ReleaseError]:
        """Delete the release and its remote tag."""
        result = self._write(["release", "delete", tag, "--cleanup-tag", "--yes"])
        if isinstance(result, Err):
            if _is_not_found(result.error):
                return Ok(None)
            return Err(self._error(f"failed to delete release {tag}", result.error))
        return Ok(None)

    def _read(self, args: list[str]) -> Result[str, ProcessError]:
        cmd = ["gh", *args, "--repo", self.repo]
        result: Result[str, ProcessError] = Err(ProcessError(tuple(cmd), -1, "", "not run"))
        for attempt in range(GH_READ_RETRY_ATTEMPTS):
            result = run_process(cmd, cwd=self.root, timeout=self.timeout)
            if isinstance(result, Ok):
                return result
            if attempt < GH_READ_RETRY_ATTEMPTS - 1 and _is_transient_gh_error(result.error):
                sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
                continue
            return result
        return result

    def _write(self, args: list[str]) -> Result[str, ProcessError]:
        self.console.print("gh " + " ".join(args[:3]), Style.DIM)
        return run_process(["gh", *args, "--repo", self.repo], cwd=self.root, timeout=self.timeout)

    def _error(self, message: str, error: ProcessError) -> ReleaseError:
        return ReleaseError(kind="release_failed", message=message, hint=error.detail)
