"""Tag operations on the local checkout and its remote.

Usage:
    repo = TagRepository(root=Path("."), timeout=180.0, console=RichConsole())
    match repo.resolve_commit("v1.2.3"):
        case Ok(sha):
            repo.force_tag("v1", sha)
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from modship.core.result import Err, Ok, Result
from modship.output.console import ConsoleProtocol, Style
from modship.platform.process import ProcessError
from modship.platform.process import run as run_process
from modship.release.model import ReleaseError

__all__ = ["TagRepository"]

_MISSING_LOCAL_MARKERS = ("not found",)
_MISSING_REMOTE_MARKERS = ("remote ref does not exist", "unable to delete")


def _mentions(error: ProcessError, markers: tuple[str, ...]) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return any(marker in text for marker in markers)


@dataclass(frozen=True, slots=True)
class TagRepository:
    """Git tags of one checkout.

    Attributes:
        root: Repository root.
        timeout: Seconds per git invocation.
        console: Echo of every mutating command.
        remote: Remote tags are pushed to.
    """

    root: Path
    timeout: float
    console: ConsoleProtocol
    remote: str = "origin"

    def create_annotated_tag(
        self, tag: str, message: str, ref: str = "HEAD"
    ) -> Result[None, ReleaseError]:
        result = self._git(["tag", "-a", tag, ref, "-m", message])
        if isinstance(result, Err):
            return Err(self._error(f"failed to create tag {tag}", result.error))
        return Ok(None)

    def push_tag(self, tag: str, *, force: bool = False) -> Result[None, ReleaseError]:
        cmd = ["push", self.remote, f"refs/tags/{tag}"]
        if force:
            cmd.append("--force")
        result = self._git(cmd)
        if isinstance(result, Err):
            return Err(self._error(f"failed to push tag {tag}", result.error))
        return Ok(None)

    def delete_tag(self, tag: str) -> Result[None, ReleaseError]:
        """Delete a tag locally and on the remote. Missing tags are fine."""
        local = self._git(["tag", "-d", tag])
        if isinstance(local, Err) and not _mentions(local.error, _MISSING_LOCAL_MARKERS):
            return Err(self._error(f"failed to delete local tag {tag}", local.error))

        remote = self._git(["push", self.remote, f":refs/tags/{tag}"])
        if isinstance(remote, Err) and not _mentions(remote.error, _MISSING_REMOTE_MARKERS):
            return Err(self._error(f"failed to delete remote tag {tag}", remote.error))
        return Ok(None)

    def force_tag(self, tag: str, commit: str) -> Result[None, ReleaseError]:
        """Point ``tag`` at ``commit`` locally and force-push it."""
        created = self._git(["tag", "-f", tag, commit])
        if isinstance(created, Err):
            return Err(self._error(f"failed to move tag {tag}", created.error))
        return self.push_tag(tag, force=True)

    def resolve_commit(self, ref: str) -> Result[str, ReleaseError]:
        result = self._git(["rev-parse", f"{ref}^{{commit}}"], echo=False)
        if isinstance(result, Err):
            return Err(self._error(f"failed to resolve {ref}", result.error))
        return Ok(result.value.strip())

    def _git(self, args: list[str], *, echo: bool = True) -> Result[str, ProcessError]:
        if echo:
            self.console.print("git " + " ".join(args[:4]), Style.DIM)
        cmd = ["git", "-C", str(self.root), *args]
        return run_process(cmd, cwd=self.root, timeout=self.timeout)

    def _error(self, message: str, error: ProcessError) -> ReleaseError:
        return ReleaseError(kind="tag_failed", message=message, hint=error.detail)
