"""Tests for modship.release.git module."""

from __future__ import annotations

from pathlib import Path

import pytest

from modship.core.result import Err, Ok, Result
from modship.output.console import MockConsole
from modship.platform.process import ProcessError
from modship.release import git as git_mod
from modship.release.git import TagRepository


class FakeGit:
    def __init__(self, failures: dict[str, str] | None = None) -> None:
        self.failures = failures or {}
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, timeout
        args = cmd[3:]
        self.calls.append(args)
        key = " ".join(args)
        for prefix, stderr in self.failures.items():
            if key.startswith(prefix):
                return Err(ProcessError(tuple(cmd), 1, "", stderr))
        if args[0] == "rev-parse":
            return Ok("abc123\n")
        return Ok("")


def _repo(tmp_path: Path) -> TagRepository:
    return TagRepository(root=tmp_path, timeout=10.0, console=MockConsole())


def test_create_and_push(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGit()
    monkeypatch.setattr(git_mod, "run_process", fake)
    repo = _repo(tmp_path)

    assert repo.create_annotated_tag("v1.2.3", "Release v1.2.3") == Ok(None)
    assert repo.push_tag("v1.2.3") == Ok(None)

    assert fake.calls == [
        ["tag", "-a", "v1.2.3", "HEAD", "-m", "Release v1.2.3"],
        ["push", "origin", "refs/tags/v1.2.3"],
    ]


def test_delete_tag_tolerates_missing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGit(
        {
            "tag -d": "error: tag 'v1' not found.",
            "push origin :refs/tags/v1": "error: unable to delete 'v1': remote ref does not exist",
        }
    )
    monkeypatch.setattr(git_mod, "run_process", fake)

    assert _repo(tmp_path).delete_tag("v1") == Ok(None)
    assert fake.calls == [["tag", "-d", "v1"], ["push", "origin", ":refs/tags/v1"]]


def test_delete_tag_reports_other_errors(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = FakeGit({"push origin :refs": "fatal: Authentication failed"})
    monkeypatch.setattr(git_mod, "run_process", fake)

    result = _repo(tmp_path).delete_tag("v1")

    assert isinstance(result, Err)
    assert result.error.kind == "tag_failed"
    assert result.error.hint == "fatal: Authentication failed"


def test_force_tag(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGit()
    monkeypatch.setattr(git_mod, "run_process", fake)

    assert _repo(tmp_path).force_tag("latest", "abc123") == Ok(None)
    assert fake.calls == [
        ["tag", "-f", "latest", "abc123"],
        ["push", "origin", "refs/tags/latest", "--force"],
    ]


def test_resolve_commit(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGit()
    monkeypatch.setattr(git_mod, "run_process", fake)

    assert _repo(tmp_path).resolve_commit("v1.2.3") == Ok("abc123")
    assert fake.calls == [["rev-parse", "v1.2.3^{commit}"]]
