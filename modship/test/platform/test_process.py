"""Tests for modship.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from modship.core.result import Err, Ok
from modship.platform.process import ProcessError, run


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "tag"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git tag failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "release", "create", "v1.2.3", "--draft"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "gh release create ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out", "").detail == "out"
        assert ProcessError(("x",), 2, "", "").detail == "x failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        code = "import sys; sys.stderr.write('bad'); sys.exit(3)"
        result = run([sys.executable, "-c", code], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "bad"

    def test_env_is_layered_over_environment(self, tmp_path: Path) -> None:
        code = "import os; print(os.environ['MODSHIP_TEST_VALUE'], bool(os.environ.get('PATH')))"
        result = run([sys.executable, "-c", code], cwd=tmp_path, env={"MODSHIP_TEST_VALUE": "42"})

        assert isinstance(result, Ok)
        assert result.value.split() == ["42", "True"]

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["modship-definitely-missing-binary"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
        result = run(cmd, cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr
