from __future__ import annotations

from pathlib import Path

import pytest
import typer

from modship.cli.context import CLIContext
from modship.core.config import CaseRepairConfig, Config
from modship.core.errors import ErrorCode
from modship.core.result import Err, Ok
from modship.output.console import MockConsole
from modship.output.signals import SignalWriter
from modship.registry.errors import RegistryError
from modship.registry.provider import PROVIDER_COMMANDS
from modship.test.fakes import FakeRegistryClient, FakeReleases, FakeTags


def _ctx(tmp_path: Path, console: MockConsole | None = None) -> CLIContext:
    console = console or MockConsole()
    config = Config(
        case_repair=CaseRepairConfig(module_root=str(tmp_path / "Modules"), case_sensitive=True)
    )
    return CLIContext(
        cwd=tmp_path,
        config=config,
        console=console,
        signals=SignalWriter(
            output_path=tmp_path / "github_output",
            summary_path=tmp_path / "step_summary",
            console=console,
        ),
    )


def _outputs(tmp_path: Path) -> dict[str, str]:
    text = (tmp_path / "github_output").read_text(encoding="utf-8")
    return dict(line.split("=", 1) for line in text.splitlines())


def _summary(tmp_path: Path) -> str:
    return (tmp_path / "step_summary").read_text(encoding="utf-8")


class TestDecideVersion:
    def test_writes_signals(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import modship.cli.commands.version_cmd as version_cmd

        monkeypatch.setattr(version_cmd, "build_context", lambda: _ctx(tmp_path))

        with pytest.raises(typer.Exit) as exc:
            version_cmd.decide_version(
                manual_version=None,
                bump_type="none",
                detected_version=None,
                current_version="0.1.4",
            )

        assert exc.value.exit_code == int(ErrorCode.OK)
        assert _outputs(tmp_path) == {
            "final-version": "0.1.5",
            "should-release": "true",
            "bump-type": "patch",
        }
        assert "**Success:** `true`" in _summary(tmp_path)


class TestPublish:
    def _setup(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> tuple[FakeRegistryClient, MockConsole]:
        import modship.cli.commands.publish_cmd as publish_cmd

        (tmp_path / "Modules").mkdir()
        (tmp_path / "Widget").mkdir()
        (tmp_path / "Widget" / "Widget.psd1").write_text("@{}", encoding="utf-8")
        client = FakeRegistryClient(
            module_root=tmp_path / "Modules",
            exports={"K.PSGallery.PackageRepoProvider": PROVIDER_COMMANDS},
        )
        console = MockConsole()
        monkeypatch.setattr(publish_cmd, "build_context", lambda: _ctx(tmp_path, console))
        monkeypatch.setattr(publish_cmd, "build_client", lambda _ctx: Ok(client))
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
        return client, console

    def _run(self) -> int:
        import modship.cli.commands.publish_cmd as publish_cmd

        with pytest.raises(typer.Exit) as exc:
            publish_cmd.publish(
                name="Widget", version="1.4.0", path=Path("."), owner="acme", token=None
            )
        return exc.value.exit_code

    def test_success(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        client, _ = self._setup(tmp_path, monkeypatch)

        assert self._run() == int(ErrorCode.OK)
        assert _outputs(tmp_path) == {"package-published": "true"}
        assert client.registered == []

    def test_both_tiers_fail_exit_1(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        client, console = self._setup(tmp_path, monkeypatch)
        client.fail_install.add("K.PSGallery.LoggingModule")
        client.publish_error = "409 Conflict: Widget 1.4.0 already exists"

        assert self._run() == int(ErrorCode.FAILURE)
        assert _outputs(tmp_path) == {"package-published": "false"}
        summary = _summary(tmp_path)
        assert "**Success:** `false`" in summary
        assert "409 Conflict: Widget 1.4.0 already exists" in summary
        assert console.has_error()

    def test_missing_token_reports_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _, console = self._setup(tmp_path, monkeypatch)
        monkeypatch.delenv("GITHUB_TOKEN")

        assert self._run() == int(ErrorCode.FAILURE)
        assert console.find("missing feed token")
        assert _outputs(tmp_path) == {"package-published": "false"}
        assert "missing feed token (--token or GITHUB_TOKEN)" in _summary(tmp_path)

    def test_missing_pwsh_reports_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import modship.cli.commands.publish_cmd as publish_cmd

        self._setup(tmp_path, monkeypatch)
        missing = RegistryError(kind="pwsh_missing", message="pwsh: missing")
        monkeypatch.setattr(publish_cmd, "build_client", lambda _ctx: Err(missing))

        assert self._run() == int(ErrorCode.FAILURE)
        assert _outputs(tmp_path) == {"package-published": "false"}
        summary = _summary(tmp_path)
        assert "**Success:** `false`" in summary
        assert "pwsh: missing" in summary


class TestRelease:
    def _run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, *, repo: str) -> int:
        import modship.cli.commands.release_cmd as release_cmd

        tags = FakeTags()
        monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))
        monkeypatch.setattr(release_cmd, "TagRepository", lambda **_: tags)
        monkeypatch.setattr(release_cmd, "ReleaseCli", lambda **_: FakeReleases(tags=tags))

        with pytest.raises(typer.Exit) as exc:
            release_cmd.release(
                version="1.2.3",
                package="Widget",
                bump_type="patch",
                repository=repo,
                token=None,
                no_smart=True,
            )
        return exc.value.exit_code

    def test_manual_release(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(tmp_path, monkeypatch, repo="acme/Widget") == int(ErrorCode.OK)

        outputs = _outputs(tmp_path)
        assert outputs["release-created"] == "true"
        assert outputs["release-tag"] == "v1.2.3"
        assert outputs["release-url"] == "https://github.com/acme/Widget/releases/tag/v1.2.3"

    def test_invalid_repository(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)

        assert self._run(tmp_path, monkeypatch, repo="") == int(ErrorCode.FAILURE)
        assert _outputs(tmp_path) == {
            "release-created": "false",
            "release-tag": "",
            "release-url": "",
        }
        assert "invalid repository '' (expected owner/repo)" in _summary(tmp_path)
