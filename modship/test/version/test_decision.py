"""Tests for modship.version.decision module."""

from __future__ import annotations

import pytest

from modship.version.decision import bump_patch, decide_version, parse_core_version


class TestBumpPatch:
    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("0.1.4", "0.1.5"),
            ("1.2.3", "1.2.4"),
            ("v2.0.9", "2.0.10"),
            ("1.2.3-beta.1", "1.2.4"),
            ("1.2.3+build.7", "1.2.4"),
        ],
    )
    def test_increments_patch(self, version: str, expected: str) -> None:
        assert bump_patch(version) == expected

    @pytest.mark.parametrize("version", ["", "   ", None, "1.2", "latest", "01.2.3"])
    def test_unknown_versions_yield_floor(self, version: str | None) -> None:
        assert bump_patch(version) == "0.1.0"


class TestParseCoreVersion:
    def test_core(self) -> None:
        assert parse_core_version(" v1.2.3-rc.1 ") == (1, 2, 3)
        assert parse_core_version("1.2") is None


class TestDecideVersion:
    def test_manual_wins(self) -> None:
        decision = decide_version(
            manual_version="2.0.0",
            detected_bump="minor",
            detected_version="1.3.0",
            current_version="1.2.9",
        )
        assert decision.final_version == "2.0.0"
        assert decision.bump_type == "manual"
        assert decision.source == "manual"
        assert decision.should_release is True

    def test_detected_values_are_used_unmodified(self) -> None:
        decision = decide_version(
            manual_version=None,
            detected_bump="Minor",
            detected_version="1.3.0-preview",
            current_version="1.2.9",
        )
        assert decision.source == "auto"
        assert decision.bump_type == "Minor"
        assert decision.final_version == "1.3.0-preview"

    @pytest.mark.parametrize("bump", ["none", "NONE", "", None])
    def test_no_bump_increments_patch(self, bump: str | None) -> None:
        decision = decide_version(
            manual_version="",
            detected_bump=bump,
            detected_version="9.9.9",
            current_version="0.1.4",
        )
        assert decision.source == "default"
        assert decision.bump_type == "patch"
        assert decision.final_version == "0.1.5"
        assert decision.should_release is True

    def test_bump_without_detected_version_falls_back(self) -> None:
        decision = decide_version(
            manual_version=None,
            detected_bump="major",
            detected_version=None,
            current_version="",
        )
        assert decision.source == "default"
        assert decision.final_version == "0.1.0"

    def test_signals(self) -> None:
        decision = decide_version(
            manual_version=None,
            detected_bump="none",
            detected_version=None,
            current_version="1.0.0",
        )
        assert decision.signals() == {
            "final-version": "1.0.1",
            "should-release": True,
            "bump-type": "patch",
        }
