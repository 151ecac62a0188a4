"""Tests for modship.core.result module."""

import pytest

from modship.core.result import Err, Escalate, Ok, Result, TierResult, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_ok_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or(self) -> None:
        """Ok.unwrap_or() returns the value, ignoring default."""
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_repr(self) -> None:
        assert repr(Ok(42)) == "Ok(42)"


class TestErr:
    """Tests for Err type."""

    def test_err_is_err(self) -> None:
        result = Err("boom")
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map_is_identity(self) -> None:
        err: Err[str] = Err("boom")
        assert err.map(lambda x: x) is err


class TestEscalate:
    """Escalate is neither Ok nor Err."""

    def test_escalate_flags(self) -> None:
        result = Escalate("provider missing")
        assert result.is_ok() is False
        assert result.is_err() is False

    def test_tier_result_matching(self) -> None:
        def classify(result: TierResult[int, str]) -> str:
            match result:
                case Ok(_):
                    return "ok"
                case Escalate(_):
                    return "escalate"
                case Err(_):
                    return "err"

        assert classify(Ok(1)) == "ok"
        assert classify(Escalate("x")) == "escalate"
        assert classify(Err("x")) == "err"


def test_type_guards() -> None:
    ok: Result[int, str] = Ok(1)
    err: Result[int, str] = Err("x")
    assert is_ok(ok) and not is_err(ok)
    assert is_err(err) and not is_ok(err)
