"""Result types for explicit error handling.

Every fallible operation in modship returns a value instead of raising:

    match install_chain(...):
        case Ok(session):
            ...
        case Err(error):
            console.error(error.message)

Tiered strategies (publish, release) use a third variant. A primary tier
returns ``Escalate(error)`` to hand control to the fallback tier; the
orchestrator decides what happens next, so no exception has to unwind across
tiers:

    match primary(...):
        case Ok(value):
            return Ok(value)
        case Escalate(reason):
            console.warning(f"falling back: {reason}")
            return fallback(...)
        case Err(error):
            return Err(error)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeGuard, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply f to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise ValueError; an Err carries no value."""
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


@dataclass(frozen=True, slots=True)
class Escalate[E]:
    """A primary tier gave up and asks for the fallback tier.

    Only primary tiers return this. The orchestrator runs the fallback at most
    once per operation.

    Attributes:
        reason: The error that triggered escalation.
    """

    reason: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Escalate({self.reason!r})"


type Result[T, E] = Ok[T] | Err[E]

# Returned by primary tiers of a two-tier strategy.
type TierResult[T, E] = Ok[T] | Escalate[E] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow a Result to Ok for static type checkers."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow a Result to Err for static type checkers."""
    return isinstance(result, Err)
