"""Capability negotiation for optional tools.

An optional tool is never probed by name. Callers attempt to construct and
initialize it and record the outcome:

    match negotiate_smart_release(...):
        case Available(tool):
            tool.release(...)
        case Unavailable(reason):
            console.info(f"smart release unavailable: {reason}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Available[T]:
    """The tool initialized and can be used through ``handle``."""

    handle: T


@dataclass(frozen=True, slots=True)
class Unavailable:
    """The tool could not be initialized. Not an error by itself."""

    reason: str


type Capability[T] = Available[T] | Unavailable
