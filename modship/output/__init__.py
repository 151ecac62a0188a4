"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .signals import SignalWriter

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "SignalWriter",
    "Style",
]
