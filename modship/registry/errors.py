from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

RegistryErrorKind = Literal[
    "pwsh_missing",
    "register_failed",
    "unregister_failed",
    "install_failed",
    "import_failed",
    "command_not_found",
    "command_failed",
    "publish_failed",
    "invalid_output",
]

InstallStep = Literal["register", "install", "repair", "import"]


@dataclass(frozen=True, slots=True)
class RegistryError:
    kind: RegistryErrorKind
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}: {self.hint}"
        return self.message


@dataclass(frozen=True, slots=True)
class CommandNotFound:
    """A command was invoked that no imported module exports."""

    command: str
    modules: tuple[str, ...]

    def __str__(self) -> str:
        imported = ", ".join(self.modules) or "none"
        return f"command not found: {self.command} (imported modules: {imported})"


@dataclass(frozen=True, slots=True)
class InstallError:
    """A step of the dependency chain failed; later packages were skipped."""

    package: str
    step: InstallStep
    message: str
    skipped: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.step} {self.package} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class CaseRepairWarning:
    """Non-fatal case repair problem. Logged, never propagated."""

    package: str
    message: str

    def __str__(self) -> str:
        return f"{self.package}: {self.message}"


class EndpointRegistrationError(Exception):
    """Raised by ``endpoint_scope`` when the endpoint cannot be registered.

    Fatal to the current tier. The scope still attempts removal.
    """

    def __init__(self, endpoint_name: str, error: RegistryError | CommandNotFound) -> None:
        super().__init__(f"failed to register repository {endpoint_name}: {error}")
        self.endpoint_name = endpoint_name
        self.error = error
