from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """A module as published on the feed.

    ``name`` is canonical and case-sensitive: it is what the on-disk layout
    must match after repair. Discovery compares names case-insensitively.
    """

    name: str
    version: str | None = None

    @property
    def lower_name(self) -> str:
        return self.name.lower()

    def same_package(self, other_name: str) -> bool:
        return self.name.lower() == other_name.lower()

    def __str__(self) -> str:
        return self.name if self.version is None else f"{self.name}@{self.version}"


@dataclass(frozen=True, slots=True)
class RegistryEndpoint:
    """A credentialed feed registration.

    The secret is excluded from repr so endpoints can be printed safely.
    """

    name: str
    uri: str
    owner: str
    secret: str = field(repr=False)
    trusted: bool = True


def ephemeral_name() -> str:
    return f"modship-{uuid4().hex[:12]}"


def ephemeral_endpoint(*, uri: str, owner: str, secret: str) -> RegistryEndpoint:
    """Endpoint with a unique name, registered for one operation only."""
    return RegistryEndpoint(name=ephemeral_name(), uri=uri, owner=owner, secret=secret)


@dataclass(frozen=True, slots=True)
class FeedCredentials:
    """Owner and token used for both installing and publishing."""

    owner: str
    token: str = field(repr=False)


@dataclass
class ModuleSession:
    """Modules imported so far, and the commands they export.

    Passed from step to step so that commands exported by an earlier import
    stay visible to later steps. Every pwsh invocation re-imports the
    session's modules globally before running its own script.
    """

    modules: list[str] = field(default_factory=list)
    commands: dict[str, str] = field(default_factory=dict)

    def add(self, module: str, exported: tuple[str, ...]) -> None:
        if module not in self.modules:
            self.modules.append(module)
        for command in exported:
            # PowerShell command lookup is case-insensitive.
            self.commands[command.lower()] = module

    def has_command(self, command: str) -> bool:
        return command.lower() in self.commands

    def has_module(self, module: str) -> bool:
        return any(m.lower() == module.lower() for m in self.modules)
