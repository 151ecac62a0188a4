"""Smart-release tool: negotiation and invocation.

The tool ships as PowerShell modules on the feed. It is never probed by
name; negotiation installs and imports its modules through the installer and
succeeds only when the session exports its command.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from modship.core.capability import Available, Capability, Unavailable
from modship.core.result import Err, Ok, Result
from modship.registry.client import RegistryClient
from modship.registry.installer import DependencyInstaller
from modship.registry.model import FeedCredentials, ModuleSession, PackageDescriptor
from modship.release.model import ReleaseToolError, SmartReleaseResult

__all__ = ["SmartReleaseTool", "negotiate_smart_release"]


@dataclass(frozen=True, slots=True)
class SmartReleaseTool:
    """An initialized smart-release tool.

    Attributes:
        client: Registry client the command is invoked through.
        session: Session exporting ``command``.
        command: Tool entry point.
        repo_root: Repository the tool tags and releases.
    """

    client: RegistryClient
    session: ModuleSession
    command: str
    repo_root: Path

    def release(self, version: str, notes: str) -> Result[SmartReleaseResult, ReleaseToolError]:
        """Create tags and release, pushing and overwriting existing ones."""
        result = self.client.invoke(
            self.command,
            {
                "TargetVersion": version,
                "ReleaseNotes": notes,
                "RepositoryPath": str(self.repo_root),
                "PushToRemote": True,
                "Force": True,
            },
            session=self.session,
        )
        if isinstance(result, Err):
            return Err(ReleaseToolError(kind="failed", message=str(result.error)))

        outcome = SmartReleaseResult.from_payload(result.value)
        if not outcome.success:
            message = outcome.error or f"{self.command} reported no success"
            return Err(ReleaseToolError(kind="failed", message=message))
        return Ok(outcome)


def negotiate_smart_release(
    *,
    installer: DependencyInstaller,
    packages: Sequence[PackageDescriptor],
    credentials: FeedCredentials,
    command: str,
    client: RegistryClient,
    repo_root: Path,
) -> Capability[SmartReleaseTool]:
    """Install and import the tool's modules.

    Returns:
        Available(tool) when the command is exported, Unavailable otherwise.
    """
    if not packages:
        return Unavailable(reason="no smart release modules configured")

    chain = installer.install_chain(packages, credentials, require=(command,))
    if isinstance(chain, Err):
        return Unavailable(reason=str(chain.error))

    return Available(
        SmartReleaseTool(client=client, session=chain.value, command=command, repo_root=repo_root)
    )
