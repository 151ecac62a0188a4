"""Dependency-ordered module installation.

The registry client does not resolve transitive dependencies over the v3
feed protocol, so callers list packages explicitly, dependencies first. Each
package is installed, case-repaired and imported before the next one, all
through a single ephemeral endpoint.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from modship.core.result import Err, Ok, Result
from modship.output.console import ConsoleProtocol
from modship.registry.case_repair import CaseRepairEngine
from modship.registry.client import RegistryClient
from modship.registry.endpoint import endpoint_scope
from modship.registry.errors import CommandNotFound, EndpointRegistrationError, InstallError
from modship.registry.model import (
    FeedCredentials,
    ModuleSession,
    PackageDescriptor,
    RegistryEndpoint,
    ephemeral_endpoint,
)

__all__ = ["DependencyInstaller", "parse_package_list"]


def parse_package_list(items: Sequence[str]) -> list[PackageDescriptor]:
    """Parse ``Name`` / ``Name@Version`` items, keeping their order.

    Duplicates (case-insensitive) keep their first position.
    """
    out: list[PackageDescriptor] = []
    for item in items:
        text = item.strip()
        if not text:
            continue
        name, _, version = text.partition("@")
        name = name.strip()
        if any(p.same_package(name) for p in out):
            continue
        out.append(PackageDescriptor(name=name, version=version.strip() or None))
    return out


@dataclass(frozen=True, slots=True)
class DependencyInstaller:
    """Installs an explicit package chain into a ModuleSession.

    Attributes:
        client: Registry client.
        repair: Case repair run after every install.
        console: Progress output.
        feed_uri: Feed the ephemeral endpoint points at.
    """

    client: RegistryClient
    repair: CaseRepairEngine
    console: ConsoleProtocol
    feed_uri: str

    def install_chain(
        self,
        packages: Sequence[PackageDescriptor],
        credentials: FeedCredentials,
        *,
        session: ModuleSession | None = None,
        require: Sequence[str] = (),
    ) -> Result[ModuleSession, InstallError | CommandNotFound]:
        """Install, repair and import ``packages`` in order.

        Args:
            packages: Dependencies first.
            credentials: Feed owner and token.
            session: Session to extend; a new one when None.
            require: Commands that must be exported once the chain is imported.

        Returns:
            Ok(session) with every package imported, Err on the first failing
            step (remaining packages are skipped) or on a missing command.
        """
        session = ModuleSession() if session is None else session
        endpoint = ephemeral_endpoint(
            uri=self.feed_uri, owner=credentials.owner, secret=credentials.token
        )

        try:
            with endpoint_scope(self.client, endpoint, self.console):
                for index, package in enumerate(packages):
                    step = self._install_one(package, endpoint, session)
                    if isinstance(step, Err):
                        skipped = tuple(p.name for p in packages[index + 1 :])
                        error = step.error
                        self.console.error(str(error))
                        return Err(
                            InstallError(
                                package=error.package,
                                step=error.step,
                                message=error.message,
                                skipped=skipped,
                            )
                        )
        except EndpointRegistrationError as e:
            first = packages[0].name if packages else endpoint.name
            self.console.error(str(e))
            return Err(InstallError(package=first, step="register", message=str(e.error)))

        missing = [command for command in require if not session.has_command(command)]
        if missing:
            return Err(CommandNotFound(command=missing[0], modules=tuple(session.modules)))
        return Ok(session)

    def _install_one(
        self,
        package: PackageDescriptor,
        endpoint: RegistryEndpoint,
        session: ModuleSession,
    ) -> Result[None, InstallError]:
        if session.has_module(package.name):
            self.console.print(f"{package.name}: already imported")
            return Ok(None)

        self.console.header(f"Install {package}")
        installed = self.client.install(package, endpoint=endpoint)
        if isinstance(installed, Err):
            return Err(
                InstallError(package=package.name, step="install", message=str(installed.error))
            )

        try:
            report = self.repair.repair(package)
        except OSError as e:
            return Err(InstallError(package=package.name, step="repair", message=str(e)))
        if report.renames:
            self.console.print(f"{package.name}: repaired {len(report.renames)} name(s)")

        exported = self.client.import_module(package.name, session=session)
        if isinstance(exported, Err):
            return Err(
                InstallError(package=package.name, step="import", message=str(exported.error))
            )

        session.add(package.name, exported.value)
        self.console.success(f"{package.name}: imported ({len(exported.value)} command(s))")
        return Ok(None)
