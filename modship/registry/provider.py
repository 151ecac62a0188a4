"""Provider abstraction commands.

The provider modules wrap the registry client behind fixed commands. modship
only invokes them; every call goes through the session so the commands
exported by the imported provider modules are visible.
"""

from __future__ import annotations

from dataclasses import dataclass

from modship.core.result import Err, Ok, Result
from modship.registry.client import ENV_FEED_TOKEN, EnvRef, RegistryClient
from modship.registry.errors import CommandNotFound, RegistryError
from modship.registry.model import ModuleSession, RegistryEndpoint

__all__ = ["PROVIDER_COMMANDS", "ProviderClient"]

REGISTER_REPOSITORY = "Register-PackageRepo"
PUBLISH_PACKAGE = "Publish-Package"
REMOVE_REPOSITORY = "Remove-PackageRepo"

PROVIDER_COMMANDS: tuple[str, ...] = (REGISTER_REPOSITORY, PUBLISH_PACKAGE, REMOVE_REPOSITORY)


@dataclass(frozen=True, slots=True)
class ProviderClient:
    client: RegistryClient
    session: ModuleSession

    def register_repository(
        self, endpoint: RegistryEndpoint
    ) -> Result[None, RegistryError | CommandNotFound]:
        result = self.client.invoke(
            REGISTER_REPOSITORY,
            {
                "RepositoryName": endpoint.name,
                "RegistryUri": endpoint.uri,
                "Token": EnvRef(ENV_FEED_TOKEN),
                "Trusted": endpoint.trusted,
            },
            session=self.session,
            endpoint=endpoint,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def publish_package(
        self, *, endpoint: RegistryEndpoint, module_name: str, version: str
    ) -> Result[bool, RegistryError | CommandNotFound]:
        """Publish through the provider. Ok(False) if it reported no success."""
        result = self.client.invoke(
            PUBLISH_PACKAGE,
            {
                "RepositoryName": endpoint.name,
                "ModuleName": module_name,
                "Version": version,
                "Token": EnvRef(ENV_FEED_TOKEN),
            },
            session=self.session,
            endpoint=endpoint,
        )
        if isinstance(result, Err):
            return result
        # The provider returns either a bare boolean or nothing on success.
        return Ok(result.value is not False)

    def remove_repository(self, name: str) -> Result[None, RegistryError | CommandNotFound]:
        result = self.client.invoke(
            REMOVE_REPOSITORY, {"RepositoryName": name}, session=self.session
        )
        if isinstance(result, Err):
            return result
        return Ok(None)
