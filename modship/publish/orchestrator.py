"""Two-tier module publishing.

Primary tier: install the provider abstraction through the dependency-ordered
installer and publish through its commands. Any failure there escalates,
once, to the fallback tier: register the target endpoint directly and publish
the discovered manifest with the registry client.

The target endpoint is removed at the end of whichever tier registered it,
whatever the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from modship.core.result import Err, Escalate, Ok, Result, TierResult
from modship.output.console import ConsoleProtocol, Style
from modship.publish.discovery import DiscoveryError, discover_manifest
from modship.registry.client import RegistryClient
from modship.registry.endpoint import endpoint_scope
from modship.registry.errors import EndpointRegistrationError
from modship.registry.installer import DependencyInstaller
from modship.registry.model import (
    FeedCredentials,
    ModuleSession,
    PackageDescriptor,
    RegistryEndpoint,
)
from modship.registry.provider import PROVIDER_COMMANDS, ProviderClient

__all__ = [
    "PublishAttempt",
    "PublishError",
    "PublishOrchestrator",
    "PublishReport",
    "PublishRequest",
]

PublishTier = Literal["primary", "fallback"]


@dataclass(frozen=True, slots=True)
class PublishRequest:
    """What to publish, and where.

    Attributes:
        package: Module name and version.
        credentials: Feed owner and token.
        target_name: Fixed name of the target endpoint. Not safe to share
            between concurrent runs.
        feed_uri: Feed URI of the target endpoint.
        search_root: Root of the manifest search for the fallback tier.
    """

    package: PackageDescriptor
    credentials: FeedCredentials
    target_name: str
    feed_uri: str
    search_root: Path

    def target_endpoint(self) -> RegistryEndpoint:
        return RegistryEndpoint(
            name=self.target_name,
            uri=self.feed_uri,
            owner=self.credentials.owner,
            secret=self.credentials.token,
        )


@dataclass(frozen=True, slots=True)
class PublishError:
    tier: PublishTier
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class PublishAttempt:
    tier: PublishTier
    outcome: Literal["published", "escalated", "failed"]
    error: str | None = None


@dataclass(frozen=True, slots=True)
class PublishReport:
    published: bool
    attempts: tuple[PublishAttempt, ...] = field(default_factory=tuple)
    manifest_path: Path | None = None
    error: str | None = None

    @property
    def tier(self) -> PublishTier | None:
        for attempt in self.attempts:
            if attempt.outcome == "published":
                return attempt.tier
        return None

    def signals(self) -> dict[str, str | bool]:
        return {"package-published": self.published}


@dataclass(frozen=True, slots=True)
class PublishOrchestrator:
    """Publishes one module version.

    Attributes:
        client: Registry client for the direct tier.
        installer: Installs the provider abstraction for the primary tier.
        provider_packages: Provider modules, dependencies first.
        console: Progress output.
    """

    client: RegistryClient
    installer: DependencyInstaller
    provider_packages: tuple[PackageDescriptor, ...]
    console: ConsoleProtocol

    def publish(self, request: PublishRequest) -> PublishReport:
        session = ModuleSession()
        target = request.target_endpoint()

        self.console.header(f"Publish {request.package} (provider)")
        primary = self._publish_with_provider(request, target, session)
        match primary:
            case Ok(_):
                self.console.success(f"published {request.package} via provider")
                return PublishReport(
                    published=True,
                    attempts=(PublishAttempt(tier="primary", outcome="published"),),
                )
            case Escalate(reason) | Err(reason):
                self.console.warning(f"provider publish failed, falling back: {reason}")
                first = PublishAttempt(tier="primary", outcome="escalated", error=str(reason))

        self.console.header(f"Publish {request.package} (direct)")
        fallback = self._publish_direct(request, target, session)
        if isinstance(fallback, Err):
            self.console.error(f"publish failed: {fallback.error}")
            return PublishReport(
                published=False,
                attempts=(
                    first,
                    PublishAttempt(tier="fallback", outcome="failed", error=str(fallback.error)),
                ),
                error=str(fallback.error),
            )

        self.console.success(f"published {request.package} from {fallback.value}")
        return PublishReport(
            published=True,
            attempts=(first, PublishAttempt(tier="fallback", outcome="published")),
            manifest_path=fallback.value,
        )

    def _publish_with_provider(
        self,
        request: PublishRequest,
        target: RegistryEndpoint,
        session: ModuleSession,
    ) -> TierResult[None, PublishError]:
        chain = self.installer.install_chain(
            self.provider_packages,
            request.credentials,
            session=session,
            require=PROVIDER_COMMANDS,
        )
        if isinstance(chain, Err):
            return Escalate(PublishError(tier="primary", message=str(chain.error)))

        provider = ProviderClient(client=self.client, session=session)
        version = request.package.version or ""
        try:
            with endpoint_scope(
                self.client,
                target,
                self.console,
                register=provider.register_repository,
                remove=provider.remove_repository,
            ):
                published = provider.publish_package(
                    endpoint=target,
                    module_name=request.package.name,
                    version=version,
                )
        except (EndpointRegistrationError, OSError) as e:
            return Escalate(PublishError(tier="primary", message=str(e)))

        if isinstance(published, Err):
            return Escalate(PublishError(tier="primary", message=str(published.error)))
        if not published.value:
            return Escalate(PublishError(tier="primary", message="provider reported no success"))
        return Ok(None)

    def _publish_direct(
        self,
        request: PublishRequest,
        target: RegistryEndpoint,
        session: ModuleSession,
    ) -> Result[Path, PublishError]:
        try:
            with endpoint_scope(self.client, target, self.console):
                discovery = discover_manifest(
                    request.package.name,
                    request.search_root,
                    client=self.client,
                    session=session,
                )
                for warning in discovery.warnings:
                    self.console.warning(warning)
                manifest = discovery.manifest_path
                assert manifest is not None
                self.console.print(f"manifest: {manifest} ({discovery.method})", Style.DIM)

                result = self.client.publish(manifest_path=manifest, endpoint=target)
        except (EndpointRegistrationError, DiscoveryError, OSError) as e:
            return Err(PublishError(tier="fallback", message=str(e)))

        if isinstance(result, Err):
            return Err(PublishError(tier="fallback", message=str(result.error)))
        return Ok(manifest)
