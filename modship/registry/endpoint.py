"""Scoped registration of feed endpoints.

An endpoint registered for an operation is removed when the operation ends,
on every exit path:

    with endpoint_scope(client, endpoint, console):
        client.install(package, endpoint=endpoint)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from modship.core.result import Err, Result
from modship.output.console import ConsoleProtocol, Style
from modship.registry.client import RegistryClient
from modship.registry.errors import CommandNotFound, EndpointRegistrationError, RegistryError
from modship.registry.model import RegistryEndpoint

__all__ = ["Registrar", "Remover", "endpoint_scope"]

type Registrar = Callable[[RegistryEndpoint], Result[None, RegistryError | CommandNotFound]]
type Remover = Callable[[str], Result[None, RegistryError | CommandNotFound]]


@contextmanager
def endpoint_scope(
    client: RegistryClient,
    endpoint: RegistryEndpoint,
    console: ConsoleProtocol,
    *,
    register: Registrar | None = None,
    remove: Remover | None = None,
) -> Iterator[RegistryEndpoint]:
    """Register ``endpoint`` for the duration of the block.

    Args:
        client: Registry client used when no custom registrar/remover is given.
        endpoint: Endpoint to register.
        console: Progress output.
        register: Alternative registration (e.g. through the provider abstraction).
        remove: Alternative removal. Defaults to the registry client.

    Raises:
        EndpointRegistrationError: Registration failed. Removal is still attempted.
    """
    registrar: Registrar = register or client.register_repository
    remover: Remover = remove or client.unregister_repository

    console.print(f"register repository {endpoint.name} -> {endpoint.uri}", Style.DIM)
    try:
        registered = registrar(endpoint)
        if isinstance(registered, Err):
            raise EndpointRegistrationError(endpoint.name, registered.error)
        yield endpoint
    finally:
        console.print(f"remove repository {endpoint.name}", Style.DIM)
        removed = remover(endpoint.name)
        if isinstance(removed, Err) and remove is not None:
            # The custom remover may not know the endpoint; the client always can.
            removed = client.unregister_repository(endpoint.name)
        if isinstance(removed, Err):
            # Never mask the error that ended the block.
            console.warning(f"failed to remove repository {endpoint.name}: {removed.error}")
