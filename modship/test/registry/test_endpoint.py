"""Tests for modship.registry.endpoint module."""

from __future__ import annotations

from pathlib import Path

import pytest

from modship.core.result import Err, Ok, Result
from modship.output.console import MockConsole
from modship.registry.endpoint import endpoint_scope
from modship.registry.errors import CommandNotFound, EndpointRegistrationError, RegistryError
from modship.registry.model import RegistryEndpoint, ephemeral_endpoint
from modship.test.fakes import FakeRegistryClient


def _endpoint() -> RegistryEndpoint:
    return ephemeral_endpoint(uri="https://feed", owner="acme", secret="s")


class TestEndpointScope:
    def test_removed_after_block(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path)
        endpoint = _endpoint()

        with endpoint_scope(client, endpoint, MockConsole()):
            assert client.registered == [endpoint.name]

        assert client.registered == []
        assert client.calls == [f"register:{endpoint.name}", f"unregister:{endpoint.name}"]

    def test_removed_when_block_raises(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path)
        endpoint = _endpoint()

        with pytest.raises(RuntimeError, match="boom"):
            with endpoint_scope(client, endpoint, MockConsole()):
                raise RuntimeError("boom")

        assert client.registered == []

    def test_registration_failure_raises_and_still_removes(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path, fail_register={"*"})
        endpoint = _endpoint()

        with pytest.raises(EndpointRegistrationError) as exc:
            with endpoint_scope(client, endpoint, MockConsole()):
                pytest.fail("block must not run")

        assert exc.value.endpoint_name == endpoint.name
        assert "401 Unauthorized" in str(exc.value)
        assert client.calls[-1] == f"unregister:{endpoint.name}"

    def test_removal_failure_warns_without_masking(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path, fail_unregister=True)
        console = MockConsole()

        with pytest.raises(RuntimeError, match="original"):
            with endpoint_scope(client, _endpoint(), console):
                raise RuntimeError("original")

        assert console.has_warning()
        assert console.find("failed to remove repository")

    def test_custom_remover_falls_back_to_client(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path)
        console = MockConsole()
        removed: list[str] = []

        def register(endpoint: RegistryEndpoint) -> Result[None, RegistryError | CommandNotFound]:
            return client.register_repository(endpoint)

        def remove(name: str) -> Result[None, RegistryError | CommandNotFound]:
            removed.append(name)
            return Err(CommandNotFound(command="Remove-PackageRepo", modules=()))

        endpoint = _endpoint()
        with endpoint_scope(client, endpoint, console, register=register, remove=remove):
            pass

        assert removed == [endpoint.name]
        assert client.registered == []
        assert not console.has_warning()

    def test_custom_registrar_is_used(self, tmp_path: Path) -> None:
        client = FakeRegistryClient(module_root=tmp_path)
        seen: list[str] = []

        def register(endpoint: RegistryEndpoint) -> Result[None, RegistryError | CommandNotFound]:
            seen.append(endpoint.name)
            return Ok(None)

        with endpoint_scope(client, _endpoint(), MockConsole(), register=register):
            pass

        assert len(seen) == 1
        assert not any(c.startswith("register:") for c in client.calls)
