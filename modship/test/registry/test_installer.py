"""Tests for modship.registry.installer module."""

from __future__ import annotations

from pathlib import Path

import pytest

from modship.core.result import Err, Ok
from modship.output.console import MockConsole
from modship.platform.fs import is_case_sensitive
from modship.registry.case_repair import CaseRepairEngine
from modship.registry.errors import CommandNotFound, InstallError
from modship.registry.installer import DependencyInstaller, parse_package_list
from modship.registry.model import FeedCredentials, ModuleSession, PackageDescriptor
from modship.test.fakes import FakeRegistryClient

CREDENTIALS = FeedCredentials(owner="acme", token="ghp_secret")
CHAIN = (
    PackageDescriptor("K.PSGallery.LoggingModule"),
    PackageDescriptor("K.PSGallery.PackageRepoProvider"),
)


@pytest.fixture
def client(tmp_path: Path) -> FakeRegistryClient:
    if not is_case_sensitive(tmp_path):
        pytest.skip("filesystem is case-insensitive")
    return FakeRegistryClient(
        module_root=tmp_path,
        exports={
            "K.PSGallery.LoggingModule": ("Write-SafeLog",),
            "K.PSGallery.PackageRepoProvider": ("Register-PackageRepo", "Publish-Package"),
        },
    )


def _installer(
    client: FakeRegistryClient, console: MockConsole | None = None
) -> DependencyInstaller:
    console = console or MockConsole()
    return DependencyInstaller(
        client=client,
        repair=CaseRepairEngine(
            module_root=client.module_root, console=console, case_sensitive=True
        ),
        console=console,
        feed_uri="https://nuget.pkg.github.com/acme/index.json",
    )


class TestParsePackageList:
    def test_names_and_versions(self) -> None:
        packages = parse_package_list(["A@1.0.0", " B ", "", "a@2.0.0"])
        assert packages == [PackageDescriptor("A", "1.0.0"), PackageDescriptor("B")]


class TestInstallChain:
    def test_installs_repairs_and_imports_in_order(self, client: FakeRegistryClient) -> None:
        result = _installer(client).install_chain(CHAIN, CREDENTIALS)

        assert isinstance(result, Ok)
        session = result.value
        assert session.modules == [p.name for p in CHAIN]
        assert session.has_command("publish-package")
        ops = [c for c in client.calls if c.startswith(("install:", "import:"))]
        assert ops == [
            "install:K.PSGallery.LoggingModule",
            "import:K.PSGallery.LoggingModule",
            "install:K.PSGallery.PackageRepoProvider",
            "import:K.PSGallery.PackageRepoProvider",
        ]

    def test_single_ephemeral_endpoint_removed_after(self, client: FakeRegistryClient) -> None:
        _installer(client).install_chain(CHAIN, CREDENTIALS)

        registers = [c for c in client.calls if c.startswith("register:")]
        assert len(registers) == 1
        assert registers[0].startswith("register:modship-")
        assert client.calls[-1] == "unregister:" + registers[0].split(":", 1)[1]
        assert client.registered == []

    def test_failure_skips_remaining_packages(self, client: FakeRegistryClient) -> None:
        client.fail_install.add("K.PSGallery.LoggingModule")
        console = MockConsole()

        result = _installer(client, console).install_chain(CHAIN, CREDENTIALS)

        assert isinstance(result, Err)
        error = result.error
        assert isinstance(error, InstallError)
        assert error.package == "K.PSGallery.LoggingModule"
        assert error.step == "install"
        assert error.skipped == ("K.PSGallery.PackageRepoProvider",)
        assert "install:K.PSGallery.PackageRepoProvider" not in client.calls
        assert client.registered == []
        assert console.has_error()

    def test_import_failure_is_reported_as_import_step(self, client: FakeRegistryClient) -> None:
        client.fail_import.add("K.PSGallery.PackageRepoProvider")

        result = _installer(client).install_chain(CHAIN, CREDENTIALS)

        assert isinstance(result, Err)
        assert isinstance(result.error, InstallError)
        assert result.error.step == "import"
        assert result.error.skipped == ()

    def test_registration_failure(self, client: FakeRegistryClient) -> None:
        client.fail_register.add("*")

        result = _installer(client).install_chain(CHAIN, CREDENTIALS)

        assert isinstance(result, Err)
        assert isinstance(result.error, InstallError)
        assert result.error.step == "register"
        assert not any(c.startswith("install:") for c in client.calls)

    def test_missing_required_command(self, client: FakeRegistryClient) -> None:
        result = _installer(client).install_chain(
            CHAIN, CREDENTIALS, require=("Remove-PackageRepo",)
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, CommandNotFound)
        assert result.error.command == "Remove-PackageRepo"

    def test_already_imported_modules_are_skipped(self, client: FakeRegistryClient) -> None:
        session = ModuleSession()
        session.add("K.PSGallery.LoggingModule", ("Write-SafeLog",))

        result = _installer(client).install_chain(CHAIN, CREDENTIALS, session=session)

        assert isinstance(result, Ok)
        assert result.value is session
        assert "install:K.PSGallery.LoggingModule" not in client.calls

    def test_without_repair_import_would_fail(self, client: FakeRegistryClient) -> None:
        console = MockConsole()
        installer = DependencyInstaller(
            client=client,
            repair=CaseRepairEngine(
                module_root=client.module_root, console=console, case_sensitive=False
            ),
            console=console,
            feed_uri="https://feed",
        )

        result = installer.install_chain(CHAIN[:1], CREDENTIALS)

        assert isinstance(result, Err)
        assert isinstance(result.error, InstallError)
        assert result.error.step == "import"
