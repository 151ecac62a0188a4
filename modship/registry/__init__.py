"""Registry client orchestration: endpoints, dependency chains, case repair."""

from .case_repair import CaseRepairEngine, CaseRepairReport
from .client import PwshHost, PwshRegistryClient, RegistryClient
from .endpoint import endpoint_scope
from .errors import (
    CaseRepairWarning,
    CommandNotFound,
    EndpointRegistrationError,
    InstallError,
    RegistryError,
)
from .installer import DependencyInstaller, parse_package_list
from .model import FeedCredentials, ModuleSession, PackageDescriptor, RegistryEndpoint

__all__ = [
    "CaseRepairEngine",
    "CaseRepairReport",
    "CaseRepairWarning",
    "CommandNotFound",
    "DependencyInstaller",
    "EndpointRegistrationError",
    "FeedCredentials",
    "InstallError",
    "ModuleSession",
    "PackageDescriptor",
    "PwshHost",
    "PwshRegistryClient",
    "RegistryClient",
    "RegistryEndpoint",
    "RegistryError",
    "endpoint_scope",
    "parse_package_list",
]
