"""Two-tier module publishing."""

from .discovery import DiscoveryError, DiscoveryResult, discover_manifest
from .orchestrator import (
    PublishAttempt,
    PublishError,
    PublishOrchestrator,
    PublishReport,
    PublishRequest,
)

__all__ = [
    "DiscoveryError",
    "DiscoveryResult",
    "PublishAttempt",
    "PublishError",
    "PublishOrchestrator",
    "PublishReport",
    "PublishRequest",
    "discover_manifest",
]
