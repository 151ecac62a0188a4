"""Module manifest discovery for the direct-publish tier.

The provider modules ship a discovery command that understands more layouts
than modship does. It is used when the session exports it; otherwise a naive
search looks in the module-named subdirectory, then in the search root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modship.core.result import Err
from modship.core.structured import as_str_dict, get_bool, get_str, get_str_list
from modship.platform.fs import entry_names
from modship.registry.client import RegistryClient
from modship.registry.model import ModuleSession

__all__ = [
    "DISCOVERY_COMMAND",
    "DiscoveryError",
    "DiscoveryResult",
    "discover_manifest",
    "naive_discovery",
]

DISCOVERY_COMMAND = "Find-ModuleManifest"


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    is_valid: bool
    manifest_path: Path | None
    method: str
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)


class DiscoveryError(Exception):
    """Manifest discovery produced no valid manifest.

    The message aggregates every error reported by the discovery method.
    """

    def __init__(self, module_name: str, result: DiscoveryResult) -> None:
        errors = "; ".join(result.errors) or "no manifest found"
        super().__init__(f"manifest discovery failed for {module_name} ({result.method}): {errors}")
        self.module_name = module_name
        self.result = result


def naive_discovery(module_name: str, search_root: Path) -> DiscoveryResult:
    """Look for ``<Name>.psd1`` under ``<root>/<Name>/``, then ``<root>/``.

    Names are matched case-insensitively; a casing mismatch is a warning.
    """
    wanted_file = f"{module_name}.psd1"
    candidates: list[Path] = []
    for name in sorted(entry_names(search_root)):
        if name.lower() == module_name.lower() and (search_root / name).is_dir():
            candidates.append(search_root / name)
    candidates.append(search_root)

    searched: list[str] = []
    for directory in candidates:
        searched.append(str(directory))
        for name in sorted(entry_names(directory)):
            if name.lower() != wanted_file.lower():
                continue
            warnings: tuple[str, ...] = ()
            if name != wanted_file:
                warnings = (f"manifest casing differs: {name} (expected {wanted_file})",)
            return DiscoveryResult(
                is_valid=True,
                manifest_path=directory / name,
                method="naive",
                warnings=warnings,
            )

    return DiscoveryResult(
        is_valid=False,
        manifest_path=None,
        method="naive",
        errors=tuple(f"{wanted_file} not found in {d}" for d in searched),
    )


def _from_collaborator(obj: object, search_root: Path) -> DiscoveryResult:
    data = as_str_dict(obj)
    if data is None:
        return DiscoveryResult(
            is_valid=False,
            manifest_path=None,
            method=DISCOVERY_COMMAND,
            errors=("unexpected discovery payload",),
        )

    raw_path = get_str(data, "manifestPath")
    manifest = None
    if raw_path is not None:
        manifest = Path(raw_path)
        if not manifest.is_absolute():
            manifest = search_root / manifest

    errors = tuple(get_str_list(data, "errors") or ())
    is_valid = bool(get_bool(data, "isValid")) and manifest is not None
    if not is_valid and not errors:
        errors = ("discovery reported an invalid manifest",)
    return DiscoveryResult(
        is_valid=is_valid,
        manifest_path=manifest,
        method=get_str(data, "method") or DISCOVERY_COMMAND,
        errors=errors,
        warnings=tuple(get_str_list(data, "warnings") or ()),
    )


def discover_manifest(
    module_name: str,
    search_root: Path,
    *,
    client: RegistryClient | None = None,
    session: ModuleSession | None = None,
) -> DiscoveryResult:
    """Find the manifest to publish.

    Raises:
        DiscoveryError: No valid manifest was found.
    """
    result: DiscoveryResult | None = None
    if client is not None and session is not None and session.has_command(DISCOVERY_COMMAND):
        found = client.invoke(
            DISCOVERY_COMMAND,
            {"ModuleName": module_name, "SearchRoot": str(search_root)},
            session=session,
        )
        if not isinstance(found, Err):
            result = _from_collaborator(found.value, search_root)

    if result is None:
        result = naive_discovery(module_name, search_root)

    if not result.is_valid or result.manifest_path is None:
        raise DiscoveryError(module_name, result)
    return result
