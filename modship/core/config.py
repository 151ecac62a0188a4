"""Typed configuration loading and access.

This module provides dataclasses for the modship.toml structure. Every key is
optional; a missing file yields the defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_float, get_str, get_str_list, get_table

__all__ = [
    "CaseRepairConfig",
    "Config",
    "ConfigError",
    "FeedConfig",
    "ProviderConfig",
    "ReleaseConfig",
    "SmartReleaseConfig",
    "TimeoutsConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILENAME",
    "DEFAULT_MODULE_ROOT",
]

CONFIG_FILENAME = "modship.toml"

# PowerShell's CurrentUser module path on Linux/macOS.
DEFAULT_MODULE_ROOT = "~/.local/share/powershell/Modules"

DEFAULT_FEED_URI_TEMPLATE = "https://nuget.pkg.github.com/{owner}/index.json"
DEFAULT_TARGET_NAME = "GitHubPackages"

# Dependencies first.
DEFAULT_PROVIDER_MODULES = (
    "K.PSGallery.LoggingModule",
    "K.PSGallery.PackageRepoProvider",
)
DEFAULT_SMART_RELEASE_MODULES = (
    "K.PSGallery.LoggingModule",
    "K.PSGallery.Smartagr",
)
DEFAULT_SMART_RELEASE_COMMAND = "New-SmartRelease"

DEFAULT_PRERELEASE_MARKERS = ("alpha", "beta", "rc", "preview", "pre")
DEFAULT_SETTLE_SECONDS = 5.0

DEFAULT_PWSH_TIMEOUT_SECONDS = 10 * 60.0
DEFAULT_GIT_TIMEOUT_SECONDS = 3 * 60.0
DEFAULT_GH_TIMEOUT_SECONDS = 60.0

ENV_MODULE_ROOT = "MODSHIP_MODULE_ROOT"
ENV_SETTLE_SECONDS = "MODSHIP_SETTLE_SECONDS"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Package feed the modules are installed from and published to."""

    uri_template: str = DEFAULT_FEED_URI_TEMPLATE
    target_name: str = DEFAULT_TARGET_NAME

    def uri_for(self, owner: str) -> str:
        return self.uri_template.format(owner=owner)


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Provider abstraction modules, in install order."""

    modules: tuple[str, ...] = DEFAULT_PROVIDER_MODULES


@dataclass(frozen=True, slots=True)
class SmartReleaseConfig:
    """Smart-release tool modules, in install order."""

    modules: tuple[str, ...] = DEFAULT_SMART_RELEASE_MODULES
    command: str = DEFAULT_SMART_RELEASE_COMMAND


@dataclass(frozen=True, slots=True)
class CaseRepairConfig:
    """Case repair settings.

    Attributes:
        module_root: Directory the registry client installs modules into.
        case_sensitive: Force the filesystem answer instead of probing.
        filenames: Extra lowercase -> canonical file names to repair.
    """

    module_root: str = DEFAULT_MODULE_ROOT
    case_sensitive: bool | None = None
    filenames: tuple[tuple[str, str], ...] = ()

    @property
    def module_root_path(self) -> Path:
        return Path(os.path.expandvars(self.module_root)).expanduser()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    prerelease_markers: tuple[str, ...] = DEFAULT_PRERELEASE_MARKERS


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Timeouts for external calls, in seconds."""

    pwsh_seconds: float = DEFAULT_PWSH_TIMEOUT_SECONDS
    git_seconds: float = DEFAULT_GIT_TIMEOUT_SECONDS
    gh_seconds: float = DEFAULT_GH_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    feed: FeedConfig = field(default_factory=FeedConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    smart_release: SmartReleaseConfig = field(default_factory=SmartReleaseConfig)
    case_repair: CaseRepairConfig = field(default_factory=CaseRepairConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        feed: StrDict = get_table(data, "feed") or {}
        provider: StrDict = get_table(data, "provider") or {}
        smart: StrDict = get_table(data, "smart_release") or {}
        repair: StrDict = get_table(data, "case_repair") or {}
        release: StrDict = get_table(data, "release") or {}
        timeouts: StrDict = get_table(data, "timeouts") or {}

        filenames: list[tuple[str, str]] = []
        for lower, canonical in (get_table(repair, "filenames") or {}).items():
            if not isinstance(canonical, str) or canonical.lower() != lower.lower():
                raise ValueError(f"case_repair.filenames: {lower!r} must map to a casing of itself")
            filenames.append((lower.lower(), canonical))

        markers = get_str_list(release, "prerelease_markers")
        provider_modules = get_str_list(provider, "modules")
        smart_modules = get_str_list(smart, "modules")
        settle = get_float(release, "settle_seconds")

        return cls(
            feed=FeedConfig(
                uri_template=get_str(feed, "uri_template") or DEFAULT_FEED_URI_TEMPLATE,
                target_name=get_str(feed, "target_name") or DEFAULT_TARGET_NAME,
            ),
            provider=ProviderConfig(
                modules=tuple(provider_modules) if provider_modules else DEFAULT_PROVIDER_MODULES,
            ),
            smart_release=SmartReleaseConfig(
                modules=tuple(smart_modules) if smart_modules else DEFAULT_SMART_RELEASE_MODULES,
                command=get_str(smart, "command") or DEFAULT_SMART_RELEASE_COMMAND,
            ),
            case_repair=CaseRepairConfig(
                module_root=get_str(repair, "module_root") or DEFAULT_MODULE_ROOT,
                case_sensitive=get_bool(repair, "case_sensitive"),
                filenames=tuple(filenames),
            ),
            release=ReleaseConfig(
                settle_seconds=DEFAULT_SETTLE_SECONDS if settle is None else _non_negative(settle),
                prerelease_markers=tuple(m.lower() for m in markers)
                if markers
                else DEFAULT_PRERELEASE_MARKERS,
            ),
            timeouts=TimeoutsConfig(
                pwsh_seconds=get_float(timeouts, "pwsh_seconds") or DEFAULT_PWSH_TIMEOUT_SECONDS,
                git_seconds=get_float(timeouts, "git_seconds") or DEFAULT_GIT_TIMEOUT_SECONDS,
                gh_seconds=get_float(timeouts, "gh_seconds") or DEFAULT_GH_TIMEOUT_SECONDS,
            ),
        )

    def with_env(self, env: Mapping[str, str]) -> Config:
        """Apply MODSHIP_* environment overrides."""
        config = self
        root = env.get(ENV_MODULE_ROOT, "").strip()
        if root:
            config = replace(config, case_repair=replace(config.case_repair, module_root=root))

        settle = env.get(ENV_SETTLE_SECONDS, "").strip()
        if settle:
            config = replace(
                config,
                release=replace(config.release, settle_seconds=_non_negative(float(settle))),
            )
        return config


def _non_negative(value: float | None) -> float:
    if value is None or value < 0:
        raise ValueError(f"expected a non-negative number, got {value!r}")
    return value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(
    path: Path,
    env: Mapping[str, str] | None = None,
) -> Result[Config, ConfigError]:
    """Load configuration from a TOML file and apply environment overrides.

    Args:
        path: Path to modship.toml
        env: Environment to read overrides from (os.environ if None)

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value).with_env(os.environ if env is None else env)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
    return Ok(config)


def load_config_or_default(
    path: Path,
    env: Mapping[str, str] | None = None,
) -> Result[Config, ConfigError]:
    """Load config if the file exists, else the defaults (with env overrides).

    A file that exists but is invalid is still an error.
    """
    if path.exists():
        return load_config(path, env)
    try:
        return Ok(Config().with_env(os.environ if env is None else env))
    except ValueError as e:
        return Err(ConfigError(f"Invalid environment override: {e}"))
