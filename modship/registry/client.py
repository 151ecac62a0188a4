"""Registry client: PSResourceGet driven through pwsh.

The registry client itself is an external collaborator. This module only
renders the PowerShell for each operation, runs it, and maps the outcome to
Result values.

Secrets never appear in a script or on the command line: they travel in
environment variables (``MODSHIP_FEED_USER`` / ``MODSHIP_FEED_TOKEN``) and
scripts reference them as ``$env:...``.
"""

from __future__ import annotations

import base64
import json
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from modship.core.result import Err, Ok, Result
from modship.platform.process import run as run_process
from modship.registry.errors import CommandNotFound, RegistryError
from modship.registry.model import ModuleSession, PackageDescriptor, RegistryEndpoint

__all__ = [
    "EnvRef",
    "PwshHost",
    "PwshRegistryClient",
    "RegistryClient",
    "ensure_pwsh_available",
    "ps_quote",
    "render_invocation",
]

ENV_FEED_USER = "MODSHIP_FEED_USER"
ENV_FEED_TOKEN = "MODSHIP_FEED_TOKEN"

_CREDENTIAL_SCRIPT = (
    f"$modshipCredential = [pscredential]::new($env:{ENV_FEED_USER}, "
    f"(ConvertTo-SecureString $env:{ENV_FEED_TOKEN} -AsPlainText -Force))"
)


@dataclass(frozen=True, slots=True)
class EnvRef:
    """Parameter value read from an environment variable inside pwsh."""

    name: str


type ParamValue = str | bool | EnvRef


def ps_quote(value: str) -> str:
    """Quote a string as a PowerShell single-quoted literal."""
    return "'" + value.replace("'", "''") + "'"


def render_invocation(command: str, params: Mapping[str, ParamValue]) -> str:
    """Render ``& 'Command' -Name 'value' -Switch`` from a parameter mapping.

    ``True`` renders a switch, ``False`` omits the parameter.
    """
    parts = [f"& {ps_quote(command)}"]
    for key, value in params.items():
        match value:
            case bool() if value:
                parts.append(f"-{key}")
            case bool():
                continue
            case EnvRef(name=name):
                parts.append(f"-{key} $env:{name}")
            case str():
                parts.append(f"-{key} {ps_quote(value)}")
    return " ".join(parts)


def _endpoint_env(endpoint: RegistryEndpoint) -> dict[str, str]:
    return {ENV_FEED_USER: endpoint.owner, ENV_FEED_TOKEN: endpoint.secret}


def ensure_pwsh_available(executable: str = "pwsh") -> Result[None, RegistryError]:
    if shutil.which(executable) is None:
        return Err(
            RegistryError(
                kind="pwsh_missing",
                message=f"{executable}: missing",
                hint="Install PowerShell 7: https://aka.ms/powershell",
            )
        )
    return Ok(None)


@dataclass(frozen=True, slots=True)
class PwshHost:
    """Runs PowerShell scripts in a fresh pwsh process.

    Attributes:
        cwd: Working directory for every invocation.
        timeout: Seconds before an invocation is killed.
        executable: pwsh binary name or path.
    """

    cwd: Path
    timeout: float
    executable: str = "pwsh"

    def run_script(
        self,
        script: str,
        *,
        session: ModuleSession | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, RegistryError]:
        lines = ["$ErrorActionPreference = 'Stop'", "$ProgressPreference = 'SilentlyContinue'"]
        if session is not None:
            for module in session.modules:
                lines.append(f"Import-Module -Name {ps_quote(module)} -Global -ErrorAction Stop")
        lines.append(script)
        full = "\n".join(lines)

        encoded = base64.b64encode(full.encode("utf-16-le")).decode("ascii")
        cmd = [
            self.executable,
            "-NoLogo",
            "-NoProfile",
            "-NonInteractive",
            "-EncodedCommand",
            encoded,
        ]
        result = run_process(cmd, cwd=self.cwd, env=env, timeout=self.timeout)
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="command_failed",
                    message="pwsh invocation failed",
                    hint=result.error.detail,
                )
            )
        return result


class RegistryClient(Protocol):
    """Operations modship needs from the registry client."""

    @property
    def module_root(self) -> Path: ...

    def register_repository(self, endpoint: RegistryEndpoint) -> Result[None, RegistryError]: ...

    def unregister_repository(self, name: str) -> Result[None, RegistryError]: ...

    def install(
        self, package: PackageDescriptor, *, endpoint: RegistryEndpoint
    ) -> Result[None, RegistryError]: ...

    def import_module(
        self, name: str, *, session: ModuleSession
    ) -> Result[tuple[str, ...], RegistryError]: ...

    def publish(
        self, *, manifest_path: Path, endpoint: RegistryEndpoint
    ) -> Result[None, RegistryError]: ...

    def invoke(
        self,
        command: str,
        params: Mapping[str, ParamValue],
        *,
        session: ModuleSession,
        endpoint: RegistryEndpoint | None = None,
    ) -> Result[object, RegistryError | CommandNotFound]: ...


@dataclass(frozen=True, slots=True)
class PwshRegistryClient:
    """RegistryClient backed by PSResourceGet cmdlets."""

    host: PwshHost
    module_root: Path

    def register_repository(self, endpoint: RegistryEndpoint) -> Result[None, RegistryError]:
        params: dict[str, ParamValue] = {
            "Name": endpoint.name,
            "Uri": endpoint.uri,
            "Trusted": endpoint.trusted,
            "Force": True,
        }
        result = self.host.run_script(render_invocation("Register-PSResourceRepository", params))
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="register_failed",
                    message=f"failed to register repository {endpoint.name}",
                    hint=result.error.hint,
                )
            )
        return Ok(None)

    def unregister_repository(self, name: str) -> Result[None, RegistryError]:
        # Removing an endpoint that is not registered is not an error.
        script = (
            f"if (Get-PSResourceRepository -Name {ps_quote(name)} -ErrorAction SilentlyContinue) "
            f"{{ Unregister-PSResourceRepository -Name {ps_quote(name)} }}"
        )
        result = self.host.run_script(script)
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="unregister_failed",
                    message=f"failed to remove repository {name}",
                    hint=result.error.hint,
                )
            )
        return Ok(None)

    def install(
        self, package: PackageDescriptor, *, endpoint: RegistryEndpoint
    ) -> Result[None, RegistryError]:
        params: dict[str, ParamValue] = {"Name": package.name}
        if package.version is not None:
            params["Version"] = package.version
        params.update(
            {
                "Repository": endpoint.name,
                "Scope": "CurrentUser",
                "TrustRepository": True,
                "Reinstall": True,
            }
        )
        script = "\n".join(
            [
                _CREDENTIAL_SCRIPT,
                render_invocation("Install-PSResource", params) + " -Credential $modshipCredential",
            ]
        )
        result = self.host.run_script(script, env=_endpoint_env(endpoint))
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="install_failed",
                    message=f"failed to install {package}",
                    hint=result.error.hint,
                )
            )
        return Ok(None)

    def import_module(
        self, name: str, *, session: ModuleSession
    ) -> Result[tuple[str, ...], RegistryError]:
        script = (
            f"$imported = Import-Module -Name {ps_quote(name)} -Global -Force -PassThru\n"
            "@($imported | ForEach-Object { $_.ExportedCommands.Keys }) | ConvertTo-Json -Compress"
        )
        result = self.host.run_script(script, session=session)
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="import_failed",
                    message=f"failed to import {name}",
                    hint=result.error.hint,
                )
            )

        parsed = _parse_json(result.value)
        if isinstance(parsed, Err):
            return parsed
        obj = parsed.value
        if obj is None:
            return Ok(())
        if isinstance(obj, str):
            return Ok((obj,))
        if isinstance(obj, list) and all(isinstance(c, str) for c in obj):
            return Ok(tuple(str(c) for c in obj))
        return Err(
            RegistryError(
                kind="invalid_output",
                message=f"unexpected exported command list from {name}",
                hint=result.value.strip()[:200],
            )
        )

    def publish(
        self, *, manifest_path: Path, endpoint: RegistryEndpoint
    ) -> Result[None, RegistryError]:
        params: dict[str, ParamValue] = {
            "Path": str(manifest_path.parent),
            "Repository": endpoint.name,
            "ApiKey": EnvRef(ENV_FEED_TOKEN),
        }
        result = self.host.run_script(
            render_invocation("Publish-PSResource", params), env=_endpoint_env(endpoint)
        )
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="publish_failed",
                    message=f"failed to publish {manifest_path.name}",
                    hint=result.error.hint,
                )
            )
        return Ok(None)

    def invoke(
        self,
        command: str,
        params: Mapping[str, ParamValue],
        *,
        session: ModuleSession,
        endpoint: RegistryEndpoint | None = None,
    ) -> Result[object, RegistryError | CommandNotFound]:
        if not session.has_command(command):
            return Err(CommandNotFound(command=command, modules=tuple(session.modules)))

        # Earlier pipeline objects are output lines; the result is the last one.
        script = (
            render_invocation(command, params)
            + " | Select-Object -Last 1 | ConvertTo-Json -Depth 6 -Compress"
        )
        env = None if endpoint is None else _endpoint_env(endpoint)
        result = self.host.run_script(script, session=session, env=env)
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    kind="command_failed",
                    message=f"{command} failed",
                    hint=result.error.hint,
                )
            )
        return _parse_json(result.value)


def _parse_json(text: str) -> Result[object, RegistryError]:
    stripped = text.strip()
    if not stripped:
        return Ok(None)
    # Modules may write banners before the JSON payload; it is always last.
    last = stripped.splitlines()[-1]
    try:
        obj: object = json.loads(last)
    except json.JSONDecodeError as e:
        return Err(
            RegistryError(
                kind="invalid_output",
                message=f"pwsh returned invalid JSON: {e}",
                hint=last[:200],
            )
        )
    return Ok(obj)
