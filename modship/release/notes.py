from __future__ import annotations

from modship.release.model import ReleaseRequest, ReleaseTagSet


def release_title(request: ReleaseRequest, tag_set: ReleaseTagSet) -> str:
    if tag_set.prerelease:
        return f"{request.package} {tag_set.base} (Pre-release)"
    return f"{request.package} {tag_set.base}"


def compose_release_notes(
    *,
    request: ReleaseRequest,
    tag_set: ReleaseTagSet,
    include_floating_tags: bool,
) -> str:
    """Render the Markdown release body.

    The floating-tag section describes what the smart-release tool does and
    is only included for it.
    """
    owner = request.repository.split("/", 1)[0]
    lines: list[str] = []
    lines.append(f"## {request.package} {tag_set.base}")
    lines.append("")
    lines.append(f"Version: `{request.version}`")
    lines.append(f"Bump: `{request.bump_type}`")
    if tag_set.prerelease:
        lines.append("")
        lines.append("> This is a pre-release.")

    lines.append("")
    lines.append("### Install")
    lines.append("")
    lines.append("```powershell")
    lines.append(
        f"Register-PSResourceRepository -Name GitHubPackages "
        f"-Uri https://nuget.pkg.github.com/{owner}/index.json -Trusted"
    )
    lines.append(
        f"Install-PSResource -Name {request.package} -Version {request.version} "
        "-Repository GitHubPackages -Credential $credential"
    )
    lines.append("```")

    if include_floating_tags:
        lines.append("")
        lines.append("### Tags")
        lines.append("")
        lines.append(f"- `{tag_set.base}`")
        for tag in tag_set.floating:
            lines.append(f"- `{tag}` -> `{tag_set.base}`")

    return "\n".join(lines).rstrip() + "\n"
