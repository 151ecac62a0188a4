from __future__ import annotations

import pytest

from ._utils import iter_source_files, matches_prefix, modship_root, parse_imports


@pytest.mark.parametrize(
    "package", ["core", "platform", "output", "registry", "publish", "release", "version"]
)
def test_domain_packages_do_not_import_cli(package: str) -> None:
    root = modship_root()
    offenders: list[str] = []

    for file_path in iter_source_files(root / package):
        rel = file_path.relative_to(root).as_posix()
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "modship.cli") or matches_prefix(item.module, "typer"):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{package} -> cli dependency violations:\n" + "\n".join(offenders)


def test_core_does_not_depend_on_services() -> None:
    root = modship_root()
    forbidden = ("modship.registry", "modship.publish", "modship.release", "modship.cli")
    offenders: list[str] = []

    for file_path in iter_source_files(root / "core"):
        rel = file_path.relative_to(root).as_posix()
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, "core dependency violations:\n" + "\n".join(offenders)
