"""Repair module name casing after install.

On case-sensitive filesystems the registry client writes installed modules
under lowercase names (``k.psgallery.smartagr/1.2.0/private/...``), which the
module loader cannot find. The repair renames, at three levels, whatever is
lowercase back to its canonical casing:

1. the package root under the module root;
2. the conventional subfolders inside each version directory;
3. a fixed table of file names inside each version directory and subfolder.

Only renames are performed, never content changes, and only when the
lowercase form exists alone. A second run therefore does nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from modship.output.console import ConsoleProtocol, Style
from modship.platform.fs import entry_names, is_case_sensitive, rename_exact
from modship.registry.errors import CaseRepairWarning
from modship.registry.model import PackageDescriptor

__all__ = [
    "CONVENTIONAL_SUBFOLDERS",
    "CaseRepairEngine",
    "CaseRepairReport",
    "InstalledPackageTree",
    "Rename",
    "filename_table",
]

CONVENTIONAL_SUBFOLDERS: tuple[str, ...] = (
    "Public",
    "Private",
    "Classes",
    "Enums",
    "Functions",
    "Scripts",
    "Data",
    "Config",
    "Resources",
    "en-US",
)

_MODULE_FILE_SUFFIXES = (".psd1", ".psm1", ".Format.ps1xml", ".Types.ps1xml")

_VERSION_DIR_RE = re.compile(r"^\d+(\.\d+){1,3}(-[0-9A-Za-z.-]+)?$")


def filename_table(
    package_name: str,
    extra: tuple[tuple[str, str], ...] = (),
) -> tuple[tuple[str, str], ...]:
    """Lowercase -> canonical file names repaired for a package.

    Always covers the module's own manifest, root module and format/type
    files; ``extra`` adds configured entries.
    """
    entries = {
        f"{package_name}{suffix}".lower(): f"{package_name}{suffix}"
        for suffix in _MODULE_FILE_SUFFIXES
    }
    for lower, canonical in extra:
        entries.setdefault(lower.lower(), canonical)
    return tuple(entries.items())


@dataclass(frozen=True, slots=True)
class Rename:
    directory: Path
    old: str
    new: str

    def __str__(self) -> str:
        return f"{self.directory / self.old} -> {self.new}"


@dataclass(frozen=True, slots=True)
class InstalledPackageTree:
    """On-disk layout of one installed package, after root resolution."""

    module_root: Path
    package: PackageDescriptor
    root: Path
    version_dirs: tuple[Path, ...]
    subfolders: tuple[str, ...]
    filename_table: tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class CaseRepairReport:
    package: str
    renames: tuple[Rename, ...] = ()
    warnings: tuple[CaseRepairWarning, ...] = ()
    skipped: bool = False
    root: Path | None = None

    @property
    def changed(self) -> bool:
        return bool(self.renames)


@dataclass(frozen=True, slots=True)
class CaseRepairEngine:
    """Repairs installed packages under ``module_root``.

    Attributes:
        module_root: Directory the registry client installs modules into.
        console: Progress output.
        case_sensitive: Forced filesystem answer; probed when None.
        extra_filenames: Additional lowercase -> canonical file names.
    """

    module_root: Path
    console: ConsoleProtocol
    case_sensitive: bool | None = None
    extra_filenames: tuple[tuple[str, str], ...] = ()

    def applies(self) -> bool:
        if self.case_sensitive is not None:
            return self.case_sensitive
        return is_case_sensitive(self.module_root)

    def repair(self, package: PackageDescriptor) -> CaseRepairReport:
        if not self.applies():
            return CaseRepairReport(package=package.name, skipped=True)

        renames: list[Rename] = []
        root = self._repair_root(package, renames)
        if root is None:
            warning = CaseRepairWarning(
                package=package.name,
                message=(
                    f"not found under {self.module_root} "
                    f"(looked for {package.name} and {package.lower_name})"
                ),
            )
            self.console.warning(str(warning))
            return CaseRepairReport(package=package.name, warnings=(warning,))

        tree = self.inspect(package, root)
        for version_dir in tree.version_dirs:
            self._repair_version_dir(tree, version_dir, renames)
        if not tree.version_dirs:
            self._repair_files(tree, tree.root, renames)

        for rename in renames:
            self.console.print(f"rename {rename}", Style.DIM)
        return CaseRepairReport(package=package.name, renames=tuple(renames), root=root)

    def inspect(self, package: PackageDescriptor, root: Path) -> InstalledPackageTree:
        version_dirs = sorted(
            root / name
            for name in entry_names(root)
            if _VERSION_DIR_RE.match(name) and (root / name).is_dir()
        )
        return InstalledPackageTree(
            module_root=self.module_root,
            package=package,
            root=root,
            version_dirs=tuple(version_dirs),
            subfolders=CONVENTIONAL_SUBFOLDERS,
            filename_table=filename_table(package.name, self.extra_filenames),
        )

    def _repair_root(self, package: PackageDescriptor, renames: list[Rename]) -> Path | None:
        names = entry_names(self.module_root)
        if package.name in names:
            return self.module_root / package.name
        if package.lower_name in names:
            if rename_exact(self.module_root, package.lower_name, package.name):
                renames.append(Rename(self.module_root, package.lower_name, package.name))
                return self.module_root / package.name
            return self.module_root / package.lower_name
        return None

    def _repair_version_dir(
        self,
        tree: InstalledPackageTree,
        version_dir: Path,
        renames: list[Rename],
    ) -> None:
        for canonical in tree.subfolders:
            lower = canonical.lower()
            if lower != canonical and rename_exact(version_dir, lower, canonical):
                renames.append(Rename(version_dir, lower, canonical))

        self._repair_files(tree, version_dir, renames)
        present = entry_names(version_dir)
        for canonical in tree.subfolders:
            if canonical in present and (version_dir / canonical).is_dir():
                self._repair_files(tree, version_dir / canonical, renames)

    def _repair_files(
        self,
        tree: InstalledPackageTree,
        directory: Path,
        renames: list[Rename],
    ) -> None:
        for lower, canonical in tree.filename_table:
            if lower != canonical and rename_exact(directory, lower, canonical):
                renames.append(Rename(directory, lower, canonical))
