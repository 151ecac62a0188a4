"""Filesystem helpers for case-sensitive rename work."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["entry_names", "is_case_sensitive", "rename_exact"]


def is_case_sensitive(directory: Path) -> bool:
    """Probe whether the filesystem holding ``directory`` is case-sensitive.

    Creates a mixed-case marker file and checks whether its lowercase name
    resolves to it. The nearest existing ancestor is probed when the
    directory does not exist yet.
    """
    probe_dir = directory
    while not probe_dir.is_dir():
        if probe_dir.parent == probe_dir:
            break
        probe_dir = probe_dir.parent

    fd, name = tempfile.mkstemp(prefix=".ModShip-CaseProbe-", dir=str(probe_dir))
    os.close(fd)
    marker = Path(name)
    try:
        return not (probe_dir / marker.name.lower()).exists()
    finally:
        marker.unlink(missing_ok=True)


def entry_names(directory: Path) -> set[str]:
    """Exact on-disk names of the entries in directory (empty if missing)."""
    try:
        return {entry.name for entry in directory.iterdir()}
    except (FileNotFoundError, NotADirectoryError):
        return set()


def rename_exact(directory: Path, current: str, target: str) -> bool:
    """Rename ``directory/current`` to ``directory/target``.

    Only renames when ``current`` is present under that exact name and
    ``target`` is not. Returns True if a rename happened.
    """
    names = entry_names(directory)
    if current not in names or target in names:
        return False
    (directory / current).rename(directory / target)
    return True
