"""Process execution and filesystem helpers."""

from .fs import is_case_sensitive, rename_exact
from .process import ProcessError, run

__all__ = [
    "ProcessError",
    "is_case_sensitive",
    "rename_exact",
    "run",
]
