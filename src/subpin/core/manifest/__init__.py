"""
Module manifest (.gitmodules) and branch override readers.

Example:
    >>> from subpin.core.manifest import read_modules, read_branches
    >>> modules = read_modules(Path(".gitmodules"))
    >>> overrides = read_branches(Path(".gitbranches"))
"""

from .models import ModuleReference
from .reader import (
    clean_module_name,
    parse_branches,
    parse_modules,
    read_branches,
    read_module_references,
    read_modules,
    read_text_or_default,
)

__all__ = [
    "ModuleReference",
    "clean_module_name",
    "parse_branches",
    "parse_modules",
    "read_branches",
    "read_module_references",
    "read_modules",
    "read_text_or_default",
]
