"""
Readers for the module manifest and the branch override file.

Both files are optional at the read boundary: a missing or unreadable file
reads as an empty collection, so callers never special-case its absence.
The manifest reader reports the miss; the branch file is optional by
nature and stays silent.
"""

from __future__ import annotations

import logging
import os
import re
from io import BytesIO
from pathlib import Path

from git.config import GitConfigParser

from subpin.core.manifest.models import ModuleReference

logger = logging.getLogger(__name__)

SECTION_PATTERN = re.compile(r'\[submodule "([^"]+)"\]')
_SECTION_NAME = re.compile(r'^submodule "(.+)"$')
_SEPARATORS = tuple({"/", os.sep})


def clean_module_name(name: str | None) -> str | None:
    """
    Normalize a module identifier by stripping one trailing path separator.

    Args:
        name: Identifier as typed by the user or read from a file

    Returns:
        The normalized identifier. None stays None, which scope filters read
        as "every module".

    Example:
        >>> clean_module_name("lib/core/") == clean_module_name("lib/core")
        True
    """
    if name is None:
        return None
    if name.endswith(_SEPARATORS):
        return name[:-1]
    return name


def read_text_or_default(path: Path, default: str = "", *, warn: bool = True) -> str:
    """
    Read a text file, mapping "missing or unreadable" to a default value.

    Args:
        path: File to read
        default: Value returned when the file cannot be read
        warn: Log the failure as a warning (otherwise at debug level)

    Returns:
        File contents, or `default`
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        if warn:
            logger.warning("Could not read %s: %s", path, reason)
        else:
            logger.debug("Could not read %s: %s", path, reason)
        return default


def parse_modules(content: str) -> list[str]:
    """Extract module identifiers from manifest text, in file order."""
    modules: list[str] = []
    for match in SECTION_PATTERN.finditer(content):
        name = clean_module_name(match.group(1))
        if name:
            modules.append(name)
    return modules


def read_modules(path: Path, *, warn: bool = True) -> list[str]:
    """
    Read the module identifiers declared in a manifest.

    Args:
        path: Manifest file (e.g. <repo>/.gitmodules)
        warn: Whether a missing manifest is worth a warning

    Returns:
        Identifiers in declaration order; empty when the file is missing.
        Paths are not checked for existence.
    """
    return parse_modules(read_text_or_default(path, warn=warn))


def read_module_references(path: Path, *, warn: bool = True) -> list[ModuleReference]:
    """
    Read the full `[submodule]` sections of a manifest.

    Uses GitPython's config parser so tab-indented keys and quoting follow
    git's own rules.

    Args:
        path: Manifest file
        warn: Whether a missing manifest is worth a warning

    Returns:
        One ModuleReference per section, in declaration order.
    """
    content = read_text_or_default(path, warn=warn)
    if not content:
        return []

    stream = BytesIO(content.encode("utf-8"))
    stream.name = str(path)
    parser = GitConfigParser(stream, read_only=True)
    parser.read()

    references: list[ModuleReference] = []
    for section in parser.sections():
        match = _SECTION_NAME.match(section)
        if not match:
            continue
        name = clean_module_name(match.group(1))
        if not name:
            continue
        references.append(
            ModuleReference(
                name=name,
                path=_optional_value(parser, section, "path"),
                url=_optional_value(parser, section, "url"),
                branch=_optional_value(parser, section, "branch"),
            )
        )
    return references


def _optional_value(parser: GitConfigParser, section: str, option: str) -> str | None:
    if not parser.has_option(section, option):
        return None
    # raw string; get_value() would coerce numeric-looking paths
    value = parser.get(section, option)
    return value or None


def parse_branches(content: str) -> dict[str, str]:
    """
    Parse `<module> <branch>` lines into a branch override map.

    Blank lines, `#` comments and lines without a branch name are skipped.
    A later line for the same module wins.
    """
    branches: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) < 2:
            logger.debug("Skipping branch override without a branch: %r", raw_line)
            continue
        module = clean_module_name(parts[0])
        branch = parts[1].strip()
        if module and branch:
            branches[module] = branch
    return branches


def read_branches(path: Path) -> dict[str, str]:
    """
    Read the optional branch override file.

    Args:
        path: Override file (e.g. <repo>/.gitbranches)

    Returns:
        Mapping of module identifier to branch name; empty when the file
        does not exist.
    """
    return parse_branches(read_text_or_default(path, warn=False))
