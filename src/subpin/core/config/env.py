"""Environment loading from .env files.

SUBPIN_* overrides may live in .env files as well as in the environment.
Layers, lowest first:

1. ``$XDG_CONFIG_HOME/subpin/.env``
2. ``<repo_root>/.env`` then ``<repo_root>/.env.local``
3. variables already exported in the process environment

Later files override earlier ones. Nothing overrides an exported variable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def default_user_env_paths() -> list[Path]:
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [xdg_home / "subpin" / ".env"]


def default_project_env_paths(project_dir: Path) -> list[Path]:
    return [project_dir / ".env", project_dir / ".env.local"]


def read_env_file(path: Path) -> dict[str, str]:
    """Key/value pairs of one .env file; empty when it does not exist."""
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Apply user and project .env files to os.environ.

    Args:
        project_dir: Repository root holding the project .env files
        user_env_paths: User env files (default: the XDG location)
        project_env_paths: Project env files (default: .env, .env.local)

    Returns:
        The variables that were set, after layering.
    """
    if user_env_paths is None:
        user_env_paths = default_user_env_paths()
    if project_env_paths is None:
        project_env_paths = default_project_env_paths(project_dir)

    layered: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        layered.update(read_env_file(Path(path)))

    applied = {key: value for key, value in layered.items() if key not in os.environ}
    os.environ.update(applied)
    if applied:
        logger.debug("Loaded from .env files: %s", ", ".join(sorted(applied)))
    return applied
