"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import SubpinConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per invocation
_config_cache: SubpinConfig | None = None

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/subpin/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "subpin" / "config.json"


def get_project_config_path(repo_root: Path) -> Path:
    """
    Get path to project configuration file.

    Args:
        repo_root: Repository root directory

    Returns:
        Path to .subpin.json in the repository root
    """
    return repo_root / ".subpin.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"install": {"enabled": True}}, {"install": {"command": "npm ci"}})
        {'install': {'enabled': True, 'command': 'npm ci'}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _parse_bool(name: str, raw: str) -> bool | None:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Invalid %s value '%s', ignoring", name, raw)
    return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        SUBPIN_MANIFEST - overrides manifest_file
        SUBPIN_BRANCHES - overrides branches_file
        SUBPIN_GIT - overrides git_command
        SUBPIN_INSTALL - overrides install.enabled (true/false)
        SUBPIN_INSTALL_COMMAND - overrides install.command (shell syntax)

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if manifest := os.environ.get("SUBPIN_MANIFEST"):
        result["manifest_file"] = manifest

    if branches := os.environ.get("SUBPIN_BRANCHES"):
        result["branches_file"] = branches

    if git_command := os.environ.get("SUBPIN_GIT"):
        result["git_command"] = git_command

    install_overrides: dict[str, Any] = {}
    if (install_str := os.environ.get("SUBPIN_INSTALL")) is not None:
        enabled = _parse_bool("SUBPIN_INSTALL", install_str)
        if enabled is not None:
            install_overrides["enabled"] = enabled

    if install_command := os.environ.get("SUBPIN_INSTALL_COMMAND"):
        install_overrides["command"] = install_command

    if install_overrides:
        # install may be in shorthand form; see SubpinConfig.validate_install
        current = result.get("install")
        if isinstance(current, bool):
            current = {"enabled": current}
        elif isinstance(current, (str, list)):
            current = {"command": current}
        elif not isinstance(current, dict):
            current = {}
        result["install"] = {**current, **install_overrides}

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "manifest_file": ".gitmodules",
        "branches_file": ".gitbranches",
        "git_command": "git",
        "install": {"enabled": True, "command": ["pnpm", "i", "-P"]},
    }


def load_config(repo_root: Path, use_cache: bool = True) -> SubpinConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (SUBPIN_*)
        2. Project config (<repo_root>/.subpin.json)
        3. User config (~/.config/subpin/config.json)
        4. Hardcoded defaults

    Args:
        repo_root: Repository root to load .subpin.json from
        use_cache: If True, return cached config from previous load

    Returns:
        Validated SubpinConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(repo_root)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = SubpinConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
