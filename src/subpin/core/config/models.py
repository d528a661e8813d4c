"""
Configuration data models for subpin.

These models define the structure of .subpin.json and
~/.config/subpin/config.json files, with validation via Pydantic.
"""

import shlex
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InstallConfig(BaseModel):
    """
    Dependency installation run after checkout and pull.

    The command runs inside each module's checkout.
    """
    enabled: bool = Field(
        default=True,
        description="Run the install command after checkout/pull"
    )
    command: list[str] = Field(
        default_factory=lambda: ["pnpm", "i", "-P"],
        min_length=1,
        description="Production-only install command, as an argument list"
    )

    @field_validator('command', mode='before')
    @classmethod
    def split_command(cls, v: Union[str, list[str]]) -> list[str]:
        """Accept a shell-style string as well as a list."""
        if isinstance(v, str):
            return shlex.split(v)
        return v


class SubpinConfig(BaseModel):
    """
    Top-level subpin configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = SubpinConfig(install=InstallConfig(enabled=False))
        >>> config.manifest_file
        '.gitmodules'
    """
    manifest_file: str = Field(
        default=".gitmodules",
        min_length=1,
        description="Manifest declaring modules, relative to each repository root"
    )
    branches_file: str = Field(
        default=".gitbranches",
        min_length=1,
        description="Optional '<module> <branch>' override file at the repository root"
    )
    git_command: str = Field(
        default="git",
        min_length=1,
        description="Git executable to invoke"
    )
    install: InstallConfig = Field(
        default_factory=InstallConfig,
        description="Dependency installation settings"
    )

    model_config = ConfigDict(
        extra="allow",
        validate_assignment=True,
    )

    @field_validator('install', mode='before')
    @classmethod
    def validate_install(
        cls, v: Union[bool, str, list[str], dict, InstallConfig]
    ) -> Union[dict, InstallConfig]:
        """Allow shorthand: `"install": false` or `"install": "npm ci"`."""
        if isinstance(v, bool):
            return {"enabled": v}
        if isinstance(v, (str, list)):
            return {"command": v}
        return v
