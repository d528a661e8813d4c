"""
Dependency installation run inside a module after checkout or pull.
"""

from __future__ import annotations

import logging
from pathlib import Path

from subpin.core.config.models import InstallConfig
from subpin.core.vcs.process import ProcessResult, run_process

logger = logging.getLogger(__name__)


class DependencyInstaller:
    """Runs the configured production-only install command in a module checkout."""

    def __init__(self, command: list[str], enabled: bool = True) -> None:
        self.command = list(command)
        self.enabled = enabled

    @classmethod
    def from_config(cls, config: InstallConfig) -> "DependencyInstaller":
        return cls(command=config.command, enabled=config.enabled)

    async def install(self, module_dir: Path) -> ProcessResult:
        """
        Install the module's own dependencies.

        Args:
            module_dir: Module checkout to run the install command in

        Returns:
            ProcessResult of the install command. A missing checkout yields a
            skipped result without spawning anything.
        """
        if not module_dir.is_dir():
            return ProcessResult.skip(
                self.command, f"Skipping install, {module_dir} is not checked out"
            )
        logger.debug("Installing dependencies in %s", module_dir)
        return await run_process(self.command, cwd=module_dir)
