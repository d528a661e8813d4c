"""
Module lifecycle operations: list, clean, checkout, pull, remove.

Each operation walks the root manifest in declaration order, optionally
narrowed to one module, and issues its git steps one at a time through a
StepRunner. A failed step is reported and the next step still runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from subpin.core.config.models import SubpinConfig
from subpin.core.manifest import (
    ModuleReference,
    clean_module_name,
    read_branches,
    read_module_references,
    read_modules,
)
from subpin.core.sync import SyncPropagator, SyncReport
from subpin.core.vcs import DependencyInstaller, GitGateway, ProcessResult, StepRunner

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of one module operation."""

    operation: str

    # Modules the operation was applied to, in manifest order
    modules: list[str] = field(default_factory=list)

    # Steps that failed or were skipped
    failures: list[ProcessResult] = field(default_factory=list)

    def summary(self) -> str:
        """Generate a human-readable summary."""
        if not self.modules:
            return f"{self.operation}: no matching modules"
        text = f"{self.operation}: {len(self.modules)} module(s)"
        if self.failures:
            text += f", {len(self.failures)} step(s) failed"
        return text


class ModuleService:
    """
    Runs module operations against one repository.

    The root manifest is read once per service instance; the branch
    override file is read by each checkout.

    Example:
        >>> service = ModuleService(Path("/work/app"))
        >>> service.modules
        ['lib/core', 'lib/ui']
        >>> result = await service.checkout("lib/ui/")
        >>> print(result.summary())
        checkout: 1 module(s)
    """

    def __init__(
        self,
        repo_root: Path,
        config: SubpinConfig | None = None,
        *,
        gateway: GitGateway | None = None,
        installer: DependencyInstaller | None = None,
        runner: StepRunner | None = None,
    ) -> None:
        self.repo_root = repo_root.resolve()
        self.config = config or SubpinConfig()
        self.gateway = gateway or GitGateway(self.repo_root, self.config.git_command)
        self.installer = installer or DependencyInstaller.from_config(self.config.install)
        self.runner = runner or StepRunner()
        self._modules: list[str] | None = None

    @property
    def manifest_path(self) -> Path:
        return self.repo_root / self.config.manifest_file

    @property
    def branches_path(self) -> Path:
        return self.repo_root / self.config.branches_file

    @property
    def modules(self) -> list[str]:
        """Module identifiers declared in the root manifest."""
        if self._modules is None:
            if not self.manifest_path.is_file():
                self.runner.err_console.out(
                    f"Could not read {self.manifest_path}: no such file", highlight=False
                )
            self._modules = read_modules(self.manifest_path)
        return self._modules

    def references(self) -> list[ModuleReference]:
        """Full manifest sections, for detailed listings."""
        return read_module_references(self.manifest_path, warn=False)

    def in_scope(self, target: str | None = None) -> list[str]:
        """
        Modules an operation applies to.

        Without a target every module is in scope. With one, only the
        exactly matching module is; an unknown target selects nothing.
        """
        target = clean_module_name(target)
        return [module for module in self.modules if target is None or module == target]

    def _result(self, operation: str, modules: list[str], first_result: int) -> OperationResult:
        failures = [r for r in self.runner.results[first_result:] if not r.success]
        return OperationResult(operation=operation, modules=modules, failures=failures)

    async def _install(self, module: str) -> None:
        if not self.installer.enabled:
            logger.debug("Dependency install disabled, skipping %s", module)
            return
        await self.runner.run(partial(self.installer.install, self.gateway.module_dir(module)))

    async def _unregister(self, module: str) -> None:
        """Deinitialize, drop cached repository data, and remove from index and manifest."""
        gateway = self.gateway
        await self.runner.run(partial(gateway.submodule_deinit, module))
        await self.runner.run(partial(gateway.remove_module_metadata, module))
        await self.runner.run_chain(
            partial(gateway.remove_cached, module),
            partial(gateway.reset_paths, self.config.manifest_file, module),
        )

    async def clean(self, target: str | None = None) -> OperationResult:
        """
        Revert modules to the "declared but never initialized" state.

        Discards every untracked and ignored file in the checkout, unregisters
        the module, then restores the manifest and the pin from the last
        commit.
        """
        start = len(self.runner.results)
        modules = self.in_scope(target)
        for module in modules:
            logger.debug("Cleaning %s", module)
            await self.runner.run(partial(self.gateway.clean_untracked, module))
            await self._unregister(module)
            await self.runner.run(
                partial(self.gateway.restore_paths, self.config.manifest_file, module)
            )
        return self._result("clean", modules, start)

    async def checkout(self, target: str | None = None) -> OperationResult:
        """
        Initialize modules at their pinned revision.

        A module with a branch override is then switched to that branch.
        Dependencies are installed last.
        """
        start = len(self.runner.results)
        modules = self.in_scope(target)
        branches = read_branches(self.branches_path) if modules else {}
        for module in modules:
            logger.debug("Checking out %s", module)
            await self.runner.run(partial(self.gateway.submodule_update_init, module))
            if branch := branches.get(module):
                await self.runner.run(partial(self.gateway.switch_branch, module, branch))
            await self._install(module)
        return self._result("checkout", modules, start)

    async def pull(self, target: str | None = None) -> OperationResult:
        """Sync the registered URL and fast-forward modules to their remote branch."""
        start = len(self.runner.results)
        modules = self.in_scope(target)
        for module in modules:
            logger.debug("Pulling %s", module)
            await self.runner.run_chain(
                partial(self.gateway.submodule_sync, module),
                partial(self.gateway.submodule_update_remote, module),
            )
            await self._install(module)
        return self._result("pull", modules, start)

    async def remove(self, target: str | None = None) -> OperationResult:
        """Deinitialize and undeclare modules. Nothing is restored afterwards."""
        start = len(self.runner.results)
        modules = self.in_scope(target)
        for module in modules:
            logger.debug("Removing %s", module)
            await self._unregister(module)
        return self._result("remove", modules, start)

    async def sync(self, dependency: str | None, target: str | None = None) -> SyncReport:
        """Propagate `dependency`'s checked-out revision to the modules that nest it."""
        propagator = SyncPropagator(
            self.repo_root,
            self.modules,
            self.gateway,
            self.runner,
            manifest_file=self.config.manifest_file,
        )
        return await propagator.sync(dependency, target)
