"""
Revision propagation between top-level modules.

A top-level module may itself nest another top-level module as a submodule
(lib/ui nesting lib/core, say). After lib/core moves to a new commit, the
pin recorded in lib/ui's index still points at the old one. `sync` finds
every such dependent and rewrites its pin in place with
`git update-index --cacheinfo`, keeping the recorded mode.

The dependency graph is never stored. Edges are read from each candidate's
own manifest on every call, one level deep.
"""

from __future__ import annotations

import logging
import re
from functools import partial
from pathlib import Path
from typing import Iterable

from subpin.core.manifest import clean_module_name, read_modules
from subpin.core.sync.models import DependentStatus, SyncReport
from subpin.core.vcs import (
    GITLINK_MODE,
    GitGateway,
    IndexEntry,
    StepRunner,
    parse_index_entry,
)

logger = logging.getLogger(__name__)

_COMMIT_SHA = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")


def depends_on(
    repo_root: Path,
    candidate: str,
    dependency: str,
    manifest_file: str = ".gitmodules",
) -> bool:
    """
    Whether `candidate`'s own manifest declares `dependency`.

    Reads `<repo_root>/<candidate>/<manifest_file>` fresh on every call. A
    candidate without a manifest simply has no dependencies.
    """
    nested = read_modules(repo_root / candidate / manifest_file, warn=False)
    return dependency in nested


def dependents(
    repo_root: Path,
    dependency: str,
    candidates: Iterable[str],
    manifest_file: str = ".gitmodules",
) -> set[str]:
    """
    Candidates that nest `dependency` as a submodule of their own.

    Args:
        repo_root: Root of the superproject
        dependency: Module identifier to look for
        candidates: Top-level module identifiers to inspect
        manifest_file: Manifest name inside each candidate

    Returns:
        The subset of candidates (excluding `dependency` itself) whose
        manifest lists `dependency`. Nothing is cached between calls.
    """
    dependency = clean_module_name(dependency) or ""
    return {
        candidate
        for candidate in candidates
        if candidate != dependency
        and depends_on(repo_root, candidate, dependency, manifest_file)
    }


class SyncPropagator:
    """
    Brings dependents' pins of a module into line with its current revision.

    Example:
        >>> propagator = SyncPropagator(repo_root, ["lib/core", "lib/ui"], gateway, runner)
        >>> report = await propagator.sync("lib/core")
        >>> report.updated
        ['lib/ui']
    """

    def __init__(
        self,
        repo_root: Path,
        modules: list[str],
        gateway: GitGateway,
        runner: StepRunner,
        manifest_file: str = ".gitmodules",
    ) -> None:
        """
        Args:
            repo_root: Root of the superproject
            modules: Top-level module identifiers, in manifest order
            gateway: Git access
            runner: Runner used to report steps and progress
            manifest_file: Manifest name, at the root and inside each module
        """
        self.repo_root = repo_root.resolve()
        self.modules = modules
        self.gateway = gateway
        self.runner = runner
        self.manifest_file = manifest_file

    def candidates(self, dependency: str, target: str | None = None) -> list[str]:
        """Top-level modules to inspect, in manifest order."""
        return [
            module
            for module in self.modules
            if module != dependency and (target is None or module == target)
        ]

    async def resolve_revision(self, dependency: str) -> tuple[str | None, str | None]:
        """
        Read the commit checked out in the dependency's own work tree.

        Returns:
            (revision, None) on success, (None, reason) otherwise.
        """
        result = await self.gateway.rev_parse_head(self.gateway.module_dir(dependency))
        if not result.success:
            return None, result.message
        revision = result.stdout.strip()
        if not _COMMIT_SHA.match(revision):
            return None, f"Unexpected revision from {dependency}: {revision!r}"
        return revision, None

    async def sync(self, dependency: str | None, target: str | None = None) -> SyncReport:
        """
        Propagate `dependency`'s current revision to every dependent.

        Args:
            dependency: Module whose checked-out commit is the source of truth
            target: Restrict propagation to this one candidate

        Returns:
            SyncReport. When the dependency's revision cannot be resolved the
            report is aborted and no index was touched.
        """
        dependency = clean_module_name(dependency)
        target = clean_module_name(target)
        report = SyncReport(dependency=dependency, target=target)

        if not dependency:
            report.aborted = True
            report.reason = "No module given to sync"
            return report

        revision, reason = await self.resolve_revision(dependency)
        if revision is None:
            logger.debug("Cannot resolve revision of %s: %s", dependency, reason)
            report.aborted = True
            report.reason = f"Cannot resolve the revision of {dependency}: {reason}"
            return report

        report.revision = revision
        logger.debug("Propagating %s at %s", dependency, revision)

        candidates = self.candidates(dependency, target)
        found = dependents(self.repo_root, dependency, candidates, self.manifest_file)
        for candidate in candidates:
            if candidate not in found:
                logger.debug("%s does not depend on %s", candidate, dependency)
                report.record(candidate, DependentStatus.SKIPPED)
                continue

            updated = await self.update_dependent(candidate, dependency, revision)
            report.record(
                candidate, DependentStatus.UPDATED if updated else DependentStatus.FAILED
            )

        return report

    async def update_dependent(self, candidate: str, dependency: str, revision: str) -> bool:
        """
        Point `candidate`'s pin of `dependency` at `revision`.

        The index entry is rewritten first. If the candidate also has the
        nested module checked out, that checkout is then moved to the same
        commit so the candidate's work tree agrees with its index.

        Returns:
            Whether the index entry now records `revision`.
        """
        gateway = self.gateway
        candidate_dir = gateway.module_dir(candidate)

        self.runner.note(f"Ensuring that {candidate} is up to date...")

        if not gateway.is_checkout(candidate_dir):
            self.runner.err_console.out(
                f"{candidate} is not checked out, cannot update its pin of {dependency}",
                highlight=False,
            )
            return False

        listing = await self.runner.run(
            partial(gateway.read_index_entry, candidate_dir, dependency), quiet=True
        )
        if not listing.success:
            return False

        current = parse_index_entry(listing.stdout, dependency)
        if current is None:
            logger.debug("%s has no staged pin for %s yet", candidate, dependency)
            mode = GITLINK_MODE
        else:
            mode = current.mode

        entry = IndexEntry(mode=mode, sha=revision, path=dependency)
        written = await self.runner.run(
            partial(gateway.write_index_entry, candidate_dir, entry), quiet=True
        )
        if not written.success:
            return False

        await self._align_nested_checkout(candidate_dir / dependency, revision)
        return True

    async def _align_nested_checkout(self, nested_dir: Path, revision: str) -> None:
        """Move an initialized nested checkout to `revision`; leave others alone."""
        gateway = self.gateway
        if not gateway.is_checkout(nested_dir):
            logger.debug("Nested module at %s is not initialized, index only", nested_dir)
            return

        head = await gateway.rev_parse_head(nested_dir)
        if head.success and head.stdout.strip() == revision:
            return

        present = await gateway.has_commit(nested_dir, revision)
        if not present.success:
            await self.runner.run(partial(gateway.fetch, nested_dir))
        await self.runner.run(partial(gateway.checkout_detached, nested_dir, revision))
