"""
Git gateway: every git call subpin makes.

Each method runs one git command and returns a ProcessResult. Nothing here
raises on a non-zero exit; callers decide whether a failure matters.
Paths are resolved against the explicit repository root given at
construction, never against the process working directory.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from subpin.core.vcs.models import IndexEntry
from subpin.core.vcs.process import ProcessResult, run_process

logger = logging.getLogger(__name__)


class GitGateway:
    """
    Async wrapper over the git commands used by module operations and sync.

    Example:
        >>> gateway = GitGateway(Path("/work/app"))
        >>> result = await gateway.rev_parse_head(gateway.module_dir("lib/core"))
        >>> result.stdout.strip()
        '3f2a...'
    """

    def __init__(self, repo_root: Path, git_command: str = "git") -> None:
        """
        Initialize the gateway.

        Args:
            repo_root: Root of the superproject working tree
            git_command: Git executable to invoke
        """
        self.repo_root = repo_root.resolve()
        self.git_command = git_command

    def module_dir(self, module: str) -> Path:
        """Checkout location of a top-level module."""
        return self.repo_root / module

    @staticmethod
    def is_checkout(path: Path) -> bool:
        """
        Whether `path` is the root of its own git checkout.

        An uninitialized submodule is an empty directory inside the parent's
        work tree; running git there would act on the parent instead.
        """
        return (path / ".git").exists()

    async def git(self, *args: str, cwd: Path | None = None) -> ProcessResult:
        """Run `git <args>` in `cwd` (defaults to the repository root)."""
        return await run_process(
            [self.git_command, *args],
            cwd=cwd if cwd is not None else self.repo_root,
        )

    async def git_in_checkout(self, checkout: Path, *args: str) -> ProcessResult:
        """
        Run `git <args>` inside a module's own checkout.

        Fails without spawning git when `checkout` has no `.git` of its own.
        """
        if not self.is_checkout(checkout):
            return ProcessResult(
                command=[self.git_command, *args],
                success=False,
                exit_code=None,
                error=f"Not a checked-out module: {checkout}",
            )
        return await self.git(*args, cwd=checkout)

    # ------------------------------------------------------------------
    # Revision and index inspection / mutation
    # ------------------------------------------------------------------

    async def rev_parse_head(self, checkout: Path) -> ProcessResult:
        """Resolve the commit currently checked out in `checkout`."""
        return await self.git_in_checkout(checkout, "rev-parse", "--verify", "HEAD")

    async def read_index_entry(self, repo: Path, path: str) -> ProcessResult:
        """List the staged entry for `path` in `repo`'s index."""
        return await self.git("ls-files", "--stage", "--", path, cwd=repo)

    async def write_index_entry(self, repo: Path, entry: IndexEntry) -> ProcessResult:
        """Point `repo`'s index entry for `entry.path` at `entry.sha`, keeping `entry.mode`."""
        return await self.git("update-index", "--add", "--cacheinfo", entry.cacheinfo(), cwd=repo)

    async def has_commit(self, repo: Path, sha: str) -> ProcessResult:
        """Succeeds when `sha` is a commit present in `repo`'s object store."""
        return await self.git("cat-file", "-e", f"{sha}^{{commit}}", cwd=repo)

    async def fetch(self, repo: Path) -> ProcessResult:
        return await self.git("fetch", "--quiet", cwd=repo)

    async def checkout_detached(self, repo: Path, sha: str) -> ProcessResult:
        return await self.git("checkout", "--quiet", "--detach", sha, cwd=repo)

    # ------------------------------------------------------------------
    # Submodule lifecycle
    # ------------------------------------------------------------------

    async def submodule_update_init(self, module: str) -> ProcessResult:
        return await self.git("submodule", "update", "--init", "--", module)

    async def submodule_sync(self, module: str) -> ProcessResult:
        return await self.git("submodule", "sync", "--", module)

    async def submodule_update_remote(self, module: str) -> ProcessResult:
        return await self.git("submodule", "update", "--remote", "--", module)

    async def submodule_deinit(self, module: str) -> ProcessResult:
        return await self.git("submodule", "deinit", "-f", "--", module)

    async def switch_branch(self, module: str, branch: str) -> ProcessResult:
        return await self.git_in_checkout(self.module_dir(module), "checkout", branch)

    async def clean_untracked(self, module: str) -> ProcessResult:
        """Remove untracked and ignored files, nested repositories included."""
        return await self.git("clean", "-xfdf", cwd=self.module_dir(module))

    async def remove_cached(self, module: str) -> ProcessResult:
        """Unregister the module from the index and the manifest."""
        return await self.git("rm", "-f", "--", module)

    async def reset_paths(self, *paths: str) -> ProcessResult:
        return await self.git("reset", "--quiet", "--", *paths)

    async def restore_paths(self, *paths: str) -> ProcessResult:
        return await self.git("checkout", "--", *paths)

    def module_metadata_dir(self, module: str) -> Path:
        """
        Location of the module's repository under the superproject's git dir.

        Resolved through GitPython so linked worktrees (where `.git` is a
        file) use the shared git directory.
        """
        try:
            common_dir = Path(Repo(self.repo_root).common_dir)
        except (InvalidGitRepositoryError, NoSuchPathError):
            common_dir = self.repo_root / ".git"
        return common_dir / "modules" / module

    async def remove_module_metadata(self, module: str) -> ProcessResult:
        """Delete `.git/modules/<module>`; a missing directory is not an error."""
        metadata_dir = self.module_metadata_dir(module)
        command = ["rm", "-rf", str(metadata_dir)]
        if not metadata_dir.exists():
            logger.debug("No module metadata to remove at %s", metadata_dir)
            return ProcessResult(command=command, success=True, exit_code=0)

        logger.debug("Removing module metadata: %s", metadata_dir)
        try:
            await asyncio.to_thread(shutil.rmtree, metadata_dir)
        except OSError as e:
            return ProcessResult(
                command=command,
                success=False,
                exit_code=None,
                error=f"Could not remove {metadata_dir}: {e}",
            )
        return ProcessResult(command=command, success=True, exit_code=0)
