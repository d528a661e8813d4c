"""
Test doubles and layout helpers shared by the test modules.

FakeGateway records git calls instead of running git; the helpers lay out
fake module checkouts on disk.
"""

from __future__ import annotations

import io
from pathlib import Path

from rich.console import Console

from subpin.core.vcs import DependencyInstaller, GitGateway, IndexEntry, ProcessResult

SHA_OLD = "1" * 40
SHA_NEW = "a" * 40
SHA_OTHER = "b" * 40


# ==============================================================================
# Helpers
# ==============================================================================


def gitmodules(*modules: str) -> str:
    """Render a .gitmodules file declaring `modules`."""
    sections = []
    for module in modules:
        sections.append(
            f'[submodule "{module}"]\n'
            f"\tpath = {module}\n"
            f"\turl = https://example.com/{module.replace('/', '-')}.git\n"
        )
    return "".join(sections)


def make_checkout(root: Path, module: str, nested: tuple[str, ...] | None = None) -> Path:
    """Create a fake module checkout (a directory with a .git file)."""
    path = root / module
    path.mkdir(parents=True, exist_ok=True)
    (path / ".git").write_text(f"gitdir: ../.git/modules/{module}\n")
    if nested is not None:
        (path / ".gitmodules").write_text(gitmodules(*nested))
    return path


def output_of(console: Console) -> str:
    """Text written to a console created by `recording_console`."""
    return console.file.getvalue()  # type: ignore[attr-defined]


def recording_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


# ==============================================================================
# Fakes
# ==============================================================================


class FakeGateway(GitGateway):
    """
    In-memory stand-in for GitGateway.

    Records every git call as (method name, args). Checkout detection is real
    (it looks for .git on disk), so tests lay out directories with
    `make_checkout`. Heads and indexes are keyed by paths relative to the
    repository root.
    """

    def __init__(
        self,
        repo_root: Path,
        *,
        heads: dict[str, str] | None = None,
        indexes: dict[str, dict[str, IndexEntry]] | None = None,
        fail: set[str] | None = None,
        missing_commits: set[str] | None = None,
    ) -> None:
        super().__init__(repo_root)
        self.calls: list[tuple[str, tuple]] = []
        self.heads = heads or {}
        self.indexes = indexes or {}
        self.fail = fail or set()
        self.missing_commits = missing_commits or set()

    def rel(self, path: Path) -> str:
        return path.resolve().relative_to(self.repo_root).as_posix()

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def calls_for(self, name: str) -> list[tuple]:
        return [args for call, args in self.calls if call == name]

    def _result(self, name: str, *args: object, stdout: str = "") -> ProcessResult:
        self.calls.append((name, args))
        command = ["git", name, *(str(a) for a in args)]
        if name in self.fail:
            return ProcessResult(
                command=command, success=False, exit_code=1, stderr=f"fatal: {name} failed"
            )
        return ProcessResult(command=command, success=True, exit_code=0, stdout=stdout)

    async def rev_parse_head(self, checkout: Path) -> ProcessResult:
        if not self.is_checkout(checkout):
            return ProcessResult(
                command=["git", "rev-parse"],
                success=False,
                exit_code=None,
                error=f"Not a checked-out module: {checkout}",
            )
        sha = self.heads.get(self.rel(checkout))
        if sha is None:
            self.calls.append(("rev_parse_head", (self.rel(checkout),)))
            return ProcessResult(
                command=["git", "rev-parse"],
                success=False,
                exit_code=128,
                stderr="fatal: Needed a single revision",
            )
        return self._result("rev_parse_head", self.rel(checkout), stdout=f"{sha}\n")

    async def read_index_entry(self, repo: Path, path: str) -> ProcessResult:
        entry = self.indexes.get(self.rel(repo), {}).get(path)
        stdout = f"{entry.mode} {entry.sha} {entry.stage}\t{entry.path}\n" if entry else ""
        return self._result("read_index_entry", self.rel(repo), path, stdout=stdout)

    async def write_index_entry(self, repo: Path, entry: IndexEntry) -> ProcessResult:
        result = self._result("write_index_entry", self.rel(repo), entry)
        if result.success:
            self.indexes.setdefault(self.rel(repo), {})[entry.path] = entry
        return result

    async def has_commit(self, repo: Path, sha: str) -> ProcessResult:
        self.calls.append(("has_commit", (self.rel(repo), sha)))
        present = sha not in self.missing_commits
        return ProcessResult(
            command=["git", "cat-file"], success=present, exit_code=0 if present else 1
        )

    async def fetch(self, repo: Path) -> ProcessResult:
        result = self._result("fetch", self.rel(repo))
        if result.success:
            self.missing_commits.clear()
        return result

    async def checkout_detached(self, repo: Path, sha: str) -> ProcessResult:
        result = self._result("checkout_detached", self.rel(repo), sha)
        if result.success:
            self.heads[self.rel(repo)] = sha
        return result

    async def submodule_update_init(self, module: str) -> ProcessResult:
        return self._result("submodule_update_init", module)

    async def submodule_sync(self, module: str) -> ProcessResult:
        return self._result("submodule_sync", module)

    async def submodule_update_remote(self, module: str) -> ProcessResult:
        return self._result("submodule_update_remote", module)

    async def submodule_deinit(self, module: str) -> ProcessResult:
        return self._result("submodule_deinit", module)

    async def switch_branch(self, module: str, branch: str) -> ProcessResult:
        if not self.is_checkout(self.module_dir(module)):
            return ProcessResult(
                command=["git", "checkout", branch],
                success=False,
                exit_code=None,
                error=f"Not a checked-out module: {self.module_dir(module)}",
            )
        return self._result("switch_branch", module, branch)

    async def clean_untracked(self, module: str) -> ProcessResult:
        return self._result("clean_untracked", module)

    async def remove_cached(self, module: str) -> ProcessResult:
        return self._result("remove_cached", module)

    async def reset_paths(self, *paths: str) -> ProcessResult:
        return self._result("reset_paths", *paths)

    async def restore_paths(self, *paths: str) -> ProcessResult:
        return self._result("restore_paths", *paths)

    async def remove_module_metadata(self, module: str) -> ProcessResult:
        return self._result("remove_module_metadata", module)


class RecordingInstaller(DependencyInstaller):
    """Installer that records module directories instead of running anything."""

    def __init__(self, enabled: bool = True) -> None:
        super().__init__(["pnpm", "i", "-P"], enabled=enabled)
        self.installed: list[Path] = []

    async def install(self, module_dir: Path) -> ProcessResult:
        self.installed.append(module_dir)
        return ProcessResult(command=self.command, success=True, exit_code=0)
