"""
Git access for subpin.

Every external call is an awaited subprocess producing a ProcessResult;
StepRunner sequences those calls and keeps going after failures.

Example:
    >>> from subpin.core.vcs import GitGateway, StepRunner
    >>> gateway = GitGateway(repo_root)
    >>> runner = StepRunner()
    >>> await runner.run(partial(gateway.submodule_update_init, "lib/core"))
"""

from .gateway import GitGateway
from .installer import DependencyInstaller
from .models import GITLINK_MODE, IndexEntry, parse_index_entry
from .process import ProcessResult, run_process
from .runner import Step, StepRunner

__all__ = [
    "DependencyInstaller",
    "GITLINK_MODE",
    "GitGateway",
    "IndexEntry",
    "ProcessResult",
    "Step",
    "StepRunner",
    "parse_index_entry",
    "run_process",
]
