"""
Shared state handed from the main callback to every command.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Coroutine, TypeVar

import typer

from subpin.cli.errors import ExitCode, print_warning
from subpin.core.config.models import SubpinConfig
from subpin.core.modules import ModuleService

T = TypeVar("T")


@dataclass
class CliState:
    """Resolved repository root and configuration for this invocation."""

    repo_root: Path
    config: SubpinConfig = field(default_factory=SubpinConfig)
    debug: bool = False

    def service(self) -> ModuleService:
        return ModuleService(self.repo_root, self.config)


def get_state(ctx: typer.Context) -> CliState:
    """Fetch the CliState stored by the main callback."""
    state = ctx.find_object(CliState)
    if state is None:
        # Commands invoked on their own (e.g. from tests) get defaults
        state = CliState(repo_root=Path.cwd())
        ctx.obj = state
    return state


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine from Typer's sync command context.

    One event loop per command; every git call inside it is awaited in turn.
    Ctrl+C ends the command with exit status 130.
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        print_warning("Interrupted")
        raise typer.Exit(ExitCode.SIGINT)
