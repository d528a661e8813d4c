"""
subpin CLI - module lifecycle commands.

list, clean, checkout, pull and remove all walk the root manifest in order.
Given a module name, they act on that module only; an unknown name is a
silent no-op.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from subpin.cli.context import get_state, run_async
from subpin.cli.errors import print_warning
from subpin.core.modules import OperationResult

console = Console()

MODULE_ARGUMENT = typer.Argument(
    None,
    help="Module path as declared in .gitmodules (default: all modules)",
    show_default=False,
)


def _finish(result: OperationResult) -> None:
    """Summarize failed steps; they never change the exit code."""
    if result.failures:
        print_warning(result.summary())


def list_modules(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show path, URL and upstream branch for each module",
    ),
) -> None:
    """
    Print the declared modules, one per line, in manifest order.

    Examples:
        subpin list
        subpin list --verbose
    """
    service = get_state(ctx).service()

    if not verbose:
        for module in service.modules:
            console.out(module, highlight=False)
        return

    references = service.references()
    if not references:
        console.print("[yellow]No modules declared[/yellow]")
        return

    table = Table(title="Modules")
    table.add_column("Module", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("URL", style="blue")
    table.add_column("Branch", style="magenta")
    for ref in references:
        table.add_row(ref.name, ref.path or "", ref.url or "", ref.branch or "")
    console.print(table)


def clean(
    ctx: typer.Context,
    module: Optional[str] = MODULE_ARGUMENT,
) -> None:
    """
    Reset module(s) to the declared-but-uninitialized state.

    Deletes all untracked and ignored content of the checkout, deinitializes
    it, drops .git/modules/<module>, then restores .gitmodules and the pin
    from the last commit.

    Examples:
        subpin clean              # every module
        subpin clean lib/core/    # one module (trailing slash is ignored)
    """
    _finish(run_async(get_state(ctx).service().clean(module)))


def checkout(
    ctx: typer.Context,
    module: Optional[str] = MODULE_ARGUMENT,
) -> None:
    """
    Initialize module(s) at the pinned revision and install dependencies.

    A module listed in .gitbranches (`<module> <branch>` per line) is
    switched to that branch after the update.

    Examples:
        subpin checkout
        subpin checkout lib/ui
    """
    _finish(run_async(get_state(ctx).service().checkout(module)))


def pull(
    ctx: typer.Context,
    module: Optional[str] = MODULE_ARGUMENT,
) -> None:
    """
    Update module(s) to the latest remote revision and install dependencies.

    Examples:
        subpin pull
        subpin pull lib/core
    """
    _finish(run_async(get_state(ctx).service().pull(module)))


def remove(
    ctx: typer.Context,
    module: Optional[str] = MODULE_ARGUMENT,
) -> None:
    """
    Deinitialize module(s) and remove them from the index and .gitmodules.

    Unlike clean, nothing is restored: the module is no longer declared.

    Examples:
        subpin remove lib/legacy
    """
    _finish(run_async(get_state(ctx).service().remove(module)))


__all__ = ["checkout", "clean", "list_modules", "pull", "remove"]
