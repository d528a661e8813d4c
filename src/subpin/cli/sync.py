"""
subpin CLI - sync command.

Propagates one module's checked-out revision into the other top-level
modules that nest it as a submodule of their own.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from subpin.cli.context import get_state, run_async
from subpin.cli.errors import print_sync_aborted_error, print_warning

console = Console()


def sync(
    ctx: typer.Context,
    dependency: Optional[str] = typer.Argument(
        None,
        help="Module whose current revision should be propagated",
        show_default=False,
    ),
    target: Optional[str] = typer.Argument(
        None,
        help="Only update this module (default: every module that nests the dependency)",
        show_default=False,
    ),
) -> None:
    """
    Propagate a module's current revision to the modules that depend on it.

    Reads each other module's own .gitmodules; where the dependency is
    declared, its pin in that module's index is rewritten to the commit the
    dependency is checked out at. Commit the change inside each updated
    module afterwards.

    Examples:
        subpin sync lib/core            # update every module nesting lib/core
        subpin sync lib/core lib/ui     # update lib/ui only
    """
    report = run_async(get_state(ctx).service().sync(dependency, target))

    if report.aborted:
        print_sync_aborted_error(report.dependency, report.reason)
        return

    dependency_name = escape(report.dependency or "")
    revision = (report.revision or "")[:8]
    for module in report.updated:
        console.print(
            f"[green]✓[/green] {escape(module)} now pins {dependency_name} "
            f"at [blue]{revision}[/blue]",
            highlight=False,
        )

    if not report.updated and not report.failed:
        console.print(f"[dim]No module depends on {dependency_name}[/dim]", highlight=False)

    if report.failed:
        print_warning(f"Could not update: {', '.join(report.failed)}")


__all__ = ["sync"]
