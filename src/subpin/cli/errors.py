"""
Standardized error output and exit codes for the subpin CLI.

Failed git steps never change the exit code; these helpers cover the few
conditions subpin reports on its own.
"""

from enum import IntEnum

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for subpin."""

    SUCCESS = 0
    """Operation completed (individual git steps may still have failed)."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Cannot sync lib/core",
        ...     reason="lib/core is not checked out",
        ...     solution="subpin checkout lib/core",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_warning(message: str) -> None:
    """Print a non-fatal warning."""
    console.print(f"[yellow]⚠[/yellow]  {escape(message)}")


def print_not_git_repo_warning(fallback: str) -> None:
    """Warn when no git work tree contains the working directory."""
    print_warning(f"Not inside a git work tree, using {fallback} as the repository root")


def print_sync_aborted_error(dependency: str | None, reason: str | None) -> None:
    """Print why a sync did not propagate anything."""
    if not dependency:
        print_error(
            "No module given to sync",
            solution="subpin sync <module> [target-module]",
        )
        return

    print_error(
        f"Cannot sync {dependency}",
        reason=reason,
        solution=f"subpin checkout {dependency}  # the module must be checked out",
    )


def print_invalid_config_error(error: ValidationError) -> None:
    """Print configuration validation errors."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    )
    print_error(
        "Invalid subpin configuration",
        reason=details,
        solution="Check .subpin.json, ~/.config/subpin/config.json and SUBPIN_* variables",
    )


__all__ = [
    "ExitCode",
    "print_error",
    "print_invalid_config_error",
    "print_not_git_repo_warning",
    "print_sync_aborted_error",
    "print_warning",
]
