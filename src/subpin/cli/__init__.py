"""
subpin CLI - Main application entry point.

This module sets up the Typer CLI application with all commands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from subpin import __version__
from subpin.cli import modules, sync
from subpin.cli.argv import preprocess_argv
from subpin.cli.context import CliState
from subpin.cli.errors import ExitCode, print_invalid_config_error, print_not_git_repo_warning
from subpin.core.config import load_config, load_layered_env
from subpin.utils.project import find_project_root

PANEL_INSPECT = "Inspect"
PANEL_MODULES = "Manage Modules"
PANEL_SYNC = "Keep Dependents Consistent"

app = typer.Typer(
    name="subpin",
    help="Manage pinned git submodules and keep nested pins consistent",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    """
    Configure logging for the CLI.

    Args:
        debug: If True, enable DEBUG level logging (every git call is logged)
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def resolve_repo_root(root: Optional[Path]) -> Path:
    """The explicit --root, else the enclosing git work tree, else the cwd."""
    if root is not None:
        return root.resolve()
    found = find_project_root()
    if found is not None:
        return found
    fallback = Path.cwd()
    print_not_git_repo_warning(str(fallback))
    return fallback


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-C",
        help="Repository root (default: the git work tree containing the current directory)",
        file_okay=False,
        exists=True,
    ),
) -> None:
    """
    subpin - pinned submodule management.

    Reads the modules declared in .gitmodules and wraps git to check them
    out, pull, clean or remove them. `subpin sync` carries a module's
    current revision into every other module that nests it.

    Quick Start:
        subpin list                      # Show declared modules
        subpin checkout                  # Initialize every module
        subpin sync lib/core             # Propagate lib/core's revision

    Configuration:
        .subpin.json, ~/.config/subpin/config.json and SUBPIN_* variables
        (also read from .env files).
    """
    configure_logging(debug)

    if ctx.invoked_subcommand == "version":
        return

    repo_root = resolve_repo_root(root)

    # Precedence: OS env > project .env > user .env
    load_layered_env(project_dir=repo_root)

    try:
        config = load_config(repo_root, use_cache=False)
    except ValidationError as e:
        print_invalid_config_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)

    ctx.obj = CliState(repo_root=repo_root, config=config, debug=debug)


# =============================================================================
# Inspect
# =============================================================================

app.command(name="list", rich_help_panel=PANEL_INSPECT)(modules.list_modules)


# =============================================================================
# Manage Modules
# =============================================================================

app.command(name="checkout", rich_help_panel=PANEL_MODULES)(modules.checkout)
app.command(name="pull", rich_help_panel=PANEL_MODULES)(modules.pull)
app.command(name="clean", rich_help_panel=PANEL_MODULES)(modules.clean)
app.command(name="remove", rich_help_panel=PANEL_MODULES)(modules.remove)


# =============================================================================
# Keep Dependents Consistent
# =============================================================================

app.command(name="sync", rich_help_panel=PANEL_SYNC)(sync.sync)


@app.command(rich_help_panel=PANEL_INSPECT)
def version() -> None:
    """Show subpin version and exit."""
    console.print(f"subpin version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """
    Main CLI entry point.

    The argv preprocessor normalizes common patterns before Typer parses
    them (e.g. ``subpin --version``, ``subpin help sync``,
    ``subpin sync lib/core --debug``).
    """
    sys.argv[1:] = preprocess_argv(sys.argv[1:])
    app()


__all__ = ["app", "cli_main"]
