"""
Argv preprocessor so global options may appear anywhere on the line.

Typer only accepts the callback's options before the subcommand. Users type
them wherever they like:

- ``subpin --version`` → ``subpin version``
- ``subpin help sync`` → ``subpin sync --help``
- ``subpin sync lib/core --debug`` → ``subpin --debug sync lib/core``
- ``subpin list -C ../app`` → ``subpin -C ../app list``
"""

_GLOBAL_FLAGS = {"--debug"}
_GLOBAL_OPTIONS = {"--root", "-C"}


def preprocess_argv(argv: list[str]) -> list[str]:
    """Normalize CLI arguments for Typer compatibility.

    Applied rules (in order):
    1. ``--version`` / ``-V`` as first arg → ``version`` subcommand
    2. ``help`` pseudo-command → ``<subcommand> --help``
    3. Global flags and options (with their value) moved before the subcommand
    """
    if not argv:
        return argv

    if argv[0] in ("--version", "-V"):
        return ["version"]

    if argv[0] == "help":
        return _rewrite_help(argv[1:])

    return _hoist_globals(argv)


def _rewrite_help(rest: list[str]) -> list[str]:
    """``help [subcommand]`` → ``[subcommand] --help``; flags are dropped."""
    subcommand = next(
        (token for token in rest if not token.startswith("-") and token != "help"),
        None,
    )
    return [subcommand, "--help"] if subcommand else ["--help"]


def _hoist_globals(argv: list[str]) -> list[str]:
    hoisted: list[str] = []
    rest: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            rest.append(token)
            rest.extend(tokens)
            break
        if token in _GLOBAL_FLAGS:
            if token not in hoisted:
                hoisted.append(token)
        elif token in _GLOBAL_OPTIONS:
            value = next(tokens, None)
            hoisted.append(token)
            if value is not None:
                hoisted.append(value)
        elif token.startswith("--root="):
            hoisted.append(token)
        else:
            rest.append(token)
    return [*hoisted, *rest]
