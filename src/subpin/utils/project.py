"""
Repository root discovery.

Every operation takes the repository root explicitly; this module is the
one place where it is derived from the process working directory.
"""

from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo


def find_project_root(start: Path | None = None) -> Path | None:
    """
    Find the root of the git work tree containing `start`.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the work tree root, or None if `start` is not inside one
        (or is inside a bare repository).

    Example:
        >>> find_project_root(Path("/work/app/lib/core/src"))  # lib/core not initialized
        PosixPath('/work/app')
    """
    if start is None:
        start = Path.cwd()

    try:
        repo = Repo(start.resolve(), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None

    if repo.working_tree_dir is None:
        return None
    return Path(repo.working_tree_dir)

