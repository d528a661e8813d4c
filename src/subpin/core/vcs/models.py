"""
Git index data models.
"""

from pydantic import BaseModel

GITLINK_MODE = "160000"
"""Index mode of a submodule pointer (a "gitlink")."""


class IndexEntry(BaseModel):
    """
    One staged entry as printed by `git ls-files --stage`.

    For a module pointer, `mode` is 160000 and `sha` is the pinned commit.
    """

    mode: str
    sha: str
    stage: int = 0
    path: str

    def cacheinfo(self) -> str:
        """Format as the `--cacheinfo <mode>,<sha>,<path>` argument."""
        return f"{self.mode},{self.sha},{self.path}"


def parse_index_entry(output: str, path: str) -> IndexEntry | None:
    """
    Find the entry for `path` in `git ls-files --stage` output.

    Lines look like ``160000 3f2a...e1 0<TAB>lib/core``. Only an exact path
    match counts, so a directory of regular files never reads as a pin.

    Returns:
        The first matching entry, or None when the path is not staged.
    """
    for line in output.splitlines():
        meta, sep, entry_path = line.partition("\t")
        if not sep or entry_path != path:
            continue
        parts = meta.split()
        if len(parts) != 3:
            continue
        mode, sha, stage = parts
        try:
            stage_number = int(stage)
        except ValueError:
            continue
        return IndexEntry(mode=mode, sha=sha, stage=stage_number, path=entry_path)
    return None
