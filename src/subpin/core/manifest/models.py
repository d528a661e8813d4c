"""
Manifest data models.

A manifest is a .gitmodules file: one `[submodule "<name>"]` section per
module, each carrying at least `path` and `url`.
"""

from pydantic import BaseModel, Field


class ModuleReference(BaseModel):
    """
    A single `[submodule]` section of a manifest.

    Attributes:
        name: Identifier from the section header (the module identifier)
        path: Checkout location relative to the repository root
        url: Remote the module is cloned from
        branch: Remote branch tracked by `git submodule update --remote`
    """

    name: str
    path: str | None = None
    url: str | None = None
    branch: str | None = Field(
        default=None,
        description="Upstream branch recorded in the manifest (not a checkout override)",
    )
