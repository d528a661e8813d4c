"""
Data models for revision propagation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class DependentStatus(str, Enum):
    """What happened to one candidate module during a sync."""

    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class SyncReport(BaseModel):
    """
    Result of propagating one module's revision.

    Example:
        >>> report = await propagator.sync("lib/core")
        >>> report.updated
        ['lib/ui']
    """

    dependency: str | None = Field(
        default=None,
        description="Module whose revision was propagated",
    )
    target: str | None = Field(
        default=None,
        description="Single candidate the sync was restricted to, if any",
    )
    revision: str | None = Field(
        default=None,
        description="Commit the dependency is checked out at",
    )

    updated: list[str] = Field(
        default_factory=list,
        description="Dependents whose pin now matches the revision",
    )
    skipped: list[str] = Field(
        default_factory=list,
        description="Candidates that do not declare the dependency",
    )
    failed: list[str] = Field(
        default_factory=list,
        description="Dependents whose pin could not be updated",
    )

    aborted: bool = Field(
        default=False,
        description="True when nothing was attempted because a precondition failed",
    )
    reason: str | None = Field(
        default=None,
        description="Why the sync was aborted",
    )

    def record(self, candidate: str, status: DependentStatus) -> None:
        getattr(self, status.value).append(candidate)

    @property
    def success(self) -> bool:
        return not self.aborted and not self.failed

    def summary(self) -> str:
        """Generate a human-readable summary."""
        if self.aborted:
            return f"Sync aborted: {self.reason}"
        short = (self.revision or "")[:8]
        parts = [f"{self.dependency} @ {short}"]
        if self.updated:
            parts.append(f"updated {', '.join(self.updated)}")
        else:
            parts.append("no dependents to update")
        if self.failed:
            parts.append(f"failed {', '.join(self.failed)}")
        return "; ".join(parts)
