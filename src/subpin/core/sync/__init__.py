"""
Revision propagation ("sync") between top-level modules.

Example:
    >>> from subpin.core.sync import SyncPropagator, dependents
    >>> dependents(repo_root, "lib/core", ["lib/core", "lib/ui", "docs"])
    {'lib/ui'}
"""

from subpin.core.sync.models import DependentStatus, SyncReport
from subpin.core.sync.propagator import SyncPropagator, depends_on, dependents

__all__ = [
    "DependentStatus",
    "SyncPropagator",
    "SyncReport",
    "depends_on",
    "dependents",
]
