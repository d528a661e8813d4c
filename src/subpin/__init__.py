"""
subpin - pinned git submodule management

A CLI tool that checks out, pulls, cleans and removes the modules declared
in .gitmodules, and propagates a module's revision into the other modules
that nest it.
"""

__version__ = "0.4.0"

# Re-export core models for convenience
from subpin.core.config.models import SubpinConfig
from subpin.core.sync.models import SyncReport

__all__ = ["SubpinConfig", "SyncReport", "__version__"]
