"""Module lifecycle operations over the root manifest."""

from .service import ModuleService, OperationResult

__all__ = ["ModuleService", "OperationResult"]
