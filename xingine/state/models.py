"""
State Layer - Runtime Data Models

This module defines the runtime snapshot the engine threads through a dispatch
tree: the ChainContext describing the most recently completed action.
Continuations read it through the prior-result marker ('__result.').
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel

from ..schemas.results import ActionError, ActionResult


class ChainContext(BaseModel):
    """
    Snapshot of the most recently completed action in the current chain evaluation.
    """
    success: Optional[bool] = None
    result: Any = None
    error: Optional[ActionError] = None

    @classmethod
    def from_result(cls, result: ActionResult) -> "ChainContext":
        return cls(success=result.success, result=result.result, error=result.error)

    @property
    def has_error(self) -> bool:
        return self.error is not None or self.success is False

    def as_evaluation_fields(self) -> Dict[str, Any]:
        """The reserved fields conditions branch on."""
        return {
            "__success": self.success,
            "__hasError": self.has_error,
            "__error": self.error.model_dump(mode="json") if self.error else None,
            "__result": self.result,
        }
