"""
State Layer - Host Sessions

A HostSession bundles the in-memory collaborators backing one rendering
root of the reference host: its global store, its content area (with the
component stores) and, optionally, a form. The engine never owns these;
the session repository does.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..context.interface import ActionExecutionContext
from ..context.memory import InMemoryContentContext, InMemoryFormContext, InMemoryGlobalContext


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HostSession(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str
    global_context: InMemoryGlobalContext
    content_context: InMemoryContentContext = Field(default_factory=InMemoryContentContext)
    form_context: Optional[InMemoryFormContext] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def execution_context(self) -> ActionExecutionContext:
        return ActionExecutionContext(
            global_context=self.global_context,
            content_context=self.content_context,
            form_context=self.form_context,
        )

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def snapshot(self) -> Dict[str, Any]:
        """Everything a client needs to re-render; values are not yet JSON-encoded."""
        chain_context = self.content_context.chain_context
        return {
            "session_id": self.session_id,
            "global_state": self.global_context.get_all_state(),
            "content_state": self.content_context.get_all_content_state(),
            "component_state": {
                component_id: store.get_all_state()
                for component_id, store in self.content_context.component_stores.items()
            },
            "form_data": self.form_context.get_form_data() if self.form_context else None,
            "form_errors": self.form_context.get_errors() if self.form_context else None,
            "local_storage": dict(self.global_context.local_storage),
            "navigation_history": list(self.global_context.navigation_history),
            "toasts": list(self.global_context.toasts),
            "errors": list(self.global_context.errors),
            "chain_context": chain_context.model_dump(mode="json") if chain_context else None,
            "updated_at": self.updated_at,
        }
