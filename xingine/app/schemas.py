"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..domain.models import ConditionalExpression, SerializableAction
from ..schemas.results import ActionResult


class CreateSessionRequest(BaseModel):
    initial_state: Dict[str, Any] = Field(default_factory=dict)
    # Present only for sessions that render a form
    form_data: Optional[Dict[str, Any]] = None


class CreateSessionResponse(BaseModel):
    session_id: str


class DispatchRequest(BaseModel):
    actions: Union[SerializableAction, List[SerializableAction]]
    event: Optional[Any] = None

    def action_list(self) -> List[SerializableAction]:
        if isinstance(self.actions, list):
            return list(self.actions)
        return [self.actions]


class SessionRead(BaseModel):
    session_id: str
    global_state: Dict[str, Any]
    content_state: Dict[str, Any]
    component_state: Dict[str, Dict[str, Any]]
    form_data: Optional[Dict[str, Any]] = None
    form_errors: Optional[Dict[str, Any]] = None
    local_storage: Dict[str, Any]
    navigation_history: List[str]
    toasts: List[Dict[str, Any]]
    errors: List[Dict[str, Any]]
    chain_context: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None


class DispatchResponse(BaseModel):
    results: List[ActionResult]
    session: SessionRead


class EvaluateConditionRequest(BaseModel):
    condition: ConditionalExpression
    context: Dict[str, Any] = Field(default_factory=dict)


class EvaluateConditionResponse(BaseModel):
    result: bool
