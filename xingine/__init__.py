"""
Xingine

A serializable action execution engine: interprets JSON-safe action trees
(state mutation, navigation, network calls, storage, toasts) against
host-supplied collaborators, threading each result through conditional
chains and sequential continuations.
"""

from xingine.domain import (
    ActionNode,
    BaseFilterCondition,
    ConditionalChain,
    ConditionalExpression,
    GroupCondition,
    SerializableAction,
    parse_action,
    parse_condition,
)
from xingine.schemas import ActionError, ActionResult, ErrorKind
from xingine.state import ChainContext
from xingine.context import (
    ActionExecutionContext,
    ComponentStateStore,
    ContentActionContext,
    FormActionContext,
    GlobalActionContext,
)
from xingine.expressions import evaluate_condition, resolve_context_value, resolve_path, resolve_store
from xingine.actions import ActionRegistry, build_form_registry, build_page_registry
from xingine.execution import ActionEngine, HandlerExecutor

__all__ = [
    # Domain Layer
    "ActionNode",
    "BaseFilterCondition",
    "ConditionalChain",
    "ConditionalExpression",
    "GroupCondition",
    "SerializableAction",
    "parse_action",
    "parse_condition",
    # Schemas
    "ActionError",
    "ActionResult",
    "ErrorKind",
    # State Layer
    "ChainContext",
    # Context Layer
    "ActionExecutionContext",
    "ComponentStateStore",
    "ContentActionContext",
    "FormActionContext",
    "GlobalActionContext",
    # Expressions
    "evaluate_condition",
    "resolve_context_value",
    "resolve_path",
    "resolve_store",
    # Actions
    "ActionRegistry",
    "build_form_registry",
    "build_page_registry",
    # Execution Layer
    "ActionEngine",
    "HandlerExecutor",
]
