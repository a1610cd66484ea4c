"""
Expressions - Context Value Resolver

Turns symbolic reference strings into concrete values so that action
arguments can point at ambient state or at the previous action's output
without any code crossing the serialization boundary.

Reserved prefixes, checked in order:
    '__global.' / 'GLOBAL.'   global state
    '__current.'              the current component's state
    '__result.' / 'result.'   the prior result (ChainContext.result); 'result.' is legacy
    (none)                    the prior result if one exists, else global state
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..config import settings
from ..state.models import ChainContext
from .paths import resolve_path
from .scopes import GLOBAL_PREFIX

if TYPE_CHECKING:
    from ..context.interface import ActionExecutionContext

logger = logging.getLogger(__name__)

GLOBAL_MARKER = "__global."
CURRENT_MARKER = "__current."
RESULT_MARKER = "__result."
LEGACY_RESULT_MARKER = "result."

# Strings carrying one of these are always symbolic references inside API bodies.
RESERVED_MARKERS = (GLOBAL_MARKER, CURRENT_MARKER, RESULT_MARKER)

_DOTTED_PATH = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*(\[\d+\])*(\.[A-Za-z_$][A-Za-z0-9_$]*(\[\d+\])*)+")


def resolve_context_value(
    path: str,
    context: "ActionExecutionContext",
    chain_context: Optional[ChainContext] = None,
    component_id: Optional[str] = None,
) -> Any:
    if path.startswith(GLOBAL_MARKER):
        return resolve_path(context.global_context.get_all_state(), path[len(GLOBAL_MARKER):])
    if path.startswith(GLOBAL_PREFIX):
        return resolve_path(context.global_context.get_all_state(), path[len(GLOBAL_PREFIX):])
    if path.startswith(CURRENT_MARKER):
        target = component_id or settings.DEFAULT_COMPONENT_ID
        store = context.content_context.get_component_state_store(target)
        state = store.get_all_state() if store is not None else {}
        return resolve_path(state or {}, path[len(CURRENT_MARKER):])
    if path.startswith(RESULT_MARKER):
        return resolve_path(_prior_result(chain_context), path[len(RESULT_MARKER):])
    if settings.ALLOW_LEGACY_RESULT_PREFIX and path.startswith(LEGACY_RESULT_MARKER):
        return resolve_path(_prior_result(chain_context), path[len(LEGACY_RESULT_MARKER):])

    if chain_context is not None and chain_context.result is not None:
        return resolve_path(chain_context.result, path)
    return resolve_path(context.global_context.get_all_state(), path)


def _prior_result(chain_context: Optional[ChainContext]) -> Any:
    if chain_context is None or chain_context.result is None:
        return {}
    return chain_context.result


def looks_like_path(value: str) -> bool:
    """
    True for strings that should be read as symbolic references rather than literals:
    any reserved prefix, or a bare dotted identifier path ('user.profile.name').
    Free text such as 'Hello. World' or 'v1.2' stays literal.
    """
    if value.startswith("__") or value.startswith(GLOBAL_PREFIX):
        return True
    if settings.ALLOW_LEGACY_RESULT_PREFIX and value.startswith(LEGACY_RESULT_MARKER):
        return True
    return bool(_DOTTED_PATH.fullmatch(value))


def resolve_symbolic_value(
    value: Any,
    context: "ActionExecutionContext",
    component_id: Optional[str] = None,
) -> Any:
    """
    Resolves `value` through resolve_context_value when a chain is in flight and
    the string looks like a path. Anything else is returned untouched.
    """
    chain_context = context.content_context.chain_context
    if not isinstance(value, str) or chain_context is None or not looks_like_path(value):
        return value
    try:
        return resolve_context_value(value, context, chain_context, component_id)
    except Exception as e:
        logger.warning(f"Path resolution failed for '{value}', keeping literal: {e}")
        return value


def resolve_symbolic_tree(
    value: Any,
    context: "ActionExecutionContext",
    component_id: Optional[str] = None,
) -> Any:
    """
    Walks a JSON-like structure and replaces every string starting with a
    reserved marker ('__global.', '__current.', '__result.') by its resolved value.
    """
    if isinstance(value, str):
        if value.startswith(RESERVED_MARKERS):
            return resolve_context_value(
                value, context, context.content_context.chain_context, component_id
            )
        return value
    if isinstance(value, Mapping):
        return {key: resolve_symbolic_tree(item, context, component_id) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_symbolic_tree(item, context, component_id) for item in value]
    return value
