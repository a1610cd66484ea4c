"""
Expressions - State Scope Resolver

Decides which tier a state key targets:

1. 'GLOBAL.'-prefixed keys  -> the global store
2. 'CONTENT.'-prefixed keys -> a view over the content-level accessors
3. a componentId            -> that component's store (created lazily by the host)
4. otherwise                -> the global store

The prefix is stripped before the store is touched, so 'GLOBAL.x' is stored as 'x'.
Every state-touching handler goes through resolve_store.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, NamedTuple, Optional

from ..exceptions import CapabilityMissingError
from ..context.interface import ContentActionContext, StateStore, capability

if TYPE_CHECKING:
    from ..context.interface import ActionExecutionContext

GLOBAL_PREFIX = "GLOBAL."
CONTENT_PREFIX = "CONTENT."
CONTENT_COMPONENT_ID = "content"


class StateScope(str, Enum):
    GLOBAL = "global"
    CONTENT = "content"
    COMPONENT = "component"


class ScopedStore(NamedTuple):
    store: StateStore
    key: str
    scope: StateScope


class ContentStateView(StateStore):
    """Presents the content collaborator's optional accessors as a StateStore."""

    component_id = CONTENT_COMPONENT_ID

    def __init__(self, content: ContentActionContext):
        self._content = content

    def get_state(self, key: str) -> Any:
        getter = capability(self._content, "get_content_state")
        return getter(key) if getter else None

    def set_state(self, key: str, value: Any) -> None:
        setter = capability(self._content, "set_content_state")
        if setter is None:
            raise CapabilityMissingError(
                "Content-level state requires set_content_state on the content context"
            )
        setter(key, value)

    def get_all_state(self) -> Dict[str, Any]:
        getter = capability(self._content, "get_all_content_state")
        return dict(getter() or {}) if getter else {}


def strip_scope_prefix(key: str) -> str:
    if key.startswith(GLOBAL_PREFIX):
        return key[len(GLOBAL_PREFIX):]
    if key.startswith(CONTENT_PREFIX):
        return key[len(CONTENT_PREFIX):]
    return key


def resolve_store(
    context: "ActionExecutionContext",
    key: Optional[str] = None,
    component_id: Optional[str] = None,
) -> ScopedStore:
    """Returns the store `key` targets together with the stripped key."""
    key = key or ""
    if key.startswith(GLOBAL_PREFIX):
        return ScopedStore(context.global_context, strip_scope_prefix(key), StateScope.GLOBAL)
    if key.startswith(CONTENT_PREFIX):
        return ScopedStore(
            ContentStateView(context.content_context), strip_scope_prefix(key), StateScope.CONTENT
        )
    if component_id:
        store = context.content_context.get_component_state_store(component_id)
        return ScopedStore(store, key, StateScope.COMPONENT)
    return ScopedStore(context.global_context, key, StateScope.GLOBAL)


def global_store(context: "ActionExecutionContext") -> StateStore:
    return context.global_context


def content_store(context: "ActionExecutionContext") -> StateStore:
    return ContentStateView(context.content_context)
