"""
Context Layer - Host Capability Contracts

The engine owns no state. Everything it reads or mutates is borrowed from the
host through the collaborators defined here, bundled per invocation site into
an ActionExecutionContext.

State accessors (get_state / set_state / get_all_state) are synchronous.
Capabilities that may perform I/O (navigate, make_api_call, storage, toast,
auth, form submission) may be implemented either as plain methods or as
coroutines; the handlers await them when needed.

Optional capabilities are not declared abstract: a host simply omits them and
the handlers that need them fail with a CAPABILITY error.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..state.models import ChainContext

if TYPE_CHECKING:
    from ..expressions.providers import DataProviderFactory


class StateStore(ABC):
    """Opaque key/value collaborator."""

    @abstractmethod
    def get_state(self, key: str) -> Any:
        pass

    @abstractmethod
    def set_state(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def get_all_state(self) -> Dict[str, Any]:
        pass


class ComponentStateStore(StateStore):
    """
    State owned by one live component.
    May additionally expose `make_api_call(request)` to override the global delegate.
    """
    component_id: str


class GlobalActionContext(StateStore):
    """
    Process-wide collaborator.

    Required: state accessors, navigate, make_api_call.
    Optional: set_local_storage, get_local_storage, remove_local_storage,
    clear_local_storage, show_toast(message, type), error(message, details),
    login(credentials), logout(), dynamic(name, args, event).
    """

    @abstractmethod
    def navigate(self, path: str) -> Union[None, Awaitable[None]]:
        pass

    @abstractmethod
    def make_api_call(self, request: Mapping[str, Any]) -> Any:
        """
        Delegates a network call. `request` carries 'url', 'method' and 'body'.
        May return the payload directly or an awaitable.
        """
        pass


class ContentActionContext(ABC):
    """
    Content-area collaborator.

    Carries the chain_context snapshot published by the engine and hands out
    per-component stores. Content-level accessors (get_content_state,
    set_content_state, get_all_content_state) are optional.
    """
    chain_context: Optional[ChainContext] = None

    @abstractmethod
    def get_component_state_store(self, component_id: str) -> ComponentStateStore:
        """Returns the store for `component_id`, creating it on first use."""
        pass


class FormActionContext(ABC):
    """Form-lifecycle collaborator, present only while an action runs inside a form."""

    @abstractmethod
    def get_form_data(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def set_form_data(self, data: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def get_field(self, name: str) -> Any:
        pass

    @abstractmethod
    def set_field(self, name: str, value: Any) -> None:
        pass

    @abstractmethod
    def validate_form(self) -> Any:
        """Returns True/False, or an awaitable of it."""
        pass

    @abstractmethod
    def validate_field(self, name: str) -> Any:
        pass

    @abstractmethod
    def get_errors(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def set_errors(self, errors: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def clear_errors(self) -> None:
        pass

    @abstractmethod
    def set_initial_form_data(self, data: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def reset_form(self) -> None:
        pass

    @abstractmethod
    def submit_form(self, events: Any) -> Any:
        pass


def _default_providers() -> "DataProviderFactory":
    from ..expressions.providers import DataProviderFactory
    return DataProviderFactory.with_defaults()


@dataclass
class ActionExecutionContext:
    """
    Bundle of host collaborators threaded through every dispatch.
    Built once per invocation site; the engine never replaces its members.
    """
    global_context: GlobalActionContext
    content_context: ContentActionContext
    form_context: Optional[FormActionContext] = None
    providers: "DataProviderFactory" = field(default_factory=_default_providers)


# ==========================================================================
# Capability helpers
# ==========================================================================

def capability(target: Any, name: str) -> Optional[Callable[..., Any]]:
    """Returns the bound method `name` on `target` if the host supplies it."""
    if target is None:
        return None
    member = getattr(target, name, None)
    return member if callable(member) else None


async def maybe_await(value: Any) -> Any:
    """Awaits `value` if the host handed back an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value
