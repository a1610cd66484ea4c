"""
Context Layer - In-Memory Hosts

Dictionary-backed implementations of the host contracts. Used by the HTTP
reference host, the sample script and the test-suite.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .interface import (
    ComponentStateStore,
    ContentActionContext,
    FormActionContext,
    GlobalActionContext,
    maybe_await,
)
from ..state.models import ChainContext

logger = logging.getLogger(__name__)

# request -> payload (sync or async)
ApiDelegate = Callable[[Mapping[str, Any]], Any]


class InMemoryComponentStateStore(ComponentStateStore):
    def __init__(self, component_id: str, initial_state: Optional[Dict[str, Any]] = None):
        self.component_id = component_id
        self._state: Dict[str, Any] = dict(initial_state or {})

    def get_state(self, key: str) -> Any:
        return self._state.get(key)

    def set_state(self, key: str, value: Any) -> None:
        self._state[key] = value

    def get_all_state(self) -> Dict[str, Any]:
        return dict(self._state)

    def clear(self) -> None:
        self._state.clear()


class InMemoryGlobalContext(GlobalActionContext):
    """
    Global collaborator that records every host-side effect so it can be
    inspected (navigation history, toasts, error reports, local storage).

    Network calls go to `api_delegate`; without one, make_api_call raises.
    """

    def __init__(
        self,
        initial_state: Optional[Dict[str, Any]] = None,
        api_delegate: Optional[ApiDelegate] = None,
    ):
        self.state: Dict[str, Any] = dict(initial_state or {})
        self.local_storage: Dict[str, str] = {}
        self.navigation_history: List[str] = []
        self.toasts: List[Dict[str, Any]] = []
        self.errors: List[Dict[str, Any]] = []
        self.api_delegate = api_delegate

    # --- State ---
    def get_state(self, key: str) -> Any:
        return self.state.get(key)

    def set_state(self, key: str, value: Any) -> None:
        self.state[key] = value

    def get_all_state(self) -> Dict[str, Any]:
        return dict(self.state)

    # --- Navigation / Network ---
    def navigate(self, path: str) -> None:
        logger.debug(f"Navigating to {path}")
        self.navigation_history.append(path)

    async def make_api_call(self, request: Mapping[str, Any]) -> Any:
        if self.api_delegate is None:
            raise RuntimeError("No API delegate configured for this host")
        return await maybe_await(self.api_delegate(request))

    # --- Storage ---
    def set_local_storage(self, key: str, value: Any) -> None:
        self.local_storage[key] = value if isinstance(value, str) else str(value)

    def get_local_storage(self, key: str) -> Optional[str]:
        return self.local_storage.get(key)

    def remove_local_storage(self, key: str) -> None:
        self.local_storage.pop(key, None)

    def clear_local_storage(self) -> None:
        self.local_storage.clear()

    # --- Feedback ---
    def show_toast(self, message: str, type: str = "info") -> None:
        self.toasts.append({"message": message, "type": type})

    def error(self, message: str, details: Any = None) -> None:
        self.errors.append({"message": message, "details": details})


class InMemoryContentContext(ContentActionContext):
    """Content collaborator with lazily created component stores."""

    def __init__(self, initial_state: Optional[Dict[str, Any]] = None):
        self.chain_context: Optional[ChainContext] = None
        self.content_state: Dict[str, Any] = dict(initial_state or {})
        self.component_stores: Dict[str, InMemoryComponentStateStore] = {}

    def get_component_state_store(self, component_id: str) -> InMemoryComponentStateStore:
        store = self.component_stores.get(component_id)
        if store is None:
            store = InMemoryComponentStateStore(component_id)
            self.component_stores[component_id] = store
        return store

    def get_content_state(self, key: str) -> Any:
        return self.content_state.get(key)

    def set_content_state(self, key: str, value: Any) -> None:
        self.content_state[key] = value

    def get_all_content_state(self) -> Dict[str, Any]:
        return dict(self.content_state)


class InMemoryFormContext(FormActionContext):
    """
    Form collaborator holding data, initial data and per-field errors.

    `validators` map a field name to a callable returning an error message
    (or None). `on_submit` receives the submission events and the current data.
    """

    def __init__(
        self,
        initial_data: Optional[Dict[str, Any]] = None,
        validators: Optional[Dict[str, Callable[[Any], Optional[str]]]] = None,
        on_submit: Optional[Callable[[Any, Dict[str, Any]], Any]] = None,
    ):
        self.initial_data: Dict[str, Any] = dict(initial_data or {})
        self.data: Dict[str, Any] = copy.deepcopy(self.initial_data)
        self.errors: Dict[str, str] = {}
        self.validators = dict(validators or {})
        self.on_submit = on_submit
        self.submissions: List[Dict[str, Any]] = []

    def get_form_data(self) -> Dict[str, Any]:
        return dict(self.data)

    def set_form_data(self, data: Mapping[str, Any]) -> None:
        self.data.update(data)

    def get_field(self, name: str) -> Any:
        return self.data.get(name)

    def set_field(self, name: str, value: Any) -> None:
        self.data[name] = value

    def validate_field(self, name: str) -> bool:
        validator = self.validators.get(name)
        message = validator(self.data.get(name)) if validator else None
        if message:
            self.errors[name] = message
            return False
        self.errors.pop(name, None)
        return True

    def validate_form(self) -> bool:
        results = [self.validate_field(name) for name in self.validators]
        return all(results)

    def get_errors(self) -> Dict[str, str]:
        return dict(self.errors)

    def set_errors(self, errors: Mapping[str, Any]) -> None:
        self.errors = {key: str(value) for key, value in errors.items()}

    def clear_errors(self) -> None:
        self.errors.clear()

    def set_initial_form_data(self, data: Mapping[str, Any]) -> None:
        self.initial_data = dict(data)

    def reset_form(self) -> None:
        self.data = copy.deepcopy(self.initial_data)
        self.errors.clear()

    async def submit_form(self, events: Any) -> Any:
        submission = {"events": events, "data": dict(self.data)}
        self.submissions.append(submission)
        if self.on_submit is None:
            return submission
        return await maybe_await(self.on_submit(events, dict(self.data)))
