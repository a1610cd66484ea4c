"""
Expressions - Data Providers

Providers supply the record a visibility condition is evaluated against.
showHide accepts either a live provider object or a serializable spec
({"type": "form", "initialData": {...}}) that the factory turns into one.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional

ProviderBuilder = Callable[[Mapping[str, Any]], "DataProvider"]


class DataProvider(ABC):
    type: str

    @abstractmethod
    def get_data(self) -> Dict[str, Any]:
        pass


class FormDataProvider(DataProvider):
    """Form field values for conditional rendering."""
    type = "form"

    def __init__(self, initial_data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial_data or {})

    def get_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def get_field_value(self, field_name: str) -> Any:
        return self._data.get(field_name)

    def has_field_value(self, field_name: str, value: Any) -> bool:
        return field_name in self._data and self._data[field_name] == value

    def update_form_data(self, data: Mapping[str, Any]) -> None:
        self._data.update(data)

    def set_field_value(self, field_name: str, value: Any) -> None:
        self._data[field_name] = value


class ContextDataProvider(DataProvider):
    """Ambient context values for conditional rendering."""
    type = "context"

    def __init__(self, initial_data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial_data or {})

    def get_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def get_context_value(self, key: str) -> Any:
        return self._data.get(key)

    def update_context_data(self, data: Mapping[str, Any]) -> None:
        self._data.update(data)


def _initial_data(config: Mapping[str, Any]) -> Dict[str, Any]:
    return dict(config.get("initialData") or config.get("initial_data") or {})


class DataProviderFactory:
    """
    Per-instance registry of provider builders keyed by provider type.
    Carried on the ActionExecutionContext, so hosts can register their own types.
    """

    def __init__(self):
        self._builders: Dict[str, ProviderBuilder] = {}

    @classmethod
    def with_defaults(cls) -> "DataProviderFactory":
        factory = cls()
        factory.register("form", lambda config: FormDataProvider(_initial_data(config)))
        factory.register("context", lambda config: ContextDataProvider(_initial_data(config)))
        return factory

    def register(self, provider_type: str, builder: ProviderBuilder) -> None:
        self._builders[provider_type] = builder

    def create(self, provider_type: str, config: Optional[Mapping[str, Any]] = None) -> DataProvider:
        builder = self._builders.get(provider_type)
        if builder is None:
            raise KeyError(f"No provider factory registered for type: {provider_type}")
        return builder(config or {})

    def registered_types(self) -> List[str]:
        return list(self._builders)

    def from_spec(self, spec: Any) -> Optional[DataProvider]:
        """
        Accepts a provider object (anything with get_data) or a mapping with a
        'type' key. Returns None for anything else.
        """
        if spec is None:
            return None
        if callable(getattr(spec, "get_data", None)):
            return spec
        if isinstance(spec, Mapping) and isinstance(spec.get("type"), str):
            return self.create(spec["type"], spec)
        return None
