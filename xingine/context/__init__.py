"""
Context Layer - Host Collaborators

Defines the host capability contracts the engine is written against and
dictionary-backed implementations of them.
"""

from xingine.context.interface import (
    ActionExecutionContext,
    ComponentStateStore,
    ContentActionContext,
    FormActionContext,
    GlobalActionContext,
    StateStore,
    capability,
    maybe_await,
)
from xingine.context.memory import (
    InMemoryComponentStateStore,
    InMemoryContentContext,
    InMemoryFormContext,
    InMemoryGlobalContext,
)

__all__ = [
    "ActionExecutionContext",
    "ComponentStateStore",
    "ContentActionContext",
    "FormActionContext",
    "GlobalActionContext",
    "StateStore",
    "capability",
    "maybe_await",
    "InMemoryComponentStateStore",
    "InMemoryContentContext",
    "InMemoryFormContext",
    "InMemoryGlobalContext",
]
