"""
Expressions - Paths, Conditions, Scopes and Symbolic Values

The pure evaluation layer the action handlers and the engine are built on.
"""

from xingine.expressions.paths import has_slugs, resolve_path, resolve_slugged_path, split_path
from xingine.expressions.conditions import evaluate_condition, strict_equals
from xingine.expressions.scopes import (
    CONTENT_PREFIX,
    GLOBAL_PREFIX,
    ContentStateView,
    ScopedStore,
    StateScope,
    resolve_store,
    strip_scope_prefix,
)
from xingine.expressions.values import (
    looks_like_path,
    resolve_context_value,
    resolve_symbolic_tree,
    resolve_symbolic_value,
)
from xingine.expressions.providers import (
    ContextDataProvider,
    DataProvider,
    DataProviderFactory,
    FormDataProvider,
)

__all__ = [
    "has_slugs",
    "resolve_path",
    "resolve_slugged_path",
    "split_path",
    "evaluate_condition",
    "strict_equals",
    "CONTENT_PREFIX",
    "GLOBAL_PREFIX",
    "ContentStateView",
    "ScopedStore",
    "StateScope",
    "resolve_store",
    "strip_scope_prefix",
    "looks_like_path",
    "resolve_context_value",
    "resolve_symbolic_tree",
    "resolve_symbolic_value",
    "ContextDataProvider",
    "DataProvider",
    "DataProviderFactory",
    "FormDataProvider",
]
