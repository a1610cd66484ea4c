"""
Actions - Handler Registries

The page registry (global/content collaborators) and the form registry
(form lifecycle) share one dispatch contract.
"""

from xingine.actions.registry import ActionArgs, ActionHandler, ActionRegistry
from xingine.actions.page import PAGE_HANDLERS, build_page_registry, resolve_url
from xingine.actions.form import FORM_HANDLERS, build_form_registry

__all__ = [
    "ActionArgs",
    "ActionHandler",
    "ActionRegistry",
    "PAGE_HANDLERS",
    "build_page_registry",
    "resolve_url",
    "FORM_HANDLERS",
    "build_form_registry",
]
