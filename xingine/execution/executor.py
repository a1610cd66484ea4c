"""
Executor - Single Handler Invocation

The HandlerExecutor turns one ActionNode into one ActionResult: it prepares
the arguments, routes the name to the page registry, the form registry or the
host's dynamic hook, awaits the handler if needed and normalizes what comes
back.

This is the handler boundary: any exception escaping a handler (including
host-registered ones) is logged and converted into a failure result, so the
engine never sees a raised error.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..actions.registry import ActionRegistry
from ..context.interface import ActionExecutionContext, capability, maybe_await
from ..domain.models import ActionNode
from ..schemas.results import ActionResult, ErrorKind
from .schemas.dispatch import DispatchTarget, RegistryKind

logger = logging.getLogger(__name__)


def extract_event_value(event: Any) -> Any:
    """event.target.value when the event carries one, otherwise the event itself."""
    if event is None:
        return None
    target = event.get("target") if isinstance(event, Mapping) else getattr(event, "target", None)
    if isinstance(target, Mapping) and "value" in target:
        return target["value"]
    if target is not None and hasattr(target, "value"):
        return target.value
    return event


class HandlerExecutor:
    def __init__(self, page_registry: ActionRegistry, form_registry: ActionRegistry):
        self.page_registry = page_registry
        self.form_registry = form_registry

    def select_target(self, action_name: str, context: ActionExecutionContext) -> DispatchTarget:
        """
        Form handlers win while a form context is present; otherwise page
        handlers. A form-only name outside a form still routes to the form
        table so the caller gets its "FormActionContext is not set" failure.
        """
        if context.form_context is not None and action_name in self.form_registry:
            return DispatchTarget(RegistryKind.FORM, action_name, self.form_registry.get(action_name))
        if action_name in self.page_registry:
            return DispatchTarget(RegistryKind.PAGE, action_name, self.page_registry.get(action_name))
        if action_name in self.form_registry:
            return DispatchTarget(RegistryKind.FORM, action_name, self.form_registry.get(action_name))
        return DispatchTarget(RegistryKind.DYNAMIC, action_name)

    async def execute(
        self,
        node: ActionNode,
        context: ActionExecutionContext,
        event: Optional[Any] = None,
    ) -> ActionResult:
        args = self._prepare_args(node, event)
        target = self.select_target(node.action, context)
        logger.debug(f"Dispatching '{node.action}' to {target.kind.name}")

        try:
            if target.kind == RegistryKind.DYNAMIC:
                return await self._execute_dynamic(node.action, args, context, event)
            raw = await maybe_await(target.handler(args, context))
            return ActionResult.coerce(raw)

        except Exception as e:
            logger.exception(f"Handler for '{node.action}' raised: {e}")
            return ActionResult.from_exception(e)

    def _prepare_args(self, node: ActionNode, event: Any) -> Dict[str, Any]:
        args = dict(node.args or {})
        if node.value_from_event:
            args["value"] = extract_event_value(event)
        return args

    async def _execute_dynamic(
        self,
        action_name: str,
        args: Dict[str, Any],
        context: ActionExecutionContext,
        event: Any,
    ) -> ActionResult:
        dynamic = capability(context.global_context, "dynamic")
        if dynamic is None:
            logger.warning(f"Unknown action '{action_name}' and no dynamic hook on the host")
            return ActionResult.failure(ErrorKind.NOT_FOUND, f"Unknown action: {action_name}")
        return ActionResult.coerce(await maybe_await(dynamic(action_name, args, event)))
