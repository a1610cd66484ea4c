"""
Actions - Registry

An open, string-keyed table of action handlers. Hosts extend it at runtime;
names that are not registered fall through to the engine's dynamic hook and,
failing that, to a NOT_FOUND result.

A handler has the shape `(args, context) -> ActionResult` and may be a
coroutine function. Handlers report expected failures by returning
ActionResult.failure(...), never by raising.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Mapping, Optional, Union

from ..context.interface import ActionExecutionContext
from ..schemas.results import ActionResult

logger = logging.getLogger(__name__)

ActionArgs = Mapping[str, Any]
ActionHandler = Callable[
    [ActionArgs, ActionExecutionContext],
    Union[ActionResult, Awaitable[ActionResult], Any],
]


class ActionRegistry:
    def __init__(self, name: str, handlers: Optional[Mapping[str, ActionHandler]] = None):
        self.name = name
        self._handlers: Dict[str, ActionHandler] = dict(handlers or {})

    def register(self, action_name: str, handler: Optional[ActionHandler] = None):
        """
        Registers `handler` under `action_name`, replacing any previous entry.
        Without a handler it returns a decorator:

            @registry.register("greet")
            async def greet(args, ctx): ...
        """
        if handler is None:
            def decorator(func: ActionHandler) -> ActionHandler:
                self.register(action_name, func)
                return func
            return decorator

        if action_name in self._handlers:
            logger.debug(f"[{self.name}] Replacing handler for '{action_name}'")
        self._handlers[action_name] = handler
        return handler

    def unregister(self, action_name: str) -> bool:
        return self._handlers.pop(action_name, None) is not None

    def get(self, action_name: str) -> Optional[ActionHandler]:
        return self._handlers.get(action_name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def copy(self, name: Optional[str] = None) -> "ActionRegistry":
        return ActionRegistry(name or self.name, self._handlers)

    def __contains__(self, action_name: object) -> bool:
        return action_name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
