"""
Dispatch Types - Handler Selection

Classifies where an action name was routed. Used by the executor to pick a
handler and by the engine to log the routing decision.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ...actions.registry import ActionHandler


class RegistryKind(Enum):
    PAGE = auto()  # Global/content handler table.
    FORM = auto()  # Form-lifecycle handler table.
    DYNAMIC = auto()  # Not registered; the host's dynamic hook decides.


@dataclass
class DispatchTarget:
    kind: RegistryKind
    action_name: str
    handler: Optional[ActionHandler] = None
