"""
Schemas - Result Envelope

Defines the ActionResult envelope and structured error model returned by
every handler.
"""

from xingine.schemas.results import ActionError, ActionResult, ErrorKind

__all__ = [
    "ActionError",
    "ActionResult",
    "ErrorKind",
]
