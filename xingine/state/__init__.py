"""
State Layer - Runtime Data Models

Defines the runtime snapshot threaded through chained and sequential
continuations.
"""

from xingine.state.models import ChainContext

__all__ = [
    "ChainContext",
]
