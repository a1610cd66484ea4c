from xingine.services.dispatch import DispatchService
from xingine.services.exceptions import SessionNotFoundError

__all__ = [
    "DispatchService",
    "SessionNotFoundError",
]
