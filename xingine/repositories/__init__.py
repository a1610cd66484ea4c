from xingine.repositories.session import InMemorySessionRepository, SessionRepository

__all__ = [
    "InMemorySessionRepository",
    "SessionRepository",
]
