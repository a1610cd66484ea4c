"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the reference host:
1. Instantiating the Singleton services (HTTP delegate, Session Repository, Engine).
2. Wiring them together (the delegate into the repository, both into the service).
3. Managing their lifecycle with @lru_cache so they are created once per process.

Tests override these providers through `app.dependency_overrides`.
"""

from functools import lru_cache
from fastapi import Depends

from ..config import settings
from ..infrastructure.http_client import HttpApiClient
from ..repositories.session import SessionRepository, InMemorySessionRepository
from ..execution.engine import ActionEngine
from ..services.dispatch import DispatchService


# HTTP delegate for makeApiCall (Singleton)
@lru_cache()
def get_api_client() -> HttpApiClient:
    return HttpApiClient(
        base_url=settings.API_BASE_URL,
        timeout=settings.API_TIMEOUT_SECONDS,
    )


# Session Repository (Singleton)
# Note: In-memory storage must be a singleton so sessions persist across requests!
@lru_cache()
def get_session_repository() -> SessionRepository:
    return InMemorySessionRepository(api_delegate=get_api_client())


# The Engine (Singleton Service, registries built once)
@lru_cache()
def get_action_engine() -> ActionEngine:
    return ActionEngine()


@lru_cache()
def get_dispatch_service(
    session_repo: SessionRepository = Depends(get_session_repository),
    engine: ActionEngine = Depends(get_action_engine),
) -> DispatchService:
    return DispatchService(session_repository=session_repo, engine=engine)
