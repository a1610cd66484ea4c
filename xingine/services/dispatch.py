"""
Dispatch Service - Application Orchestration Layer

Entry point for the reference host. Loads a session, builds its execution
context, hands the action trees to the ActionEngine and saves the session
back. Keeps the API layer free of engine and repository details.
"""

import logging
from typing import Any, Dict, List, Optional

from ..domain.models import SerializableAction
from ..execution.engine import ActionEngine
from ..repositories.session import SessionRepository
from ..schemas.results import ActionResult
from ..state.session import HostSession
from .exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


class DispatchService:
    def __init__(self, session_repository: SessionRepository, engine: ActionEngine):
        self.session_repo = session_repository
        self.engine = engine

    def create_session(
        self,
        initial_state: Optional[Dict[str, Any]] = None,
        form_data: Optional[Dict[str, Any]] = None,
    ) -> HostSession:
        session = self.session_repo.create(initial_state=initial_state, form_data=form_data)
        logger.info(f"Created session {session.session_id} (form={'yes' if form_data is not None else 'no'})")
        return session

    def get_session(self, session_id: str) -> HostSession:
        session = self.session_repo.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> bool:
        deleted = self.session_repo.delete(session_id)
        if deleted:
            logger.info(f"Deleted session {session_id}")
        return deleted

    async def dispatch(
        self,
        session_id: str,
        actions: List[SerializableAction],
        event: Optional[Any] = None,
    ) -> List[ActionResult]:
        """
        Runs `actions` one after another against the session's collaborators.
        1. Load Session
        2. Run each action tree
        3. Save Session
        """
        session = self.get_session(session_id)

        results = await self.engine.run_all(actions, session.execution_context(), event=event)

        self.session_repo.save(session)
        failed = sum(1 for result in results if not result.success)
        logger.info(f"Session {session_id}: dispatched {len(results)} action(s), {failed} failed")
        return results
