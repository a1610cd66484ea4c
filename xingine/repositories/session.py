import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..context.memory import ApiDelegate, InMemoryFormContext, InMemoryGlobalContext
from ..state.session import HostSession


class SessionRepository(ABC):
    """
    Defines how the reference host keeps its sessions.
    Sessions hold live collaborators, so they are never persisted.
    """

    @abstractmethod
    def create(
        self,
        initial_state: Optional[Dict[str, Any]] = None,
        form_data: Optional[Dict[str, Any]] = None,
    ) -> HostSession:
        """Creates a session with fresh collaborators and a unique ID."""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[HostSession]:
        pass

    @abstractmethod
    def save(self, session: HostSession):
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Deletes a session. Returns True if found and deleted."""
        pass


class InMemorySessionRepository(SessionRepository):
    """
    Dictionary-backed session storage. Every global context it creates sends
    its network calls to `api_delegate`.
    """

    def __init__(self, api_delegate: Optional[ApiDelegate] = None):
        self.api_delegate = api_delegate
        self._store: Dict[str, HostSession] = {}

    def create(
        self,
        initial_state: Optional[Dict[str, Any]] = None,
        form_data: Optional[Dict[str, Any]] = None,
    ) -> HostSession:
        new_id = str(uuid.uuid4())
        session = HostSession(
            session_id=new_id,
            global_context=InMemoryGlobalContext(initial_state, api_delegate=self.api_delegate),
            form_context=InMemoryFormContext(form_data) if form_data is not None else None,
        )
        self._store[new_id] = session
        return session

    def get(self, session_id: str) -> Optional[HostSession]:
        return self._store.get(session_id)

    def save(self, session: HostSession):
        session.touch()
        self._store[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        if session_id in self._store:
            del self._store[session_id]
            return True
        return False
