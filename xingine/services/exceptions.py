"""
Service Layer Exceptions

Custom exceptions for the DispatchService.
"""


class SessionNotFoundError(Exception):
    """Raised when a request names a session the repository does not hold."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id
