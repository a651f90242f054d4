"""Call session errors."""
from typing import Optional


class CallSessionError(Exception):
    """Base class for call session and transfer failures."""


class DuplicateSessionError(CallSessionError):
    """A session with the same id is already registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Call session {session_id} already exists")


class SessionNotFoundError(CallSessionError):
    """No session is registered under the requested id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Call not found: {session_id}")


class MissingProviderCallRefError(CallSessionError):
    """The session has no provider call reference to redirect."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Call {session_id} has no provider call reference")


class NoDestinationError(CallSessionError):
    """No transfer destination was given and no default is configured."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No transfer destination available for call {session_id}")


class ProviderRejectedError(CallSessionError):
    """A telephony or AI platform request returned a non-success response."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider} rejected the request: {message}")
