"""In-process registry of live call sessions."""
import logging
import threading
from typing import Dict, Optional

from app.core.config import settings
from app.services.call_session.exceptions import DuplicateSessionError
from app.services.call_session.models import CallDirection, CallSession

logger = logging.getLogger(__name__)


class CallSessionRegistry:
    """Maps Ultravox call ids to the telephony call they are bridged to.

    Sessions are write-once: there is no update or delete. Entries live for
    the lifetime of the process. In production, use Redis or similar.
    """

    def __init__(self, default_time_zone: str = "UTC"):
        self.default_time_zone = default_time_zone
        self._sessions: Dict[str, CallSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        session_id: str,
        provider_call_ref: str,
        direction: CallDirection,
        counterpart_address: str,
        time_zone: Optional[str] = None,
        provider: str = "twilio",
    ) -> CallSession:
        """Register a new session.

        Raises:
            DuplicateSessionError: if ``session_id`` is already registered.
                The stored session is left untouched.
        """
        if not session_id:
            raise ValueError("session_id is required")

        if not provider_call_ref:
            logger.warning(
                f"[SESSION REGISTRY] Session {session_id} registered without a "
                f"provider call reference - it cannot be transferred"
            )

        session = CallSession(
            session_id=session_id,
            provider_call_ref=provider_call_ref or "",
            direction=CallDirection(direction),
            counterpart_address=counterpart_address or "",
            time_zone=time_zone or self.default_time_zone,
            provider=provider,
        )

        with self._lock:
            if session_id in self._sessions:
                logger.error(
                    f"[SESSION REGISTRY] Refusing to overwrite existing session {session_id}"
                )
                raise DuplicateSessionError(session_id)
            self._sessions[session_id] = session

        logger.info(
            f"[SESSION REGISTRY] Registered {session.direction} session {session_id} "
            f"({provider} ref: {session.provider_call_ref or 'none'})"
        )
        return session

    def get(self, session_id: str) -> Optional[CallSession]:
        """Get a session, or None if it was never registered."""
        with self._lock:
            return self._sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Module-level registry (persists across requests)
session_registry = CallSessionRegistry(default_time_zone=settings.default_time_zone)
