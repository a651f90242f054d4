"""Call session models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CallDirection(str, Enum):
    """Direction of a bridged call, seen from the AI agent."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"

    def __str__(self) -> str:
        """Return the string value of the direction."""
        return self.value


class CallSession(BaseModel):
    """A live call bridged between a telephony provider and Ultravox.

    Sessions are written once when the call is set up and are read-only
    afterwards.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str  # Ultravox call id
    provider_call_ref: str  # Twilio CallSid / PBXware unique id
    direction: CallDirection
    counterpart_address: str  # Phone number or SIP URI of the far end
    time_zone: str
    provider: str = "twilio"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RedirectResult(BaseModel):
    """Outcome of a provider redirect instruction."""

    status: str
    instruction: str  # TwiML or PBXware action issued
    details: Dict[str, Any] = {}


class TransferResult(BaseModel):
    """Result of a successful call transfer."""

    status: str = "success"
    message: str = "Call transfer initiated"
    session_id: str
    provider: str
    destination: str
    used_fallback: bool = False
    provider_status: str
    instruction: str
    call_details: Dict[str, Any] = {}

    def to_response(self) -> Dict[str, Any]:
        """Shape the result for the transferCall tool response."""
        return {
            "status": self.status,
            "message": self.message,
            "callDetails": {
                "callId": self.session_id,
                "provider": self.provider,
                "destination": self.destination,
                "usedFallback": self.used_fallback,
                "providerStatus": self.provider_status,
                **self.call_details,
            },
        }


class OutboundCall(BaseModel):
    """Identifiers of an outbound call that was placed."""

    call_id: str
    provider_call_ref: str
    provider: str
    time_zone: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """Shape the call for JSON responses."""
        return {
            "callId": self.call_id,
            "providerCallRef": self.provider_call_ref,
            "provider": self.provider,
        }
