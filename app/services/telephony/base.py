"""Telephony provider interface."""
from abc import ABC, abstractmethod
from typing import Any, Dict

from app.services.call_session.models import RedirectResult
from app.services.ultravox.client import UltravoxCall


class TelephonyProvider(ABC):
    """Abstract base class for telephony providers bridged to Ultravox."""

    name: str = ""

    @abstractmethod
    def inbound_medium(self) -> Dict[str, Any]:
        """Ultravox medium descriptor for calls arriving from this provider."""
        pass

    @abstractmethod
    def outbound_medium(self, destination: str) -> Dict[str, Any]:
        """Ultravox medium descriptor for calls placed to ``destination``."""
        pass

    @abstractmethod
    def bridge_inbound(self, call: UltravoxCall) -> Any:
        """Build the webhook response that connects an inbound call to Ultravox."""
        pass

    @abstractmethod
    async def originate_outbound(self, destination: str, call: UltravoxCall) -> str:
        """Place an outbound call bridged to ``call``; return the provider call reference."""
        pass

    @abstractmethod
    async def redirect(self, provider_call_ref: str, destination: str) -> RedirectResult:
        """Move an already bridged call to ``destination``."""
        pass
