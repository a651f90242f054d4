"""Call session manager."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.services.agent.call_config import build_call_config, build_receptionist_call_config
from app.services.call_session.models import CallDirection, CallSession, OutboundCall
from app.services.call_session.registry import CallSessionRegistry
from app.services.telephony.base import TelephonyProvider
from app.services.ultravox.client import UltravoxClient

logger = logging.getLogger(__name__)


class CallSessionManager:
    """Sets up Ultravox sessions for calls arriving at or leaving a provider."""

    def __init__(
        self,
        registry: CallSessionRegistry,
        ultravox: UltravoxClient,
        provider: TelephonyProvider,
    ):
        self.registry = registry
        self.ultravox = ultravox
        self.provider = provider

    async def start_inbound_session(
        self,
        provider_call_ref: str,
        caller_address: str,
        time_zone: Optional[str] = None,
    ) -> Tuple[CallSession, Any]:
        """
        Create an Ultravox call for an inbound provider call.

        Returns:
            The registered session and the provider-specific bridge response
        """
        call_config = build_receptionist_call_config(
            self.provider.inbound_medium(), provider=self.provider.name
        )
        call = await self.ultravox.create_call(call_config)

        session = self.registry.create(
            session_id=call.call_id,
            provider_call_ref=provider_call_ref,
            direction=CallDirection.INBOUND,
            counterpart_address=caller_address,
            time_zone=time_zone,
            provider=self.provider.name,
        )
        return session, self.provider.bridge_inbound(call)

    async def start_outbound_session(
        self,
        destination: str,
        system_prompt: Optional[str] = None,
        selected_tools: Optional[List[Dict[str, Any]]] = None,
        time_zone: Optional[str] = None,
    ) -> OutboundCall:
        """
        Place an outbound call with the given conversation.

        The session is only registered once both Ultravox and the provider
        accepted the call.
        """
        if not destination:
            raise ValueError("A destination phone number is required")

        logger.info(f"[OUTBOUND CALL] Creating outbound call to {destination} via {self.provider.name}")
        call_config = build_call_config(
            medium=self.provider.outbound_medium(destination),
            system_prompt=system_prompt,
            selected_tools=selected_tools,
            first_speaker="FIRST_SPEAKER_USER",
        )
        call = await self.ultravox.create_call(call_config)
        provider_call_ref = await self.provider.originate_outbound(destination, call)

        session = self.registry.create(
            session_id=call.call_id,
            provider_call_ref=provider_call_ref,
            direction=CallDirection.OUTBOUND,
            counterpart_address=destination,
            time_zone=time_zone,
            provider=self.provider.name,
        )
        logger.info(
            f"[OUTBOUND CALL] Call {session.session_id} placed "
            f"({self.provider.name} ref: {provider_call_ref})"
        )
        return OutboundCall(
            call_id=session.session_id,
            provider_call_ref=provider_call_ref,
            provider=self.provider.name,
            time_zone=session.time_zone,
        )
