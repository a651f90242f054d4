"""Transfer coordinator."""
import logging
from typing import Dict, Optional

from app.services.call_session.exceptions import (
    MissingProviderCallRefError,
    NoDestinationError,
    ProviderRejectedError,
    SessionNotFoundError,
)
from app.services.call_session.models import TransferResult
from app.services.call_session.registry import CallSessionRegistry
from app.services.telephony.base import TelephonyProvider

logger = logging.getLogger(__name__)


class TransferCoordinator:
    """Redirects a live session to a new destination through its provider."""

    def __init__(
        self,
        registry: CallSessionRegistry,
        providers: Dict[str, TelephonyProvider],
        default_destination: str = "",
    ):
        self.registry = registry
        self.providers = providers
        self.default_destination = default_destination

    async def transfer(self, session_id: str, target_address: Optional[str] = None) -> TransferResult:
        """
        Transfer the call bridged to ``session_id``.

        Args:
            session_id: Ultravox call id
            target_address: Destination number; the configured default
                destination is used when empty

        Returns:
            TransferResult describing the issued instruction

        Raises:
            SessionNotFoundError, MissingProviderCallRefError,
            NoDestinationError, ProviderRejectedError
        """
        session = self.registry.get(session_id)
        if session is None:
            logger.warning(f"[TRANSFER] Unknown call {session_id}")
            raise SessionNotFoundError(session_id)
        if not session.provider_call_ref:
            raise MissingProviderCallRefError(session_id)

        destination = target_address
        used_fallback = False
        if not destination:
            if not self.default_destination:
                raise NoDestinationError(session_id)
            destination = self.default_destination
            used_fallback = True
            logger.warning(
                f"[TRANSFER] No destination resolved for call {session_id} - "
                f"falling back to default destination {destination}"
            )

        provider = self.providers.get(session.provider)
        if provider is None:
            raise ProviderRejectedError(
                session.provider, f"No telephony provider configured for '{session.provider}'"
            )

        logger.info(
            f"[TRANSFER] Transferring call {session_id} ({session.provider} ref "
            f"{session.provider_call_ref}) to {destination}"
        )
        redirect = await provider.redirect(session.provider_call_ref, destination)

        return TransferResult(
            session_id=session_id,
            provider=provider.name,
            destination=destination,
            used_fallback=used_fallback,
            provider_status=redirect.status,
            instruction=redirect.instruction,
            call_details=redirect.details,
        )
