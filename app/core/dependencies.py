"""FastAPI dependencies."""
from functools import lru_cache
from typing import Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.database import get_db
from app.services.call_session.manager import CallSessionManager
from app.services.call_session.registry import CallSessionRegistry, session_registry
from app.services.call_session.transfer import TransferCoordinator
from app.services.country.info import CountryInfoService
from app.services.persistence.students import StudentPersistenceService
from app.services.roster.lookup import RosterLookup
from app.services.scheduling.calcom import CalComClient
from app.services.scheduling.reminders import ReminderService
from app.services.telephony.base import TelephonyProvider
from app.services.telephony.pbxware_provider import PbxwareProvider
from app.services.telephony.twilio_provider import TwilioProvider
from app.services.ultravox.client import UltravoxClient


def get_session_registry() -> CallSessionRegistry:
    """Get the process-wide call session registry."""
    return session_registry


@lru_cache(maxsize=1)
def get_telephony_providers() -> Dict[str, TelephonyProvider]:
    """Get telephony providers keyed by name (built once per process)."""
    return {
        TwilioProvider.name: TwilioProvider.from_settings(settings),
        PbxwareProvider.name: PbxwareProvider.from_settings(settings),
    }


def get_ultravox_client() -> UltravoxClient:
    """Get Ultravox client."""
    return UltravoxClient.from_settings(settings)


def get_roster_lookup(db: AsyncSession = Depends(get_db)) -> RosterLookup:
    """Get roster lookup backed by the student database."""
    return RosterLookup(StudentPersistenceService(db))


def get_transfer_coordinator(
    registry: CallSessionRegistry = Depends(get_session_registry),
    providers: Dict[str, TelephonyProvider] = Depends(get_telephony_providers),
) -> TransferCoordinator:
    """Get transfer coordinator."""
    return TransferCoordinator(
        registry,
        providers,
        default_destination=settings.destination_phone_number,
    )


def get_calcom_client() -> CalComClient:
    """Get Cal.com client."""
    return CalComClient.from_settings(settings)


def get_country_info_service() -> CountryInfoService:
    """Get country info service."""
    return CountryInfoService()


def get_reminder_service(
    registry: CallSessionRegistry = Depends(get_session_registry),
    providers: Dict[str, TelephonyProvider] = Depends(get_telephony_providers),
    ultravox: UltravoxClient = Depends(get_ultravox_client),
    calcom: CalComClient = Depends(get_calcom_client),
    roster: RosterLookup = Depends(get_roster_lookup),
) -> ReminderService:
    """Get reminder service placing calls through the configured provider."""
    manager = CallSessionManager(registry, ultravox, providers[settings.telephony_provider])
    return ReminderService(calcom, roster, manager)


def session_manager_for(provider_name: str):
    """Build a dependency returning a session manager bound to ``provider_name``."""

    def get_session_manager(
        registry: CallSessionRegistry = Depends(get_session_registry),
        providers: Dict[str, TelephonyProvider] = Depends(get_telephony_providers),
        ultravox: UltravoxClient = Depends(get_ultravox_client),
    ) -> CallSessionManager:
        return CallSessionManager(registry, ultravox, providers[provider_name])

    return get_session_manager
