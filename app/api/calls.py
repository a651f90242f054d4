"""Call control tool endpoints (transfer, outbound calls, country info).

The same endpoints are mounted under each telephony provider prefix so the
Ultravox tool URLs match the provider that carries the call.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.core.dependencies import (
    get_country_info_service,
    get_roster_lookup,
    get_transfer_coordinator,
    session_manager_for,
)
from app.services.call_session.exceptions import (
    MissingProviderCallRefError,
    NoDestinationError,
    ProviderRejectedError,
    SessionNotFoundError,
)
from app.services.call_session.manager import CallSessionManager
from app.services.call_session.transfer import TransferCoordinator
from app.services.country.info import CountryInfoService, CountryLookupError, CountryNotFoundError
from app.services.roster.exceptions import ContactNotFoundError, NoDestinationNumberError
from app.services.roster.lookup import RosterLookup
from app.services.roster.models import ContactType

logger = logging.getLogger(__name__)


class TransferCallRequest(BaseModel):
    """Body of the transferCall tool."""

    model_config = ConfigDict(populate_by_name=True)

    call_id: Optional[str] = Field(default=None, alias="callId")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    contact_type: Optional[str] = Field(default=None, alias="contactType")
    transfer_reason: Optional[str] = Field(default=None, alias="transferReason")


class OutboundCallRequest(BaseModel):
    """Body of the makeOutboundCall test endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(alias="phoneNumber")
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    selected_tools: Optional[List[Dict[str, Any]]] = Field(default=None, alias="selectedTools")


class CountryInfoRequest(BaseModel):
    """Body of the getCountryInfo tool."""

    model_config = ConfigDict(populate_by_name=True)

    country_name: str = Field(alias="countryName")


def build_router(provider_name: str) -> APIRouter:
    """Call control endpoints bound to ``provider_name``."""
    router = APIRouter()
    get_session_manager = session_manager_for(provider_name)

    @router.post("/transferCall")
    async def transfer_call(
        transfer_req: TransferCallRequest,
        roster: RosterLookup = Depends(get_roster_lookup),
        coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
    ):
        """Transfer a live call to a student or their emergency contact.

        Without a student name the call goes to the default destination.
        """
        if not transfer_req.call_id:
            return JSONResponse(
                status_code=400,
                content={"error": "Transfer not possible", "message": "callId is required"},
            )

        contact_type = ContactType.from_request(transfer_req.contact_type)
        logger.info(
            f"[TRANSFER] Request for call {transfer_req.call_id} - "
            f"{transfer_req.first_name} {transfer_req.last_name} ({contact_type}), "
            f"reason: {transfer_req.transfer_reason or 'none given'}"
        )

        target_number = None
        if transfer_req.first_name and transfer_req.last_name:
            try:
                target_number = await roster.resolve_number(
                    transfer_req.first_name, transfer_req.last_name, contact_type
                )
            except ContactNotFoundError as e:
                return JSONResponse(status_code=404, content={"error": "Student not found", "message": str(e)})
            except NoDestinationNumberError as e:
                return JSONResponse(status_code=400, content={"error": "No phone number found", "message": str(e)})
            logger.info(f"[TRANSFER] Transfer target found: {target_number}")

        try:
            result = await coordinator.transfer(transfer_req.call_id, target_number)
        except SessionNotFoundError as e:
            return JSONResponse(status_code=404, content={"error": "Call not found", "message": str(e)})
        except (MissingProviderCallRefError, NoDestinationError) as e:
            return JSONResponse(status_code=400, content={"error": "Transfer not possible", "message": str(e)})
        except ProviderRejectedError as e:
            logger.error(f"[TRANSFER] Transfer failed for call {transfer_req.call_id}: {e}")
            return JSONResponse(
                status_code=500,
                content={"error": "Transfer failed", "message": "Failed to transfer call", "details": e.message},
            )

        logger.info(f"[TRANSFER] Instruction issued: {result.instruction}")
        return result.to_response()

    @router.post("/makeOutboundCall")
    async def make_outbound_call(
        outbound_req: OutboundCallRequest,
        session_manager: CallSessionManager = Depends(get_session_manager),
    ):
        """Place an outbound call directly (testing only, not used by the agent)."""
        try:
            call = await session_manager.start_outbound_session(
                destination=outbound_req.phone_number,
                system_prompt=outbound_req.system_prompt,
                selected_tools=outbound_req.selected_tools,
            )
        except ValueError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except ProviderRejectedError as e:
            logger.error(f"[OUTBOUND CALL] Error initiating outbound call: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return call.to_response()

    @router.post("/countryInfo")
    async def country_info(
        country_req: CountryInfoRequest,
        service: CountryInfoService = Depends(get_country_info_service),
    ):
        """Spoken facts about a country."""
        country_name = country_req.country_name
        logger.info(f"[COUNTRY INFO] Request for {country_name}")

        try:
            result = await service.describe(country_name)
        except CountryNotFoundError:
            return {"result": f"I'm sorry, I couldn't find any information for {country_name}."}
        except CountryLookupError as e:
            logger.error(f"[COUNTRY INFO] Error fetching country info: {e}")
            return JSONResponse(
                status_code=500,
                content={"result": "I'm having trouble accessing the country database right now."},
            )

        logger.info(f"[COUNTRY INFO] Generated response: {result}")
        return {"result": result}

    return router
