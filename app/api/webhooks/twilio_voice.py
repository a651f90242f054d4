"""Twilio voice webhook endpoints."""
import logging
from fastapi import APIRouter, Request, Form, Depends
from fastapi.responses import Response

from app.core.dependencies import session_manager_for
from app.services.call_session.manager import CallSessionManager
from app.services.telephony.twilio_provider import TwilioProvider

router = APIRouter()
logger = logging.getLogger(__name__)

get_session_manager = session_manager_for(TwilioProvider.name)


@router.post("/twilio/incoming")
async def handle_incoming_call(
    request: Request,
    CallSid: str = Form(""),
    From: str = Form(""),
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Handle incoming call from Twilio.

    Creates an Ultravox call and answers with TwiML that streams the call
    audio to it. Errors are spoken to the caller.
    """
    logger.info(
        f"[INCOMING CALL] Received Twilio call - CallSid: {CallSid}, From: {From or 'unknown'}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        session, twiml = await session_manager.start_inbound_session(
            provider_call_ref=CallSid,
            caller_address=From,
        )
        logger.info(
            f"[INCOMING CALL] Bridged CallSid {CallSid} to Ultravox call {session.session_id}"
        )
        return Response(content=twiml, media_type="application/xml")

    except Exception as e:
        logger.error(
            f"[INCOMING CALL] Error handling incoming call - CallSid: {CallSid}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        return Response(content=TwilioProvider.apology_twiml(), media_type="application/xml")
