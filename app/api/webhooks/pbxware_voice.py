"""PBXware voice webhook endpoints."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse

from app.core.dependencies import session_manager_for
from app.services.call_session.manager import CallSessionManager
from app.services.telephony.pbxware_provider import PbxwareProvider

router = APIRouter()
logger = logging.getLogger(__name__)

get_session_manager = session_manager_for(PbxwareProvider.name)


async def read_webhook_body(request: Request) -> Dict[str, Any]:
    """PBXware posts either JSON or form-encoded bodies."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        body = await request.json()
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return dict(form)


@router.post("/pbxware/incoming")
async def handle_incoming_call(
    request: Request,
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Handle incoming call from PBXware.

    Creates an Ultravox call listening for SIP and tells PBXware which SIP
    URI to bridge the caller to.
    """
    body = await read_webhook_body(request)
    caller = body.get("from") or body.get("CallerID") or "Unknown"
    provider = session_manager.provider
    # Without a unique id the live channel is found by the AI extension
    call_ref = body.get("callSid") or body.get("uniqueid") or provider.sip_uri

    logger.info(f"[INCOMING CALL] Received PBXware call - ref: {call_ref}, Caller: {caller}")
    logger.debug(f"[INCOMING CALL] PBXware webhook body: {body}")

    try:
        session, bridge = await session_manager.start_inbound_session(
            provider_call_ref=str(call_ref),
            caller_address=str(caller),
        )
        logger.info(f"[INCOMING CALL] Ultravox call {session.session_id} created for caller {caller}")
        return bridge

    except Exception as e:
        logger.error(
            f"[INCOMING CALL] Error handling PBXware call - ref: {call_ref}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        return JSONResponse(status_code=500, content={"status": "error", "error": str(e)})
