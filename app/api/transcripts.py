"""Call transcript endpoint."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.dependencies import get_ultravox_client
from app.services.call_session.exceptions import ProviderRejectedError
from app.services.ultravox.client import UltravoxClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{call_id}/transcript")
async def get_call_transcript(
    call_id: str,
    ultravox: UltravoxClient = Depends(get_ultravox_client),
):
    """Every message of an Ultravox call, e.g. to review a reminder call afterwards."""
    try:
        messages = await ultravox.get_call_messages(call_id)
    except ProviderRejectedError as e:
        logger.error(f"[TRANSCRIPT] Failed to fetch transcript for call {call_id}: {e}")
        status_code = 404 if e.status_code == 404 else 500
        return JSONResponse(
            status_code=status_code,
            content={"error": "Failed to fetch transcript", "message": e.message},
        )

    logger.info(f"[TRANSCRIPT] Fetched {len(messages)} messages for call {call_id}")
    return {"callId": call_id, "messages": messages}
