"""Date and time tool endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings
from app.core.dependencies import get_session_registry
from app.services.call_session.registry import CallSessionRegistry
from app.services.clock import describe_now, resolve_time_zone

router = APIRouter()
logger = logging.getLogger(__name__)


class NowRequest(BaseModel):
    """Body of the getCurrentDateTime tool."""

    model_config = ConfigDict(populate_by_name=True)

    call_id: Optional[str] = Field(default=None, alias="callId")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


@router.post("/now")
async def now(
    now_req: Optional[NowRequest] = None,
    registry: CallSessionRegistry = Depends(get_session_registry),
):
    """Current date and time in the requested, call, or default time zone."""
    now_req = now_req or NowRequest()

    call_time_zone = None
    if now_req.call_id:
        session = registry.get(now_req.call_id)
        call_time_zone = session.time_zone if session else None

    time_zone = resolve_time_zone(now_req.time_zone, call_time_zone, settings.default_time_zone)
    logger.debug(f"[TIME] Resolved time zone {time_zone} for call {now_req.call_id or 'unknown'}")
    return describe_now(time_zone)
