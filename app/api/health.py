"""Health check endpoint."""
import logging
from fastapi import APIRouter, Depends, Request

from app.core.config import settings
from app.core.dependencies import get_session_registry
from app.services.call_session.registry import CallSessionRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    request: Request,
    registry: CallSessionRegistry = Depends(get_session_registry),
):
    """Liveness check with the number of calls seen since startup."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {
        "status": "healthy",
        "telephonyProvider": settings.telephony_provider,
        "sessions": len(registry),
    }
