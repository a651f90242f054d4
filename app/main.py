"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.database import AsyncSessionLocal, init_db
from app.api import cal, calls, health, time_tool, transcripts, webhooks
from app.services.persistence.students import StudentPersistenceService

logger = logging.getLogger(__name__)


async def import_roster(csv_path: str) -> None:
    """Load the student roster CSV into the database if it exists."""
    if not csv_path or not Path(csv_path).exists():
        logger.warning(f"[STARTUP] Roster file {csv_path or '(unset)'} not found - roster is empty")
        return

    async with AsyncSessionLocal() as db:
        try:
            result = await StudentPersistenceService(db).import_from_csv(csv_path)
            logger.info(f"[STARTUP] Successfully imported {result.count} students")
            for error in result.errors:
                logger.warning(f"[STARTUP] Skipped roster row - {error}")
        except Exception as e:
            logger.error(f"[STARTUP] Error importing students: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    await import_roster(settings.students_csv_path)
    yield
    # Shutdown
    pass


app = FastAPI(
    title="Community Center Voice Agent",
    description="Ultravox voice agent bridged to Twilio and PBXware, with Cal.com scheduling",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Answer malformed request bodies with a 400 carrying an error message."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(f"[REQUEST] Invalid request to {request.url.path} - {problems}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "message": problems},
    )


app.include_router(health.router, tags=["health"])
app.include_router(webhooks.twilio_voice.router, tags=["twilio"])
app.include_router(webhooks.pbxware_voice.router, tags=["pbxware"])
app.include_router(calls.build_router("twilio"), prefix="/twilio", tags=["twilio"])
app.include_router(calls.build_router("pbxware"), prefix="/pbxware", tags=["pbxware"])
app.include_router(cal.router, prefix="/cal", tags=["cal"])
app.include_router(time_tool.router, prefix="/time", tags=["time"])
app.include_router(transcripts.router, prefix="/calls", tags=["calls"])
