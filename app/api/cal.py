"""Cal.com scheduling endpoints and lesson reminder call stages."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from app.core.dependencies import get_calcom_client, get_reminder_service
from app.services.scheduling.calcom import CalComClient
from app.services.scheduling.reminders import (
    ReminderBatchError,
    ReminderService,
    build_confirm_stage,
    build_reschedule_stage,
)

router = APIRouter()
logger = logging.getLogger(__name__)

BOOKING_REQUIRED_FIELDS = ["name", "email", "company", "phone", "timezone", "startTime"]
NEW_STAGE_HEADERS = {"X-Ultravox-Response-Type": "new-stage"}


@router.post("/checkAvailability")
async def check_availability(calcom: CalComClient = Depends(get_calcom_client)):
    """Look up open spots on the calendar."""
    logger.info("[CAL] Got a request for checkAvailability")
    return await calcom.get_availability()


@router.post("/createBooking")
async def create_booking(
    details: Dict[str, Any] = Body(...),
    calcom: CalComClient = Depends(get_calcom_client),
):
    """Book a lesson."""
    logger.info(f"[CAL] Got a request for createBooking: {details}")

    missing_fields = [field for field in BOOKING_REQUIRED_FIELDS if not details.get(field)]
    if missing_fields:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"Missing required fields: {', '.join(missing_fields)}",
            },
        )

    return await calcom.create_booking(details)


@router.get("/upcomingBookings")
async def upcoming_bookings(calcom: CalComClient = Depends(get_calcom_client)):
    """List upcoming bookings."""
    logger.info("[CAL] Got a request for upcomingBookings")
    return await calcom.get_upcoming_bookings()


@router.post("/sendLessonReminders")
async def send_lesson_reminders(
    days: str = Query("3"),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """
    Place reminder calls for upcoming lessons.

    Meant to be hit by a daily job. Individual call failures are reported in
    ``results`` and do not fail the request.
    """
    logger.info(f"[REMINDERS] Got a request to process reminders (days={days})")

    try:
        days_value = int(days)
    except ValueError:
        days_value = 0
    if not 1 <= days_value <= 30:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Days parameter must be between 1 and 30"},
        )

    try:
        results = await reminders.send_reminders(days_value)
    except ReminderBatchError as e:
        logger.error(f"[REMINDERS] Error processing lesson reminders: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, "results": results}


@router.post("/confirmLessonTime")
async def confirm_lesson_time(body: Dict[str, Any] = Body(...)):
    """Call stage: confirm the lesson time with the contact."""
    logger.info(f"[CAL] Starting Stage: Confirm Lesson (contact: {body.get('contactName')})")
    lesson = body.get("lesson")
    if not isinstance(lesson, dict) or "student" not in lesson or "booking" not in lesson:
        return JSONResponse(status_code=400, content={"error": "lesson is required"})

    return JSONResponse(content=build_confirm_stage(lesson), headers=NEW_STAGE_HEADERS)


@router.post("/rescheduleLesson")
async def reschedule_lesson(body: Dict[str, Any] = Body(...)):
    """Call stage: wrap up a lesson that needs a new time."""
    logger.info(f"[CAL] Starting Stage: Reschedule Lesson (contact: {body.get('contactName')})")
    return JSONResponse(content=build_reschedule_stage(), headers=NEW_STAGE_HEADERS)
