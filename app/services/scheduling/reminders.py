"""Lesson reminder calls."""
import logging
from typing import Any, Dict, List, Tuple

from app.services.agent.prompt import (
    get_confirm_lesson_prompt,
    get_lesson_reminder_prompt,
    get_reschedule_lesson_prompt,
)
from app.services.agent.tools import HANG_UP_TOOL, lesson_stage_tool
from app.services.call_session.manager import CallSessionManager
from app.services.roster.lookup import RosterLookup
from app.services.scheduling.calcom import CalComClient

logger = logging.getLogger(__name__)

MIN_REMINDER_DAYS = 1
MAX_REMINDER_DAYS = 30


class ReminderBatchError(Exception):
    """The reminder batch could not be started."""


def build_reminder_call(lesson: Dict[str, Any]) -> Tuple[str, List[Dict[str, Any]]]:
    """System prompt and tools for a lesson reminder call."""
    tools = [
        lesson_stage_tool(
            "confirmLessonTime",
            "Use this tool to confirm the lesson.",
            "/cal/confirmLessonTime",
            lesson,
        )
    ]
    return get_lesson_reminder_prompt(lesson), tools


def build_confirm_stage(lesson: Dict[str, Any]) -> Dict[str, Any]:
    """New call stage asking the contact to confirm the lesson time."""
    return {
        "systemPrompt": get_confirm_lesson_prompt(lesson),
        "selectedTools": [
            HANG_UP_TOOL,
            lesson_stage_tool(
                "rescheduleLesson",
                "Use this tool to reschedule the lesson.",
                "/cal/rescheduleLesson",
                lesson,
            ),
        ],
    }


def build_reschedule_stage() -> Dict[str, Any]:
    """New call stage wrapping up a lesson that needs rescheduling."""
    return {
        "systemPrompt": get_reschedule_lesson_prompt(),
        "selectedTools": [HANG_UP_TOOL],
    }


class ReminderService:
    """Calls students to remind them of upcoming lessons."""

    def __init__(
        self,
        calcom: CalComClient,
        roster: RosterLookup,
        session_manager: CallSessionManager,
    ):
        self.calcom = calcom
        self.roster = roster
        self.session_manager = session_manager

    async def merge_bookings_with_students(
        self, bookings: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Pair each booking with its student; bookings without a known student are skipped."""
        lessons = []
        for booking in bookings:
            email = (booking.get("bookingFieldsResponses") or {}).get("email")
            if not email:
                logger.warning(f"[REMINDERS] No email found for booking {booking.get('id')}")
                continue

            contact = await self.roster.find_by_email(email)
            if contact is None:
                logger.warning(f"[REMINDERS] No student found in roster for email: {email}")
                continue

            lessons.append(
                {
                    "booking": booking,
                    "student": {
                        "fullName": contact.full_name,
                        "phoneNumber": contact.primary_phone,
                        "emergencyContact": contact.emergency_contact,
                        "emergencyContactPhone": contact.emergency_contact_phone,
                    },
                }
            )
        return lessons

    async def remind(self, lesson: Dict[str, Any]) -> Dict[str, Any]:
        """Place one reminder call; failures are reported, not raised."""
        lesson_id = lesson["booking"].get("id")
        try:
            phone_number = lesson["student"].get("phoneNumber")
            if not phone_number:
                raise ValueError(f"No phone number for {lesson['student']['fullName']}")

            system_prompt, selected_tools = build_reminder_call(lesson)
            call = await self.session_manager.start_outbound_session(
                destination=phone_number,
                system_prompt=system_prompt,
                selected_tools=selected_tools,
            )
            return {"lesson": lesson_id, "status": "initiated", "callDetails": call.to_response()}
        except Exception as e:
            logger.error(
                f"[REMINDERS] Error processing reminder for lesson {lesson_id}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            return {"lesson": lesson_id, "status": "failed", "error": str(e)}

    async def send_reminders(self, days: int = 3) -> List[Dict[str, Any]]:
        """
        Call every student with a lesson in the next ``days`` days.

        Calls are placed one at a time. A failed call is recorded in the
        results and does not stop the batch.
        """
        if not MIN_REMINDER_DAYS <= days <= MAX_REMINDER_DAYS:
            raise ValueError(
                f"Days parameter must be between {MIN_REMINDER_DAYS} and {MAX_REMINDER_DAYS}"
            )

        result = await self.calcom.get_upcoming_bookings(days)
        if not result.get("success"):
            raise ReminderBatchError(result.get("error", "Failed to fetch bookings"))

        lessons = await self.merge_bookings_with_students(result["bookings"])
        logger.info(f"[REMINDERS] {len(lessons)} lessons to remind in the next {days} days")

        results = []
        for lesson in lessons:
            results.append(await self.remind(lesson))
        return results
