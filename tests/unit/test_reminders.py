"""Unit tests for lesson reminder calls."""
import pytest

from app.core.dependencies import get_reminder_service
from app.services.call_session.manager import CallSessionManager
from app.services.scheduling.reminders import (
    ReminderBatchError,
    ReminderService,
    build_confirm_stage,
    build_reminder_call,
)


def booking(booking_id: int, email: str) -> dict:
    return {
        "id": booking_id,
        "start": "2026-10-20T16:00:00.000Z",
        "eventType": {"slug": "swim-lesson"},
        "bookingFieldsResponses": {"email": email},
    }


class FakeCalCom:
    """Cal.com client returning a fixed set of bookings."""

    def __init__(self, bookings=None, fail: bool = False):
        self.bookings = bookings or []
        self.fail = fail
        self.requested_days = []

    async def get_upcoming_bookings(self, days: int = 3):
        self.requested_days.append(days)
        if self.fail:
            return {"success": False, "error": "Failed to fetch bookings"}
        return {"success": True, "bookings": self.bookings}


@pytest.fixture
def bookings():
    return [
        booking(1, "jane.doe@example.com"),
        booking(2, "sam.lee@example.com"),
        booking(3, "ada.king@example.com"),
    ]


@pytest.fixture
def manager(registry, ultravox, twilio_provider):
    return CallSessionManager(registry, ultravox, twilio_provider)


class TestReminderService:
    """Test the reminder batch."""

    @pytest.mark.asyncio
    async def test_failed_call_does_not_stop_batch(self, bookings, roster, manager, twilio_provider):
        """Test every lesson gets a result when one call fails."""
        twilio_provider.fail_destinations.append("+15552223333")
        service = ReminderService(FakeCalCom(bookings), roster, manager)

        results = await service.send_reminders(3)

        assert len(results) == 3
        assert [r["lesson"] for r in results] == [1, 2, 3]
        assert [r["status"] for r in results] == ["initiated", "failed", "initiated"]
        assert "error" in results[1]
        assert results[0]["callDetails"]["callId"] == "uv-call-1"
        assert [call["destination"] for call in twilio_provider.originated] == [
            "+15551234567",
            "+15553334444",
        ]

    @pytest.mark.asyncio
    async def test_days_passed_to_bookings(self, roster, manager):
        """Test the reminder window is forwarded to Cal.com."""
        calcom = FakeCalCom([])
        service = ReminderService(calcom, roster, manager)

        assert await service.send_reminders(7) == []
        assert calcom.requested_days == [7]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("days", [0, 31])
    async def test_days_out_of_range(self, roster, manager, days):
        """Test the window must be between 1 and 30 days."""
        service = ReminderService(FakeCalCom([]), roster, manager)

        with pytest.raises(ValueError):
            await service.send_reminders(days)

    @pytest.mark.asyncio
    async def test_bookings_failure(self, roster, manager):
        """Test a failed bookings fetch aborts the batch."""
        service = ReminderService(FakeCalCom(fail=True), roster, manager)

        with pytest.raises(ReminderBatchError):
            await service.send_reminders(3)

    @pytest.mark.asyncio
    async def test_unknown_students_are_skipped(self, roster, manager):
        """Test bookings without a roster match produce no call."""
        calcom = FakeCalCom([booking(9, "stranger@example.com"), {"id": 10}])
        service = ReminderService(calcom, roster, manager)

        assert await service.send_reminders(3) == []

    @pytest.mark.asyncio
    async def test_merge_bookings_with_students(self, bookings, roster, manager):
        """Test bookings are paired with the student's contact details."""
        service = ReminderService(FakeCalCom(), roster, manager)

        lessons = await service.merge_bookings_with_students(bookings[:1])

        assert lessons == [{
            "booking": bookings[0],
            "student": {
                "fullName": "Jane Doe",
                "phoneNumber": "+15551234567",
                "emergencyContact": "John Doe",
                "emergencyContactPhone": "+15559876543",
            },
        }]


class TestReminderStages:
    """Test reminder call prompts and stages."""

    def lesson(self):
        return {
            "booking": booking(1, "jane.doe@example.com"),
            "student": {"fullName": "Jane Doe", "phoneNumber": "+15551234567", "emergencyContact": "John Doe"},
        }

    def test_reminder_call(self):
        """Test the reminder prompt names the student and offers confirmLessonTime."""
        prompt, tools = build_reminder_call(self.lesson())

        assert "Jane Doe" in prompt
        assert "swim-lesson" in prompt
        tool = tools[0]["temporaryTool"]
        assert tool["modelToolName"] == "confirmLessonTime"
        assert tool["http"]["baseUrlPattern"] == "https://tools.example.com/cal/confirmLessonTime"
        assert tool["staticParameters"][0]["value"] == self.lesson()

    def test_confirm_stage(self):
        """Test the confirm stage can hang up or reschedule."""
        stage = build_confirm_stage(self.lesson())

        assert "2026-10-20T16:00:00.000Z" in stage["systemPrompt"]
        assert stage["selectedTools"][0] == {"toolName": "hangUp"}
        assert stage["selectedTools"][1]["temporaryTool"]["modelToolName"] == "rescheduleLesson"


class TestReminderAPI:
    """Test the /cal reminder and stage endpoints."""

    @pytest.mark.parametrize("days", ["0", "31", "soon"])
    def test_invalid_days(self, test_client, days):
        """Test invalid windows are rejected with 400."""
        response = test_client.post(f"/cal/sendLessonReminders?days={days}")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_send_reminders(self, test_client, override_dependency, bookings, roster, manager):
        """Test the batch results are returned."""
        override_dependency(get_reminder_service, ReminderService(FakeCalCom(bookings), roster, manager))

        response = test_client.post("/cal/sendLessonReminders?days=5")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["results"]) == 3

    def test_send_reminders_bookings_failure(self, test_client, override_dependency, roster, manager):
        """Test a failed bookings fetch returns 500."""
        override_dependency(get_reminder_service, ReminderService(FakeCalCom(fail=True), roster, manager))

        response = test_client.post("/cal/sendLessonReminders")

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_confirm_lesson_time_stage(self, test_client):
        """Test the confirm stage is returned as a new Ultravox stage."""
        lesson = TestReminderStages().lesson()

        response = test_client.post(
            "/cal/confirmLessonTime", json={"lesson": lesson, "contactName": "Jane"}
        )

        assert response.status_code == 200
        assert response.headers["X-Ultravox-Response-Type"] == "new-stage"
        assert response.json()["selectedTools"][0] == {"toolName": "hangUp"}

    def test_confirm_lesson_time_without_lesson(self, test_client):
        """Test the confirm stage requires the lesson."""
        response = test_client.post("/cal/confirmLessonTime", json={"contactName": "Jane"})

        assert response.status_code == 400

    def test_reschedule_lesson_stage(self, test_client):
        """Test the reschedule stage is returned as a new Ultravox stage."""
        response = test_client.post("/cal/rescheduleLesson", json={"contactName": "Jane"})

        assert response.status_code == 200
        assert response.headers["X-Ultravox-Response-Type"] == "new-stage"
        assert response.json()["selectedTools"] == [{"toolName": "hangUp"}]
