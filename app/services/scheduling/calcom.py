"""Cal.com API v2 client."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15.0
CAL_API_VERSION = "2024-08-13"


class SchedulingConfigError(Exception):
    """Cal.com credentials are not configured."""


class CalComAPIError(Exception):
    """Raised when a Cal.com request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CalComClient:
    """Availability, bookings and upcoming lessons from Cal.com.

    Public methods never raise on API failures; they return
    ``{"success": False, "error": ...}`` so tool callers can narrate it.
    """

    def __init__(
        self,
        api_key: str,
        event_type_id: int,
        base_url: str = "https://api.cal.com/v2",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.event_type_id = event_type_id
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "CalComClient":
        return cls(
            api_key=settings.calcom_api_key,
            event_type_id=settings.calcom_event_type_id,
            base_url=settings.calcom_api_url,
        )

    def _check_config(self) -> None:
        if not self.api_key:
            raise SchedulingConfigError("CALCOM_API_KEY is required")
        if not self.event_type_id:
            raise SchedulingConfigError("CALCOM_EVENT_TYPE_ID is required")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        versioned: bool = True,
    ) -> Any:
        self._check_config()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if versioned:
            headers["cal-api-version"] = CAL_API_VERSION

        client = self._http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)
        try:
            response = await client.request(
                method, f"{self.base_url}{path}", params=params, json=json_body, headers=headers
            )
        except httpx.HTTPError as e:
            raise CalComAPIError(f"Request to {path} failed: {e}") from e
        finally:
            if client is not self._http_client:
                await client.aclose()

        if response.status_code >= 400:
            logger.error(
                f"[CAL] {method} {path} failed - status: {response.status_code}, error: {response.text}"
            )
            raise CalComAPIError(
                f"{response.status_code} {response.reason_phrase}", status_code=response.status_code
            )
        return response.json()

    def _window(self, days: int) -> Dict[str, str]:
        now = datetime.now(timezone.utc)
        return {
            "startTime": _iso(now),
            "endTime": _iso(now + timedelta(days=days)),
            "eventTypeId": str(self.event_type_id),
        }

    async def get_availability(self, days: int = 5) -> Dict[str, Any]:
        """Available slots for the next ``days`` days, flattened across dates."""
        try:
            data = await self._request(
                "GET", "/slots/available", params=self._window(days), versioned=False
            )
            if data.get("status") != "success" or (data.get("data") or {}).get("slots") is None:
                raise CalComAPIError("Invalid response format")

            slots = [slot for day in data["data"]["slots"].values() for slot in day]
            return {"success": True, "availability": {"slots": slots}}
        except (CalComAPIError, SchedulingConfigError) as e:
            logger.error(f"[CAL] Failed to fetch availability: {e}")
            return {"success": False, "error": "Failed to fetch availability"}

    async def create_booking(self, details: Dict[str, Any]) -> Dict[str, Any]:
        """Book the configured event type for an attendee."""
        body = {
            "eventTypeId": self.event_type_id,
            "start": details.get("startTime"),
            "attendee": {
                "name": details.get("name"),
                "email": details.get("email"),
                "timeZone": details.get("timezone"),
            },
            "bookingFieldsResponses": {
                "company": details.get("company"),
                "phone": details.get("phone"),
                "notes": details.get("notes"),
            },
        }
        try:
            booking = await self._request("POST", "/bookings", json_body=body)
            return {"success": True, "booking": booking}
        except (CalComAPIError, SchedulingConfigError) as e:
            logger.error(f"[CAL] Failed to create booking: {e}")
            return {"success": False, "error": "Failed to create booking"}

    async def get_upcoming_bookings(self, days: int = 3) -> Dict[str, Any]:
        """Bookings of the configured event type in the next ``days`` days."""
        try:
            data = await self._request("GET", "/bookings", params=self._window(days))
            if not isinstance(data.get("data"), list):
                raise CalComAPIError("Invalid response format")
            return {"success": True, "bookings": data["data"]}
        except (CalComAPIError, SchedulingConfigError) as e:
            logger.error(f"[CAL] Failed to fetch bookings: {e}")
            return {"success": False, "error": "Failed to fetch bookings"}
