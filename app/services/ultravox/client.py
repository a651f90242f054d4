"""Ultravox REST API client."""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from app.core.config import Settings
from app.services.call_session.exceptions import ProviderRejectedError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15.0


class UltravoxCall(BaseModel):
    """A call created on Ultravox."""

    call_id: str
    join_url: str


class UltravoxClient:
    """Creates Ultravox calls and reads their transcripts."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.ultravox.ai/api",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "UltravoxClient":
        return cls(api_key=settings.ultravox_api_key, base_url=settings.ultravox_api_url)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        client = self._http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)
        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"X-API-Key": self.api_key, "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"[ULTRAVOX] Request to {url} failed: {type(e).__name__}: {e}")
            raise ProviderRejectedError("ultravox", str(e)) from e
        finally:
            if client is not self._http_client:
                await client.aclose()

        if response.status_code >= 400:
            logger.error(f"[ULTRAVOX] {method} {url} returned {response.status_code}: {response.text}")
            raise ProviderRejectedError(
                "ultravox", response.text or response.reason_phrase, status_code=response.status_code
            )
        return response.json()

    async def create_call(self, call_config: Dict[str, Any]) -> UltravoxCall:
        """Create an Ultravox call and return its id and join URL."""
        data = await self._request("POST", f"{self.base_url}/calls", json_body=call_config)
        try:
            call = UltravoxCall(call_id=data["callId"], join_url=data["joinUrl"])
        except (KeyError, TypeError) as e:
            raise ProviderRejectedError("ultravox", f"Unexpected create call response: {data}") from e
        logger.info(f"[ULTRAVOX] Created call {call.call_id}")
        return call

    async def get_call_messages(self, call_id: str) -> List[Dict[str, Any]]:
        """Fetch every transcript message of a call, following pagination cursors."""
        messages: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            params = {"cursor": cursor} if cursor else None
            data = await self._request(
                "GET", f"{self.base_url}/calls/{call_id}/messages", params=params
            )
            messages.extend(data.get("results") or [])

            next_url = data.get("next")
            cursor = httpx.URL(next_url).params.get("cursor") if next_url else None
            if not cursor:
                break

        return messages
