"""PBXware (SIP trunk) telephony provider."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import Settings
from app.services.call_session.exceptions import ProviderRejectedError
from app.services.call_session.models import RedirectResult
from app.services.telephony.base import TelephonyProvider
from app.services.ultravox.client import UltravoxCall

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15.0


class PbxwareProvider(TelephonyProvider):
    """Bridges PBXware calls to Ultravox over SIP.

    Ultravox registers as a SIP extension on the PBX. Inbound calls are
    routed by PBXware to that extension; outbound calls are dialed by
    Ultravox itself through the PBX. Transfers go through the PBXware
    control API, which redirects the live channel.
    """

    name = "pbxware"

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sip_domain: str,
        sip_username: str,
        sip_password: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sip_domain = sip_domain
        self.sip_username = sip_username
        self.sip_password = sip_password
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PbxwareProvider":
        return cls(
            api_url=settings.pbxware_api_url,
            api_key=settings.pbxware_api_key,
            sip_domain=settings.pbxware_sip_domain,
            sip_username=settings.ai_sip_username,
            sip_password=settings.ai_sip_password,
        )

    @property
    def sip_uri(self) -> str:
        """SIP address of the AI agent extension."""
        return f"sip:{self.sip_username}@{self.sip_domain}"

    async def _request(self, action: str, **params: Any) -> Any:
        """Call a PBXware API action."""
        if not self.api_url:
            raise ProviderRejectedError(self.name, "PBXWARE_API_URL is not configured")

        query = {"apikey": self.api_key, "action": action, **params}
        client = self._http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)
        try:
            response = await client.get(self.api_url, params=query)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[PBXWARE] API error ({action}): {e.response.status_code} {e.response.text}")
            raise ProviderRejectedError(
                self.name, e.response.text or str(e), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[PBXWARE] Request failed ({action}): {type(e).__name__}: {e}")
            raise ProviderRejectedError(self.name, str(e)) from e
        finally:
            if client is not self._http_client:
                await client.aclose()

    def inbound_medium(self) -> Dict[str, Any]:
        return {
            "sip": {
                "incoming": {
                    "username": self.sip_username,
                    "password": self.sip_password,
                }
            }
        }

    def outbound_medium(self, destination: str) -> Dict[str, Any]:
        return {
            "sip": {
                "outgoing": {
                    "to": self.outbound_sip_uri(destination),
                    "from": self.sip_username,
                    "username": self.sip_username,
                    "password": self.sip_password,
                }
            }
        }

    def outbound_sip_uri(self, destination: str) -> str:
        """SIP URI PBXware routes from the AI extension to ``destination``."""
        return f"sip:{destination}@{self.sip_domain}"

    def bridge_inbound(self, call: UltravoxCall) -> Dict[str, Any]:
        return {
            "status": "success",
            "callId": call.call_id,
            "sipUri": self.sip_uri,
        }

    async def originate_outbound(self, destination: str, call: UltravoxCall) -> str:
        # Ultravox has already started dialing the SIP leg when the call was created
        uri = self.outbound_sip_uri(destination)
        logger.info(f"[PBXWARE] Ultravox call {call.call_id} dialing {uri}")
        return uri

    async def list_channels(self) -> List[Dict[str, Any]]:
        """Active channels reported by ``monitor.channels``."""
        data = await self._request("monitor.channels")
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return data.get("channels") or []
        return []

    def _find_channel(
        self, channels: List[Dict[str, Any]], provider_call_ref: str
    ) -> Optional[Dict[str, Any]]:
        for channel in channels:
            if provider_call_ref and channel.get("uniqueid") == provider_call_ref:
                return channel
        for channel in channels:
            if self.sip_username in (channel.get("src"), channel.get("dst")):
                return channel
        return None

    async def redirect(self, provider_call_ref: str, destination: str) -> RedirectResult:
        channels = await self.list_channels()
        channel = self._find_channel(channels, provider_call_ref)
        if channel is None:
            raise ProviderRejectedError(
                self.name, "Could not find active PBXware channel for AI extension"
            )

        logger.info(f"[PBXWARE] Transferring channel {channel.get('channel')} to {destination}")
        data = await self._request(
            "call.transfer",
            channel=channel.get("channel"),
            destination=destination,
        )

        status = "success"
        if isinstance(data, dict):
            if data.get("error") or str(data.get("status", "")).lower() == "error":
                raise ProviderRejectedError(self.name, str(data.get("error") or data))
            if data.get("status"):
                status = str(data["status"])

        return RedirectResult(
            status=status,
            instruction=f"call.transfer channel={channel.get('channel')} destination={destination}",
            details={"channel": channel.get("channel")},
        )
