"""Twilio telephony provider."""
import asyncio
import logging
from functools import partial
from typing import Any, Dict, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient
from twilio.twiml.voice_response import VoiceResponse

from app.core.config import Settings
from app.services.call_session.exceptions import ProviderRejectedError
from app.services.call_session.models import RedirectResult
from app.services.telephony.base import TelephonyProvider
from app.services.ultravox.client import UltravoxCall

logger = logging.getLogger(__name__)


class TwilioProvider(TelephonyProvider):
    """Bridges Twilio calls to Ultravox over a media stream."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        phone_number: str,
        hold_message: str = "",
        client: Optional[TwilioClient] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.phone_number = phone_number
        self.hold_message = hold_message
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioProvider":
        return cls(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            phone_number=settings.twilio_phone_number,
            hold_message=settings.transfer_hold_message,
        )

    @property
    def client(self) -> TwilioClient:
        """Twilio REST client, created on first use."""
        if self._client is None:
            if not self.account_sid or not self.auth_token:
                raise ProviderRejectedError(self.name, "Twilio credentials are not configured")
            self._client = TwilioClient(self.account_sid, self.auth_token)
        return self._client

    def inbound_medium(self) -> Dict[str, Any]:
        return {"twilio": {}}

    def outbound_medium(self, destination: str) -> Dict[str, Any]:
        return {"twilio": {}}

    def stream_twiml(self, join_url: str) -> str:
        """TwiML connecting the call audio to an Ultravox join URL."""
        response = VoiceResponse()
        connect = response.connect()
        connect.stream(url=join_url, name="ultravox")
        return str(response)

    def transfer_twiml(self, destination: str) -> str:
        """TwiML that optionally announces the transfer, then dials ``destination``."""
        response = VoiceResponse()
        if self.hold_message:
            response.say(self.hold_message)
        if self.phone_number:
            dial = response.dial(caller_id=self.phone_number)
        else:
            dial = response.dial()
        dial.number(destination)
        return str(response)

    @staticmethod
    def apology_twiml(message: str = "Sorry, there was an error connecting your call.") -> str:
        """TwiML spoken to a caller when the call cannot be bridged."""
        response = VoiceResponse()
        response.say(message)
        return str(response)

    def bridge_inbound(self, call: UltravoxCall) -> str:
        return self.stream_twiml(call.join_url)

    async def _run(self, func, *args, **kwargs):
        """Run a blocking Twilio SDK call in the default executor."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args, **kwargs))
        except TwilioRestException as e:
            logger.error(f"[TWILIO] API error {e.status}: {e.msg}")
            raise ProviderRejectedError(self.name, str(e.msg), status_code=e.status) from e

    async def originate_outbound(self, destination: str, call: UltravoxCall) -> str:
        logger.info(f"[TWILIO] Placing outbound call to {destination} for Ultravox call {call.call_id}")
        twilio_call = await self._run(
            self.client.calls.create,
            twiml=self.stream_twiml(call.join_url),
            to=destination,
            from_=self.phone_number,
        )
        return twilio_call.sid

    async def redirect(self, provider_call_ref: str, destination: str) -> RedirectResult:
        twiml = self.transfer_twiml(destination)
        logger.debug(f"[TWILIO] Transfer TwiML for {provider_call_ref}: {twiml}")

        updated_call = await self._run(
            self.client.calls(provider_call_ref).update,
            twiml=twiml,
        )
        status = getattr(updated_call, "status", None) or "unknown"
        logger.info(f"[TWILIO] Transfer initiated for {provider_call_ref} - call status: {status}")

        return RedirectResult(
            status=str(status),
            instruction=twiml,
            details={"callSid": provider_call_ref},
        )
