"""Unit tests for the Twilio provider."""
import pytest
from unittest.mock import Mock

from twilio.base.exceptions import TwilioRestException

from app.services.call_session.exceptions import ProviderRejectedError
from app.services.telephony.twilio_provider import TwilioProvider
from app.services.ultravox.client import UltravoxCall

CALL = UltravoxCall(call_id="uv-1", join_url="wss://voice.ultravox.ai/calls/uv-1")


@pytest.fixture
def twilio_client():
    return Mock()


@pytest.fixture
def provider(twilio_client):
    return TwilioProvider(
        account_sid="ACtest",
        auth_token="token",
        phone_number="+15551110000",
        hold_message="Please hold while I transfer your call",
        client=twilio_client,
    )


class TestTwiml:
    """Test TwiML generation."""

    def test_stream_twiml(self, provider):
        """Test inbound calls are streamed to the Ultravox join URL."""
        twiml = provider.bridge_inbound(CALL)

        assert "<Connect>" in twiml
        assert 'url="wss://voice.ultravox.ai/calls/uv-1"' in twiml
        assert 'name="ultravox"' in twiml

    def test_transfer_twiml_announces_and_dials(self, provider):
        """Test the transfer instruction says the hold message, then dials."""
        twiml = provider.transfer_twiml("+15559876543")

        assert "<Say>Please hold while I transfer your call</Say>" in twiml
        assert 'callerId="+15551110000"' in twiml
        assert "<Number>+15559876543</Number>" in twiml
        assert twiml.index("<Say>") < twiml.index("<Dial")

    def test_transfer_twiml_without_hold_message(self, twilio_client):
        """Test no announcement is made when the hold message is empty."""
        provider = TwilioProvider("ACtest", "token", "", client=twilio_client)

        twiml = provider.transfer_twiml("+15559876543")

        assert "<Say>" not in twiml
        assert "<Number>+15559876543</Number>" in twiml

    def test_apology_twiml(self):
        """Test the error response spoken to callers."""
        assert "Sorry, there was an error connecting your call." in TwilioProvider.apology_twiml()


class TestTwilioCalls:
    """Test Twilio REST interactions."""

    @pytest.mark.asyncio
    async def test_redirect_updates_live_call(self, provider, twilio_client):
        """Test transfers update the live call with the dial TwiML."""
        twilio_client.calls.return_value.update.return_value = Mock(status="in-progress")

        result = await provider.redirect("CA123", "+15559876543")

        twilio_client.calls.assert_called_with("CA123")
        kwargs = twilio_client.calls.return_value.update.call_args.kwargs
        assert "<Number>+15559876543</Number>" in kwargs["twiml"]
        assert result.status == "in-progress"
        assert result.details == {"callSid": "CA123"}
        assert result.instruction == kwargs["twiml"]

    @pytest.mark.asyncio
    async def test_redirect_rejected(self, provider, twilio_client):
        """Test Twilio API errors become provider rejections."""
        twilio_client.calls.return_value.update.side_effect = TwilioRestException(
            400, "https://api.twilio.com/Calls/CA123", msg="Call is not in-progress"
        )

        with pytest.raises(ProviderRejectedError) as exc_info:
            await provider.redirect("CA123", "+15559876543")

        assert exc_info.value.provider == "twilio"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_originate_outbound(self, provider, twilio_client):
        """Test outbound calls are placed with a stream to Ultravox."""
        twilio_client.calls.create.return_value = Mock(sid="CA999")

        ref = await provider.originate_outbound("+15551234567", CALL)

        assert ref == "CA999"
        kwargs = twilio_client.calls.create.call_args.kwargs
        assert kwargs["to"] == "+15551234567"
        assert kwargs["from_"] == "+15551110000"
        assert "wss://voice.ultravox.ai/calls/uv-1" in kwargs["twiml"]

    def test_missing_credentials(self):
        """Test the REST client requires credentials."""
        provider = TwilioProvider(account_sid="", auth_token="", phone_number="")

        with pytest.raises(ProviderRejectedError):
            provider.client
