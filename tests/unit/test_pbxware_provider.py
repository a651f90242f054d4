"""Unit tests for the PBXware provider."""
import httpx
import pytest

from app.services.call_session.exceptions import ProviderRejectedError
from app.services.telephony.pbxware_provider import PbxwareProvider
from app.services.ultravox.client import UltravoxCall

API_URL = "https://pbx.example.com/api"


def make_provider(handler) -> PbxwareProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PbxwareProvider(
        api_url=API_URL,
        api_key="pbx-key",
        sip_domain="pbx.example.com",
        sip_username="ai-agent",
        sip_password="secret",
        http_client=client,
    )


class TestPbxwareMedium:
    """Test SIP medium and bridge payloads."""

    def test_inbound_medium(self):
        """Test Ultravox registers with the AI extension credentials."""
        provider = make_provider(lambda request: httpx.Response(200, json={}))

        assert provider.inbound_medium() == {
            "sip": {"incoming": {"username": "ai-agent", "password": "secret"}}
        }

    def test_outbound_medium(self):
        """Test outbound calls dial through the PBX domain."""
        provider = make_provider(lambda request: httpx.Response(200, json={}))

        outgoing = provider.outbound_medium("+15551234567")["sip"]["outgoing"]

        assert outgoing["to"] == "sip:+15551234567@pbx.example.com"
        assert outgoing["from"] == "ai-agent"

    def test_bridge_inbound(self):
        """Test PBXware is told which SIP URI to bridge to."""
        provider = make_provider(lambda request: httpx.Response(200, json={}))
        call = UltravoxCall(call_id="uv-1", join_url="wss://example")

        assert provider.bridge_inbound(call) == {
            "status": "success",
            "callId": "uv-1",
            "sipUri": "sip:ai-agent@pbx.example.com",
        }


class TestPbxwareRedirect:
    """Test channel transfer through the PBXware API."""

    @pytest.mark.asyncio
    async def test_redirect_matches_unique_id(self):
        """Test the channel is found by unique id and transferred."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            action = request.url.params["action"]
            if action == "monitor.channels":
                return httpx.Response(200, json={"channels": [
                    {"channel": "SIP/other-1", "uniqueid": "111.1", "src": "200", "dst": "201"},
                    {"channel": "SIP/ai-agent-2", "uniqueid": "222.2", "src": "+15557654321", "dst": "ai-agent"},
                ]})
            return httpx.Response(200, json={"status": "ok"})

        provider = make_provider(handler)

        result = await provider.redirect("222.2", "+15559876543")

        transfer = requests[-1].url.params
        assert transfer["action"] == "call.transfer"
        assert transfer["channel"] == "SIP/ai-agent-2"
        assert transfer["destination"] == "+15559876543"
        assert transfer["apikey"] == "pbx-key"
        assert result.status == "ok"
        assert result.details == {"channel": "SIP/ai-agent-2"}

    @pytest.mark.asyncio
    async def test_redirect_falls_back_to_ai_extension(self):
        """Test the AI extension channel is used when the id is unknown."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["action"] == "monitor.channels":
                return httpx.Response(200, json=[
                    {"channel": "SIP/ai-agent-7", "uniqueid": "777.7", "src": "ai-agent", "dst": "+1555"},
                ])
            return httpx.Response(200, json={})

        provider = make_provider(handler)

        result = await provider.redirect("sip:ai-agent@pbx.example.com", "+15559876543")

        assert result.status == "success"
        assert result.details == {"channel": "SIP/ai-agent-7"}

    @pytest.mark.asyncio
    async def test_redirect_without_channel(self):
        """Test no active channel is a provider rejection."""
        provider = make_provider(lambda request: httpx.Response(200, json={"channels": []}))

        with pytest.raises(ProviderRejectedError):
            await provider.redirect("222.2", "+15559876543")

    @pytest.mark.asyncio
    async def test_redirect_api_error(self):
        """Test HTTP errors from PBXware are provider rejections."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["action"] == "monitor.channels":
                return httpx.Response(200, json=[{"channel": "SIP/ai-agent-2", "uniqueid": "222.2"}])
            return httpx.Response(503, text="busy")

        provider = make_provider(handler)

        with pytest.raises(ProviderRejectedError) as exc_info:
            await provider.redirect("222.2", "+15559876543")

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_redirect_error_body(self):
        """Test an error reported in the response body is a rejection."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["action"] == "monitor.channels":
                return httpx.Response(200, json=[{"channel": "SIP/ai-agent-2", "uniqueid": "222.2"}])
            return httpx.Response(200, json={"error": "Invalid destination"})

        provider = make_provider(handler)

        with pytest.raises(ProviderRejectedError):
            await provider.redirect("222.2", "bogus")

    @pytest.mark.asyncio
    async def test_originate_returns_sip_uri(self):
        """Test outbound calls are dialed by Ultravox over SIP."""
        provider = make_provider(lambda request: httpx.Response(200, json={}))
        call = UltravoxCall(call_id="uv-1", join_url="wss://example")

        assert await provider.originate_outbound("+15551234567", call) == "sip:+15551234567@pbx.example.com"
