"""Ultravox tool definitions that call back into this service."""
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.services.agent.prompt import CenterProfile, get_center_profile

BODY = "PARAMETER_LOCATION_BODY"


def _tools_url(path: str) -> str:
    return f"{settings.tools_base_url.rstrip('/')}{path}"


def _string_param(name: str, description: str, required: bool = True, **schema: Any) -> Dict[str, Any]:
    return {
        "name": name,
        "location": BODY,
        "schema": {"type": "string", "description": description, **schema},
        "required": required,
    }


def _call_id_param() -> Dict[str, Any]:
    return {"name": "callId", "location": BODY, "knownValue": "KNOWN_PARAM_CALL_ID"}


def transfer_call_tool(provider: Optional[str] = None) -> Dict[str, Any]:
    """Tool that hands the caller off to a student or their emergency contact."""
    provider = provider or settings.telephony_provider
    return {
        "temporaryTool": {
            "modelToolName": "transferCall",
            "description": "Transfers call to a human. Use this if a caller is upset or if there are questions you cannot answer.",
            "automaticParameters": [_call_id_param()],
            "dynamicParameters": [
                _string_param("firstName", "The student's first name"),
                _string_param("lastName", "The student's last name"),
                _string_param(
                    "contactType",
                    "Who to transfer the call to: 'student' for the student's phone, "
                    "'emergency' for the parent/emergency contact.",
                    enum=["student", "emergency"],
                ),
                _string_param("transferReason", "The reason the call is being transferred."),
            ],
            "http": {
                "baseUrlPattern": _tools_url(f"/{provider}/transferCall"),
                "httpMethod": "POST",
            },
        }
    }


def info_lookup_tool(profile: Optional[CenterProfile] = None) -> Dict[str, Any]:
    """Tool that searches the center's program corpus."""
    lookup = (profile or get_center_profile()).info_lookup
    return {
        "temporaryTool": {
            "modelToolName": "infoLookup",
            "description": "Used to lookup information about the community center's soccer and swimming programs. This will search a vector database and return back chunks that are semantically similar to the query.",
            "staticParameters": [
                {"name": "corpusId", "location": BODY, "value": lookup.corpus_id},
                {"name": "maxChunks", "location": BODY, "value": lookup.max_chunks},
            ],
            "dynamicParameters": [_string_param("query", "The query to lookup.")],
            "http": {"baseUrlPattern": lookup.url, "httpMethod": "POST"},
        }
    }


def country_info_tool(provider: Optional[str] = None) -> Dict[str, Any]:
    """Tool that looks up facts about a country."""
    provider = provider or settings.telephony_provider
    return {
        "temporaryTool": {
            "modelToolName": "getCountryInfo",
            "description": "Look up facts about a country including capital, population, region, and currency. Use this when a user mentions a country name.",
            "dynamicParameters": [
                _string_param("countryName", "The name of the country (e.g., 'Germany', 'Japan', 'Eesti')"),
            ],
            "http": {
                "baseUrlPattern": _tools_url(f"/{provider}/countryInfo"),
                "httpMethod": "POST",
            },
        }
    }


def current_datetime_tool() -> Dict[str, Any]:
    """Tool that reports the current date and time in the caller's zone."""
    return {
        "temporaryTool": {
            "modelToolName": "getCurrentDateTime",
            "description": "Get the current date/time in the caller's timezone (also returns today/yesterday/tomorrow).",
            "automaticParameters": [_call_id_param()],
            "dynamicParameters": [
                _string_param(
                    "timeZone",
                    "Optional IANA timezone like 'America/Los_Angeles'. If omitted, server/call defaults are used.",
                    required=False,
                ),
            ],
            "http": {"baseUrlPattern": _tools_url("/time/now"), "httpMethod": "POST"},
        }
    }


def lesson_stage_tool(tool_name: str, description: str, path: str, lesson: Dict[str, Any]) -> Dict[str, Any]:
    """Tool that moves a reminder call to its next stage, carrying the lesson along."""
    return {
        "temporaryTool": {
            "modelToolName": tool_name,
            "description": description,
            "staticParameters": [{"name": "lesson", "location": BODY, "value": lesson}],
            "dynamicParameters": [
                _string_param("contactName", "The name of the person on the phone"),
            ],
            "http": {"baseUrlPattern": _tools_url(path), "httpMethod": "POST"},
        }
    }


HANG_UP_TOOL: Dict[str, Any] = {"toolName": "hangUp"}


def get_receptionist_tools(provider: Optional[str] = None) -> List[Dict[str, Any]]:
    """Tools available to the inbound receptionist."""
    return [
        transfer_call_tool(provider),
        info_lookup_tool(),
        country_info_tool(provider),
        current_datetime_tool(),
    ]
