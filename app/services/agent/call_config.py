"""Ultravox call configuration builders."""
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.services.agent.prompt import get_system_prompt
from app.services.agent.tools import get_receptionist_tools


def build_call_config(
    medium: Dict[str, Any],
    system_prompt: Optional[str] = None,
    selected_tools: Optional[List[Dict[str, Any]]] = None,
    first_speaker: str = "FIRST_SPEAKER_AGENT",
) -> Dict[str, Any]:
    """Build the body of an Ultravox create-call request.

    The receptionist prompt and tools are used when none are given.
    """
    return {
        "systemPrompt": system_prompt or get_system_prompt(),
        "model": settings.ultravox_model,
        "voice": settings.ultravox_voice,
        "temperature": settings.ultravox_temperature,
        "firstSpeaker": first_speaker,
        "selectedTools": selected_tools if selected_tools is not None else get_receptionist_tools(),
        "medium": medium,
    }


def build_receptionist_call_config(medium: Dict[str, Any], provider: Optional[str] = None) -> Dict[str, Any]:
    """Call configuration for an inbound call answered by the receptionist."""
    return build_call_config(
        medium=medium,
        selected_tools=get_receptionist_tools(provider),
        first_speaker="FIRST_SPEAKER_AGENT",
    )
