"""Agent prompt templates."""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_PATH = Path(__file__).parent / "data" / "center.yaml"


class FaqEntry(BaseModel):
    """Question and answer the receptionist can use directly."""

    question: str
    answer: str


class InfoLookupConfig(BaseModel):
    """Corpus used by the infoLookup tool."""

    corpus_id: str = ""
    max_chunks: int = 5
    url: str = ""


class CenterProfile(BaseModel):
    """Facts about the community center the receptionist answers for."""

    center_name: str = "CCC"
    center_description: str = "a local community center"
    agent_name: str = "Steve"
    faq: List[FaqEntry] = []
    events: List[str] = []
    info_lookup: InfoLookupConfig = InfoLookupConfig()


def load_center_profile(profile_file: Optional[str] = None) -> CenterProfile:
    """Load the center profile from YAML, falling back to defaults if missing."""
    path = Path(profile_file) if profile_file else DEFAULT_PROFILE_PATH
    if not path.exists():
        logger.warning(f"[PROMPT] Center profile {path} not found - using defaults")
        return CenterProfile()

    with open(path, "r") as f:
        data: Dict[str, Any] = yaml.safe_load(f) or {}
    return CenterProfile(**data)


@lru_cache(maxsize=1)
def get_center_profile() -> CenterProfile:
    """Get the configured center profile (loaded once)."""
    return load_center_profile(settings.center_profile_path or None)


def get_system_prompt(profile: Optional[CenterProfile] = None) -> str:
    """Generate the receptionist system prompt for inbound calls."""
    profile = profile or get_center_profile()

    faq_lines = "\n\n".join(f"## {entry.question}\n{entry.answer}" for entry in profile.faq)
    event_lines = "\n".join(f"* {event}" for event in profile.events)

    return f"""
Your name is {profile.agent_name}. You are a virtual, AI receptionist at {profile.center_name}, {profile.center_description}.

Your job is as follows:
1. Answer all calls with a friendly, conversational approach.
2. Provide helpful answers to customer inquiries. Use the Q&A section below for basic questions.
3. Important: you must use the events section below to answer questions about upcoming events at the center.
4. For more complex questions you MUST use the "infoLookup" tool. Do not make answers up!
5. If a caller is angry or has a topic that you cannot answer, you can use the "transferCall" tool to hand-off the call to the right department.
6. If a caller mentions a country name (like "Germany" or "Eesti"), you MUST use the "getCountryInfo" tool to provide facts about it.
7. If the caller asks for the current date/time (now, today, yesterday, tomorrow), you MUST use the "getCurrentDateTime" tool.

#Q&A
{faq_lines}

#EVENTS
{event_lines}
"""


def get_lesson_reminder_prompt(lesson: Dict[str, Any]) -> str:
    """Prompt for an outbound lesson reminder call."""
    student = lesson["student"]
    full_name = student["fullName"]
    alternate = student.get("emergencyContact") or "their emergency contact"
    event_slug = (lesson["booking"].get("eventType") or {}).get("slug", "lesson")
    profile = get_center_profile()

    return f"""Your name is {profile.agent_name}. You are a virtual, AI receptionist at {profile.center_name}, {profile.center_description}.

  You are calling {full_name} on the phone to remind them of their upcoming {event_slug}.

  Your job is as follows:
  1. Introduce yourself and say why you are calling
  2. Confirm you are talking to {full_name} or their alternative contact {alternate}
  3. If you are talking to {full_name} or {alternate} then call the tool "confirmLessonTime"
  4. If {full_name} or {alternate} are not available, say you will call back later
  5. If you get the voicemail for {full_name} or {alternate} leave a simple message that reminds them of the lesson and ask them to call the center if they need to change or cancel"""


def get_confirm_lesson_prompt(lesson: Dict[str, Any]) -> str:
    """Prompt for the confirm-lesson call stage."""
    return f"""Continue the call. Your job now is to confirm the lesson:
    1. If {lesson["student"]["fullName"]} can make the lesson at {lesson["booking"].get("start")} then you MUST thank them, say goodbye and then call the 'hangUp' tool
    2. If they cannot make the lesson, you must call the 'rescheduleLesson' tool
  """


def get_reschedule_lesson_prompt() -> str:
    """Prompt for the reschedule-lesson call stage."""
    return """Continue the call. Your job now is to reschedule the lesson:
    1. Tell them the center will follow up shortly to find a new lesson time
    2. Then you MUST thank them, say goodbye, and then call the 'hangUp' tool
  """
