"""Roster models."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ContactType(str, Enum):
    """Who a transfer should ring."""

    STUDENT = "student"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_request(cls, value: Optional[str]) -> "ContactType":
        """Contact type named by a tool call; anything but "emergency" rings the student."""
        if value and value.strip().lower() == cls.EMERGENCY.value:
            return cls.EMERGENCY
        return cls.STUDENT


class StudentContact(BaseModel):
    """Contact details of a student, as used by transfers and reminders."""

    full_name: str
    email: Optional[str] = None
    primary_phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    def phone_for(self, contact_type: ContactType) -> Optional[str]:
        """Phone number to ring for the given contact type."""
        if contact_type == ContactType.EMERGENCY:
            return self.emergency_contact_phone
        return self.primary_phone
