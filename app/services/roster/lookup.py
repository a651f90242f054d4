"""Roster lookup."""
import logging
from typing import Optional, Union

from app.db.models import Student
from app.services.persistence.students import StudentPersistenceService
from app.services.roster.exceptions import ContactNotFoundError, NoDestinationNumberError
from app.services.roster.models import ContactType, StudentContact

logger = logging.getLogger(__name__)


def to_contact(student: Student) -> StudentContact:
    """Convert a roster row to a StudentContact."""
    return StudentContact(
        full_name=student.full_name,
        email=student.email,
        primary_phone=student.phone,
        emergency_contact=student.emergency_contact,
        emergency_contact_phone=student.emergency_contact_phone,
    )


class RosterLookup:
    """Resolves students to the phone numbers calls are transferred to."""

    def __init__(self, persistence: StudentPersistenceService):
        self.persistence = persistence

    async def find_by_name(self, first_name: str, last_name: str) -> Optional[StudentContact]:
        """Find a student by name (case-insensitive exact match)."""
        if not first_name or not last_name:
            return None
        student = await self.persistence.get_by_name(first_name, last_name)
        return to_contact(student) if student else None

    async def find_by_email(self, email: str) -> Optional[StudentContact]:
        """Find a student by email (case-insensitive)."""
        if not email:
            return None
        student = await self.persistence.get_by_email(email)
        return to_contact(student) if student else None

    async def resolve_number(
        self,
        first_name: str,
        last_name: str,
        contact_type: Union[ContactType, str] = ContactType.STUDENT,
    ) -> str:
        """
        Resolve the number to ring for a student.

        Raises:
            ContactNotFoundError: no student with that name
            NoDestinationNumberError: the student has no number for ``contact_type``
        """
        contact_type = ContactType(contact_type)
        contact = await self.find_by_name(first_name, last_name)
        if contact is None:
            logger.warning(f"[ROSTER] Student {first_name} {last_name} not found")
            raise ContactNotFoundError(first_name, last_name)

        number = contact.phone_for(contact_type)
        if not number:
            logger.warning(f"[ROSTER] No {contact_type} number for {contact.full_name}")
            raise NoDestinationNumberError(contact.full_name, str(contact_type))

        return number
