"""Student roster persistence service."""
import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Student

logger = logging.getLogger(__name__)

STUDENT_FIELDS = (
    "student_code",
    "first_name",
    "last_name",
    "email",
    "phone",
    "emergency_contact",
    "emergency_contact_relationship",
    "emergency_contact_phone",
    "skill_level",
    "notes",
)
REQUIRED_FIELDS = ("student_code", "first_name", "last_name")


class DuplicateStudentError(Exception):
    """A student with the same code already exists."""


class ImportResult(BaseModel):
    """Outcome of a roster CSV import."""

    count: int
    errors: List[str] = []


def _clean(value: Any) -> Optional[str]:
    """Normalize a CSV/JSON value; empty values become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class StudentPersistenceService:
    """Service for reading and writing the student roster."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _build_student(self, data: Dict[str, Any]) -> Student:
        values = {field: _clean(data.get(field)) for field in STUDENT_FIELDS}
        missing = [field for field in REQUIRED_FIELDS if not values[field]]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return Student(**values)

    async def add_student(self, data: Dict[str, Any]) -> Student:
        """Add a single student."""
        student = self._build_student(data)
        self.db.add(student)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateStudentError("Student code already exists") from e
        await self.db.refresh(student)
        return student

    async def get_by_code(self, student_code: str) -> Optional[Student]:
        """Get student by student code."""
        result = await self.db.execute(
            select(Student).where(Student.student_code == student_code)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, first_name: str, last_name: str) -> Optional[Student]:
        """Get student by first and last name (case-insensitive)."""
        result = await self.db.execute(
            select(Student)
            .where(func.lower(Student.first_name) == first_name.strip().lower())
            .where(func.lower(Student.last_name) == last_name.strip().lower())
            .order_by(Student.id)
        )
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[Student]:
        """Get student by email (case-insensitive)."""
        result = await self.db.execute(
            select(Student)
            .where(func.lower(Student.email) == email.strip().lower())
            .order_by(Student.id)
        )
        return result.scalars().first()

    async def list_students(self) -> List[Student]:
        """List all students, newest first."""
        result = await self.db.execute(
            select(Student).order_by(Student.created_at.desc(), Student.id.desc())
        )
        return list(result.scalars().all())

    async def import_from_csv(self, csv_path: str) -> ImportResult:
        """
        Import students from a CSV file with a header row.

        Rows missing a student code or name are skipped and reported in
        ``errors``. The import is committed as a single transaction.
        """
        path = Path(csv_path)
        errors: List[str] = []
        students: List[Student] = []

        with open(path, "r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for line_number, row in enumerate(reader, start=2):
                if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                    continue
                try:
                    students.append(self._build_student(row))
                except ValueError as e:
                    errors.append(f"Line {line_number}: {e}")

        self.db.add_all(students)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateStudentError(f"Duplicate student code in {path.name}") from e

        logger.info(f"[ROSTER] Imported {len(students)} students from {path} ({len(errors)} rows skipped)")
        return ImportResult(count=len(students), errors=errors)
