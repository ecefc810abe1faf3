from typing import List, Optional
from datetime import datetime
from pydantic import EmailStr, Field
from app.models.base import MongoModel, _utcnow


class Guardian(MongoModel):
    """Parent or guardian record (the `parents` collection)."""
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Enrollment(MongoModel):
    """Secondary course enrollment (the `student_courses` relation)."""
    student_id: str
    course_id: str
    status: str = "active"


class Student(MongoModel):
    """
    Student as read by the fee core.

    `course_id` is the primary course; `enrolled_course_ids` is filled from
    active enrollments when the student is loaded, it is not stored on the
    student document itself.
    """
    first_name: str
    last_name: str = ""
    email: Optional[EmailStr] = None
    grade_level: Optional[str] = None
    status: str = "active"  # active | inactive | graduated
    course_id: Optional[str] = None
    parent_id: Optional[str] = None
    enrolled_course_ids: List[str] = []
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
