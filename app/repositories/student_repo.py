import re
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.base import to_object_id
from app.models.student import Guardian, Student
from app.repositories.base import store_errors


class StudentRepository:
    """Read-only access to students, their enrollments and guardians."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["students"]
        self.enrollments = db["student_courses"]
        self.guardians = db["parents"]

    async def list_active_students(self) -> List[Student]:
        """Active students with their active course enrollments attached."""
        with store_errors("load students"):
            docs = await self.collection.find({"status": "active"}).sort("first_name", 1).to_list(None)
        students = [Student(**doc) for doc in docs]
        await self._attach_enrollments(students)
        return students

    async def get_student(self, student_id: str) -> Optional[Student]:
        oid = to_object_id(student_id)
        if oid is None:
            return None

        with store_errors("load student"):
            doc = await self.collection.find_one({"_id": oid})
        if not doc:
            return None

        student = Student(**doc)
        await self._attach_enrollments([student])
        return student

    async def find_ids_by_name(self, term: str) -> List[str]:
        """Ids of students whose first or last name contains `term`."""
        pattern = {"$regex": re.escape(term), "$options": "i"}
        with store_errors("search students"):
            docs = await self.collection.find(
                {"$or": [{"first_name": pattern}, {"last_name": pattern}]},
                {"_id": 1}
            ).to_list(None)
        return [str(doc["_id"]) for doc in docs]

    async def get_guardian(self, parent_id: Optional[str]) -> Optional[Guardian]:
        oid = to_object_id(parent_id)
        if oid is None:
            return None

        with store_errors("load guardian"):
            doc = await self.guardians.find_one({"_id": oid})
        return Guardian(**doc) if doc else None

    async def _attach_enrollments(self, students: List[Student]) -> None:
        if not students:
            return

        by_id: Dict[str, Student] = {s.id: s for s in students}
        with store_errors("load enrollments"):
            docs = await self.enrollments.find({
                "student_id": {"$in": list(by_id.keys())},
                "status": "active"
            }).to_list(None)

        for doc in docs:
            student = by_id.get(str(doc["student_id"]))
            if student is not None:
                student.enrolled_course_ids.append(str(doc["course_id"]))
