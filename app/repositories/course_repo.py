from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.base import to_object_id
from app.models.course import Course
from app.repositories.base import store_errors


class CourseRepository:
    """Read-only access to the course catalogue."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["courses"]

    async def list_active_courses(self) -> List[Course]:
        with store_errors("load courses"):
            docs = await self.collection.find({"status": "active"}).sort("name", 1).to_list(None)
        return [Course(**doc) for doc in docs]

    async def get_course(self, course_id: Optional[str]) -> Optional[Course]:
        oid = to_object_id(course_id)
        if oid is None:
            return None

        with store_errors("load course"):
            doc = await self.collection.find_one({"_id": oid})
        return Course(**doc) if doc else None
