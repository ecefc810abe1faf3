from datetime import date, datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a string id, or None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def date_to_str(value: Optional[date]) -> Optional[str]:
    # BSON has no plain date type; calendar dates are stored as ISO strings
    return value.isoformat() if value is not None else None


class MongoModel(BaseModel):
    """Stored record: `_id` in Mongo, string `id` in Python and JSON."""
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        validate_default=True
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_document(self) -> dict:
        """Document for insert; Mongo assigns `_id` when id is unset."""
        doc = self.model_dump(exclude={"id"})
        if self.id is not None:
            doc["_id"] = to_object_id(self.id) or self.id
        return doc
