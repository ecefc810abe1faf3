from pydantic import Field
from app.models.base import MongoModel


class Course(MongoModel):
    name: str
    price_cents: int = Field(default=0, ge=0)  # Integer cents
    status: str = "active"
