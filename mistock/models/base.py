from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(ObjectId())


class ObjectIdStr(str):
    """String id that also accepts a raw ObjectId (as read back from Mongo)."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls.validate)

    @classmethod
    def validate(cls, value: Any) -> str:
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, str) and value:
            return value
        raise ValueError("Invalid id")


class DocumentModel(BaseModel):
    """Top-level aggregate: has an id, timestamps and an optimistic-lock version."""
    id: ObjectIdStr = Field(default_factory=new_id, alias="_id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 1

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )
