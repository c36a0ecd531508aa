"""Shared pieces of the request and response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Reads ORM rows directly and trims incoming text."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


class IDMixin(BaseModel):
    id: UUID


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class ApplicationRefMixin(BaseModel):
    """Rows that hang off a permit application (assessments, audit entries)."""

    permit_application_id: UUID
