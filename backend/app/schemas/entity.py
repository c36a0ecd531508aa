"""Entity schemas."""

from typing import Optional
from uuid import UUID

from pydantic import Field, EmailStr

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin


class EntityCreate(BaseSchema):
    """Register an applicant entity."""

    name: str = Field(..., min_length=1, max_length=255)
    entity_type: str = Field(..., min_length=1, max_length=50)
    registration_number: Optional[str] = Field(None, max_length=100)
    tax_number: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    contact_person: Optional[str] = Field(None, max_length=255)
    postal_address: Optional[str] = None
    province: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)


class EntityResponse(BaseSchema, IDMixin, TimestampMixin):
    """Entity response."""

    user_id: UUID
    name: str
    entity_type: str
    registration_number: Optional[str] = None
    tax_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None
    postal_address: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    is_suspended: bool = False
