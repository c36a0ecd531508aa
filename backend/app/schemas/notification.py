"""Notification schemas."""

from datetime import datetime
from typing import Optional, Any
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema, IDMixin
from app.models.enums import StaffUnit, StaffPosition


class NotificationResponse(BaseSchema, IDMixin):
    """User notification."""

    user_id: UUID
    title: str
    message: str
    type: str
    related_permit_id: Optional[UUID] = None
    is_read: bool
    created_at: datetime


class ManagerNotificationResponse(BaseSchema, IDMixin):
    """Unit-targeted notification."""

    target_unit: StaffUnit
    target_position: Optional[StaffPosition] = None
    type: str
    message: str
    related_id: UUID
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="details")
    is_read: bool
    created_at: datetime
