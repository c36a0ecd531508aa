"""Registry audit trail schemas."""

from datetime import datetime
from typing import Optional, Any
from uuid import UUID

from pydantic import Field

from app.schemas.base import ApplicationRefMixin, BaseSchema, IDMixin
from app.models.enums import AuditActionType


class AuditEntryResponse(BaseSchema, IDMixin, ApplicationRefMixin):
    """Audit trail entry."""

    assessment_id: Optional[UUID] = None
    officer_id: Optional[UUID] = None
    officer_name: Optional[str] = None
    officer_email: Optional[str] = None
    action_type: AuditActionType
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    previous_outcome: Optional[str] = None
    new_outcome: Optional[str] = None
    assessment_notes: Optional[str] = None
    feedback_provided: Optional[str] = None
    changes_made: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="details")
    created_at: datetime
