"""Permit application schemas."""

from datetime import datetime
from typing import Optional, Any
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin
from app.models.enums import ApplicationStatus


class ApplicationCreate(BaseSchema):
    """Create a draft permit application."""

    title: str = Field(..., min_length=3, max_length=255)
    entity_id: Optional[UUID] = None
    permit_type: str = Field(default="new", max_length=100)
    activity_id: Optional[UUID] = None
    activity_level: Optional[str] = Field(None, max_length=20)
    activity_classification: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    activity_location: Optional[str] = None
    environmental_impact: Optional[str] = None
    mitigation_measures: Optional[str] = None
    estimated_cost_kina: Optional[int] = Field(None, ge=0)
    commencement_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None


class ApplicationUpdate(BaseSchema):
    """Edit an application while it is still with the applicant."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    entity_id: Optional[UUID] = None
    permit_type: Optional[str] = Field(None, max_length=100)
    activity_id: Optional[UUID] = None
    activity_level: Optional[str] = Field(None, max_length=20)
    activity_classification: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    activity_location: Optional[str] = None
    environmental_impact: Optional[str] = None
    mitigation_measures: Optional[str] = None
    estimated_cost_kina: Optional[int] = Field(None, ge=0)
    commencement_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None


class ApplicationResponse(BaseSchema, IDMixin, TimestampMixin):
    """Permit application response."""

    user_id: UUID
    entity_id: Optional[UUID] = None
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    title: str
    application_number: Optional[str] = None
    permit_number: Optional[str] = None
    permit_type: str
    activity_id: Optional[UUID] = None
    activity_level: Optional[str] = None
    activity_classification: Optional[str] = None
    description: Optional[str] = None
    activity_location: Optional[str] = None
    environmental_impact: Optional[str] = None
    mitigation_measures: Optional[str] = None
    estimated_cost_kina: Optional[int] = None
    commencement_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    status: ApplicationStatus
    assigned_officer_id: Optional[UUID] = None
    assigned_compliance_officer_id: Optional[UUID] = None
    fee_amount_cents: Optional[int] = None
    fee_breakdown: Optional[dict[str, Any]] = None
    application_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None


class ApplicationSummary(BaseSchema):
    """Application fields joined into assessment listings."""

    id: UUID
    title: str
    application_number: Optional[str] = None
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    permit_type: str
    activity_level: Optional[str] = None
    status: ApplicationStatus
    application_date: Optional[datetime] = None


class AssignOfficerRequest(BaseSchema):
    """Assign an application to an officer."""

    officer_id: UUID


class BulkAssignRequest(BaseSchema):
    """Assign many records to one officer."""

    ids: list[UUID] = Field(..., min_length=1)
    officer_id: UUID
    assessment_notes: Optional[str] = None


class BulkAssignFailure(BaseSchema):
    """One record that could not be assigned."""

    id: UUID
    reason: str


class BulkAssignResult(BaseSchema):
    """Per-item outcome of a bulk assignment."""

    assigned: list[UUID] = []
    failed: list[BulkAssignFailure] = []
    assigned_count: int
    total: int
    message: str


class StatusTransitionRequest(BaseSchema):
    """Explicit workflow status change."""

    to_status: ApplicationStatus
    notes: Optional[str] = None
    permit_number: Optional[str] = Field(None, max_length=50)
