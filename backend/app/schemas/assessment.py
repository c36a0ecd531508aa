"""Initial and compliance assessment schemas."""

from datetime import datetime
from typing import Optional, Any
from uuid import UUID

from pydantic import Field, computed_field, field_validator

from app.schemas.base import ApplicationRefMixin, BaseSchema, IDMixin, TimestampMixin
from app.schemas.permit import ApplicationSummary
from app.schemas.profile import OfficerRef
from app.models.enums import InitialAssessmentStatus, ComplianceAssessmentStatus
from app.services.status_display import status_badge


class StatusBadge(BaseSchema):
    """Display label and visual variant for a status."""

    label: str
    variant: str


# ---------------------------------------------------------------------------
# Initial assessments (registry stage)
# ---------------------------------------------------------------------------

class InitialAssessmentRecord(BaseSchema):
    """Record the outcome of an initial assessment."""

    assessment_status: InitialAssessmentStatus
    assessment_outcome: str = Field(..., min_length=1, max_length=255)
    assessment_notes: str = Field(..., min_length=1)
    feedback_provided: Optional[str] = None
    permit_activity_type: Optional[str] = Field(None, max_length=100)

    @field_validator("assessment_status")
    @classmethod
    def status_must_be_decided(cls, v: InitialAssessmentStatus) -> InitialAssessmentStatus:
        if v == InitialAssessmentStatus.PENDING:
            raise ValueError("Assessment status must be passed, failed or requires_clarification")
        return v


class InitialAssessmentUpdate(BaseSchema):
    """Amend notes, feedback or outcome text."""

    assessment_outcome: Optional[str] = Field(None, min_length=1, max_length=255)
    assessment_notes: Optional[str] = Field(None, min_length=1)
    feedback_provided: Optional[str] = None
    permit_activity_type: Optional[str] = Field(None, max_length=100)


class InitialAssessmentResponse(BaseSchema, IDMixin, ApplicationRefMixin, TimestampMixin):
    """Initial assessment response."""

    assessed_by: Optional[UUID] = None
    assessment_status: InitialAssessmentStatus
    assessment_outcome: Optional[str] = None
    assessment_notes: Optional[str] = None
    feedback_provided: Optional[str] = None
    permit_activity_type: Optional[str] = None
    assessment_date: Optional[datetime] = None


class InitialAssessmentListItem(InitialAssessmentResponse):
    """Initial assessment with its application and assessor."""

    application: ApplicationSummary
    assessor: Optional[OfficerRef] = None


# ---------------------------------------------------------------------------
# Compliance assessments (technical stage)
# ---------------------------------------------------------------------------

class ComplianceAssignRequest(BaseSchema):
    """Assign a compliance assessment to an officer."""

    officer_id: UUID
    assessment_notes: Optional[str] = None


class ComplianceAssessmentUpdate(BaseSchema):
    """Technical review fields set by the assigned officer."""

    assessment_status: Optional[ComplianceAssessmentStatus] = None
    assessment_notes: Optional[str] = None
    compliance_score: Optional[int] = Field(None, ge=0, le=100)
    recommendations: Optional[str] = None
    violations_found: Optional[list[Any]] = None
    next_review_date: Optional[datetime] = None
    processing_days: Optional[int] = Field(None, ge=1)
    fee_category: Optional[str] = Field(None, max_length=50)


class ComplianceAssessmentResponse(BaseSchema, IDMixin, ApplicationRefMixin, TimestampMixin):
    """Compliance assessment response with its display badge."""

    assessed_by: Optional[UUID] = None
    assigned_by: Optional[UUID] = None
    assessment_status: ComplianceAssessmentStatus
    assessment_notes: Optional[str] = None
    compliance_score: Optional[int] = None
    recommendations: Optional[str] = None
    violations_found: Optional[list[Any]] = None
    next_review_date: Optional[datetime] = None
    processing_days: Optional[int] = None
    fee_category: Optional[str] = None
    calculated_administration_fee_cents: Optional[int] = None
    calculated_technical_fee_cents: Optional[int] = None
    final_fee_amount_cents: Optional[int] = None

    @computed_field
    @property
    def status_badge(self) -> StatusBadge:
        return StatusBadge(**status_badge(self.assessment_status))


class ComplianceAssessmentListItem(ComplianceAssessmentResponse):
    """Compliance assessment with its application and assessor."""

    application: ApplicationSummary
    assessor: Optional[OfficerRef] = None


class ComplianceAssessmentDetail(ComplianceAssessmentListItem):
    """Compliance assessment detail including the registry-stage result."""

    initial_assessment: Optional[InitialAssessmentResponse] = None
