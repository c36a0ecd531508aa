"""Fee calculation schemas (INTEGER CENTS)."""

from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema


class FeeCalculationRequest(BaseSchema):
    """Calculate the fee for a prescribed activity."""

    activity_id: UUID
    custom_processing_days: Optional[int] = Field(None, ge=1)
    permit_type: Optional[str] = Field(None, max_length=50)
    permit_application_id: Optional[UUID] = None


class FeeCalculationResponse(BaseSchema):
    """Calculated administration and technical fees."""

    activity_id: UUID
    activity_level: int
    fee_category: str
    permit_operation: str
    processing_days: int
    annual_recurrent_fee_cents: int
    administration_fee_cents: int
    technical_fee_cents: int
    total_fee_cents: int
    administration_form: str
    technical_form: str
    permit_application_id: Optional[UUID] = None
