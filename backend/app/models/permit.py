"""PermitApplication model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Any

from sqlalchemy import String, DateTime, ForeignKey, Text, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, JSONType, enum_type
from app.models.enums import ApplicationStatus

if TYPE_CHECKING:
    from app.models.assessment import InitialAssessment, ComplianceAssessment


class PermitApplication(Base):
    """The primary record tracked through the approval pipeline."""

    __tablename__ = "permit_applications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    # Applicant
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("entities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Denormalized for listing/search
    entity_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    entity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    application_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        unique=True,
        nullable=True,
        index=True,
    )
    permit_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    permit_type: Mapped[str] = mapped_column(String(100), nullable=False, default="new")

    # Activity
    activity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("prescribed_activities.id", ondelete="SET NULL"),
        nullable=True,
    )
    activity_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    activity_classification: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    environmental_impact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mitigation_measures: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    estimated_cost_kina: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    commencement_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    status: Mapped[ApplicationStatus] = mapped_column(
        enum_type(ApplicationStatus),
        default=ApplicationStatus.DRAFT,
        nullable=False,
        index=True,
    )

    # Assignment
    assigned_officer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assigned_compliance_officer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Fees (INTEGER CENTS)
    fee_amount_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fee_breakdown: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    application_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    approval_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    initial_assessment: Mapped[Optional["InitialAssessment"]] = relationship(
        "InitialAssessment", back_populates="permit_application", uselist=False
    )
    compliance_assessment: Mapped[Optional["ComplianceAssessment"]] = relationship(
        "ComplianceAssessment", back_populates="permit_application", uselist=False
    )
