"""Initial (registry) and compliance (technical) assessment models."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Any

from sqlalchemy import String, DateTime, ForeignKey, Text, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, JSONType, enum_type
from app.models.enums import InitialAssessmentStatus, ComplianceAssessmentStatus

if TYPE_CHECKING:
    from app.models.permit import PermitApplication


class InitialAssessment(Base):
    """Registry-stage pass/fail/clarify decision gating technical review.

    One per permit application.
    """

    __tablename__ = "initial_assessments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    permit_application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("permit_applications.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    # Null until a registry manager assigns an officer
    assessed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assessment_status: Mapped[InitialAssessmentStatus] = mapped_column(
        enum_type(InitialAssessmentStatus),
        default=InitialAssessmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    assessment_outcome: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    assessment_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    feedback_provided: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    permit_activity_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    assessment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    permit_application: Mapped["PermitApplication"] = relationship(
        "PermitApplication", back_populates="initial_assessment"
    )


class ComplianceAssessment(Base):
    """Technical-stage review performed by a compliance officer.

    One per permit application, created when the initial assessment passes.
    """

    __tablename__ = "compliance_assessments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    permit_application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("permit_applications.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    assessed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    assessment_status: Mapped[ComplianceAssessmentStatus] = mapped_column(
        enum_type(ComplianceAssessmentStatus),
        default=ComplianceAssessmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    assessment_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # 0-100
    compliance_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    violations_found: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    next_review_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Fee parameters captured during technical review (INTEGER CENTS)
    processing_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fee_category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    calculated_administration_fee_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    calculated_technical_fee_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    final_fee_amount_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    permit_application: Mapped["PermitApplication"] = relationship(
        "PermitApplication", back_populates="compliance_assessment"
    )
