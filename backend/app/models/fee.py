"""Prescribed activity and fee structure models."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Text, Integer, Boolean, Float, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class PrescribedActivity(Base):
    """Activity from the prescribed activities schedule (levels 1-3)."""

    __tablename__ = "prescribed_activities"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    category_number: Mapped[str] = mapped_column(String(20), nullable=False)
    category_type: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    activity_description: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    # e.g. "2.1", "2.2"
    fee_category: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class FeeStructure(Base):
    """Fee schedule row.

    Money is stored as INTEGER CENTS.
    """

    __tablename__ = "fee_structures"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    # "Level 1" / "Level 2" / "Level 3"
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # new, renewal, transfer, amendment, ...
    permit_operation: Mapped[str] = mapped_column(String(50), nullable=False, default="new")
    fee_category: Mapped[str] = mapped_column(String(50), nullable=False)

    annual_recurrent_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    base_processing_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    work_plan_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_multiplier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)

    administration_form: Mapped[str] = mapped_column(String(20), nullable=False, default="Form 2")
    technical_form: Mapped[str] = mapped_column(String(20), nullable=False, default="Form 9")

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
