"""Unit task models (registry, compliance and revenue to-do items)."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey, Text, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, declared_attr

from app.core.database import Base, enum_type
from app.models.enums import TaskStatus, TaskPriority, StaffUnit


class UnitTaskMixin:
    """Columns shared by every unit's task table."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    task_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @declared_attr
    def assigned_to(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            Uuid,
            ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def assigned_by(cls) -> Mapped[Optional[uuid.UUID]]:
        return mapped_column(
            Uuid,
            ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        )

    status: Mapped[TaskStatus] = mapped_column(
        enum_type(TaskStatus),
        default=TaskStatus.PENDING,
        nullable=False,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        enum_type(TaskPriority),
        default=TaskPriority.NORMAL,
        nullable=False,
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    progress_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class RegistryTask(UnitTaskMixin, Base):
    """Registry unit task."""

    __tablename__ = "registry_tasks"


class ComplianceTask(UnitTaskMixin, Base):
    """Compliance unit task, optionally linked to the record it concerns."""

    __tablename__ = "compliance_tasks"

    related_permit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("permit_applications.id", ondelete="SET NULL"),
        nullable=True,
    )
    related_intent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    related_inspection_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)


class RevenueTask(UnitTaskMixin, Base):
    """Revenue unit task."""

    __tablename__ = "revenue_tasks"


TASK_MODELS: dict[StaffUnit, type[UnitTaskMixin]] = {
    StaffUnit.REGISTRY: RegistryTask,
    StaffUnit.COMPLIANCE: ComplianceTask,
    StaffUnit.REVENUE: RevenueTask,
}
