"""User and manager notification models."""

import uuid
from datetime import datetime
from typing import Optional, Any

from sqlalchemy import String, DateTime, ForeignKey, Text, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, JSONType, enum_type
from app.models.enums import StaffUnit, StaffPosition


class Notification(Base):
    """Notification addressed to a single user (usually the applicant)."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    related_permit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("permit_applications.id", ondelete="CASCADE"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ManagerNotification(Base):
    """Notification addressed to a staff unit (optionally a position within it)."""

    __tablename__ = "manager_notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    target_unit: Mapped[StaffUnit] = mapped_column(
        enum_type(StaffUnit),
        nullable=False,
        index=True,
    )
    target_position: Mapped[Optional[StaffPosition]] = mapped_column(
        enum_type(StaffPosition),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    details: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSONType, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
