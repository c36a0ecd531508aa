"""Registry audit trail model."""

import uuid
from datetime import datetime
from typing import Optional, Any

from sqlalchemy import String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, JSONType, enum_type
from app.models.enums import AuditActionType


class RegistryAuditEntry(Base):
    """Append-only audit entry for a permit application.

    Rows are only ever inserted, never updated or deleted.
    """

    __tablename__ = "registry_audit_trail"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    permit_application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("permit_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assessment_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    # Officer snapshot at the time of the action
    officer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    officer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    officer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    action_type: Mapped[AuditActionType] = mapped_column(
        enum_type(AuditActionType),
        nullable=False,
        index=True,
    )
    previous_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    new_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    previous_outcome: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    new_outcome: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    assessment_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    feedback_provided: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    changes_made: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
