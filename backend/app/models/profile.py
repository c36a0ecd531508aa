"""Profile model (staff and applicant accounts)."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, enum_type
from app.models.enums import UserType, StaffUnit, StaffPosition


class Profile(Base):
    """User profile linked to Firebase Auth, carrying role/unit flags."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    firebase_uid: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    user_type: Mapped[UserType] = mapped_column(
        enum_type(UserType),
        default=UserType.PUBLIC,
        nullable=False,
    )
    staff_unit: Mapped[Optional[StaffUnit]] = mapped_column(
        enum_type(StaffUnit),
        nullable=True,
        index=True,
    )
    staff_position: Mapped[Optional[StaffPosition]] = mapped_column(
        enum_type(StaffPosition),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def full_name(self) -> str:
        """First and last name, falling back to whichever exists, then email."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.last_name or self.email
