"""Profile and staff directory schemas."""

from typing import Optional
from uuid import UUID

from app.schemas.base import BaseSchema, IDMixin
from app.models.enums import UserType, StaffUnit, StaffPosition


class ProfileResponse(BaseSchema, IDMixin):
    """Profile response."""

    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    phone: Optional[str] = None
    organization: Optional[str] = None
    user_type: UserType
    staff_unit: Optional[StaffUnit] = None
    staff_position: Optional[StaffPosition] = None
    is_active: bool


class CurrentUserResponse(BaseSchema):
    """Authenticated caller with derived dashboard access."""

    uid: str
    email_verified: bool = False
    profile: ProfileResponse
    is_manager: bool = False
    can_decide: bool = False


class StaffMember(BaseSchema, IDMixin):
    """Staff directory row used by allocation dialogs."""

    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    staff_unit: Optional[StaffUnit] = None
    staff_position: Optional[StaffPosition] = None
    active_assignments: int = 0


class OfficerRef(BaseSchema):
    """Minimal officer reference embedded in list rows."""

    id: UUID
    full_name: str
    email: str
