"""Firebase JWT verification and role dependencies."""

import logging
from typing import Any, Optional
from uuid import UUID

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db
from app.core.permissions import is_unit_manager, is_unit_staff
from app.models.enums import UserType, StaffUnit, StaffPosition, MANAGER_POSITIONS
from app.models.profile import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()


def init_firebase() -> None:
    """Initialize the Firebase Admin SDK once per process."""
    if firebase_admin._apps:
        return
    settings = get_settings()
    options = {"projectId": settings.firebase_project_id}
    if settings.google_application_credentials:
        cred = credentials.Certificate(settings.google_application_credentials)
        firebase_admin.initialize_app(cred, options)
    else:
        firebase_admin.initialize_app(options=options)


class CurrentUser:
    """Authenticated caller with their profile."""

    def __init__(self, uid: str, profile: Profile, claims: Optional[dict[str, Any]] = None):
        self.uid = uid
        self.profile = profile
        self.claims = claims or {}

    @property
    def id(self) -> UUID:
        return self.profile.id

    @property
    def user_type(self) -> UserType:
        return self.profile.user_type

    @property
    def staff_unit(self) -> Optional[StaffUnit]:
        return self.profile.staff_unit

    @property
    def staff_position(self) -> Optional[StaffPosition]:
        return self.profile.staff_position

    @property
    def is_super_admin(self) -> bool:
        return self.profile.user_type == UserType.SUPER_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.profile.user_type != UserType.PUBLIC

    def is_manager_of(self, unit: StaffUnit) -> bool:
        return is_unit_manager(self.profile, unit)

    def is_staff_of(self, unit: StaffUnit) -> bool:
        return is_unit_staff(self.profile, unit)

    @property
    def can_decide(self) -> bool:
        """Directorate or compliance managers take the final permit decision."""
        if self.is_super_admin:
            return True
        return (
            self.profile.staff_unit in (StaffUnit.DIRECTORATE, StaffUnit.COMPLIANCE)
            and self.profile.staff_position in MANAGER_POSITIONS
        )


def decode_token(token: str) -> dict[str, Any]:
    """Verify a Firebase ID token, mapping failures to 401.

    This backend NEVER mints JWTs - it only verifies tokens issued by Firebase.
    """
    init_firebase()
    try:
        return auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (ValueError, auth.CertificateFetchError) as e:
        logger.warning("Token verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification failed",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def verify_firebase_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict[str, Any]:
    """Verify the bearer token and return its decoded claims."""
    return decode_token(credentials.credentials)


async def load_current_user(db: AsyncSession, claims: dict[str, Any]) -> CurrentUser:
    """Resolve the caller's profile from decoded token claims."""
    result = await db.execute(
        select(Profile).where(Profile.firebase_uid == claims["uid"])
    )
    profile = result.scalar_one_or_none()

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile not found",
        )
    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return CurrentUser(uid=claims["uid"], profile=profile, claims=claims)


async def get_current_user(
    claims: dict[str, Any] = Depends(verify_firebase_token),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Get the current user with their profile."""
    return await load_current_user(db, claims)


async def authenticate_token(db: AsyncSession, token: str) -> CurrentUser:
    """Authenticate a raw token (used where no Authorization header exists)."""
    return await load_current_user(db, decode_token(token))


def require_staff(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require a staff account of any unit."""
    if not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )
    return current_user


def require_unit_staff(unit: StaffUnit):
    """Dependency factory: officer or manager of the given unit."""

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not current_user.is_staff_of(unit):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{unit.value.capitalize()} staff access required",
            )
        return current_user

    return dependency


def require_unit_manager(unit: StaffUnit):
    """Dependency factory: manager (or above) of the given unit."""

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not current_user.is_manager_of(unit):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{unit.value.capitalize()} manager privileges required",
            )
        return current_user

    return dependency
