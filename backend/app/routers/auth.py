"""Auth router - current user profile."""

from fastapi import APIRouter, Depends

from app.core.security import CurrentUser, get_current_user
from app.schemas.profile import CurrentUserResponse, ProfileResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get current authenticated user info with dashboard flags."""
    unit = current_user.staff_unit
    return CurrentUserResponse(
        uid=current_user.uid,
        email_verified=current_user.claims.get("email_verified", False),
        profile=ProfileResponse.model_validate(current_user.profile),
        is_manager=unit is not None and current_user.is_manager_of(unit),
        can_decide=current_user.can_decide,
    )
