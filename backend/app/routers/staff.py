"""Staff directory router."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user
from app.models.enums import StaffUnit
from app.schemas.profile import StaffMember
from app.services.staff import count_active_assignments, list_unit_staff

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("", response_model=List[StaffMember])
async def list_staff(
    unit: StaffUnit = Query(...),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Active officers and managers of a unit with their open workload."""
    if not current_user.is_staff_of(unit):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{unit.value.capitalize()} staff access required",
        )

    staff = await list_unit_staff(db, unit)
    workload = await count_active_assignments(db, unit)

    return [
        StaffMember(
            id=p.id,
            email=p.email,
            first_name=p.first_name,
            last_name=p.last_name,
            full_name=p.full_name,
            staff_unit=p.staff_unit,
            staff_position=p.staff_position,
            active_assignments=workload.get(p.id, 0),
        )
        for p in staff
    ]
