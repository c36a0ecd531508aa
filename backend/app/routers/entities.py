"""Entities router."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user
from app.models.entity import Entity
from app.schemas.entity import EntityCreate, EntityResponse

router = APIRouter(prefix="/entities", tags=["entities"])


@router.post("", response_model=EntityResponse, status_code=status.HTTP_201_CREATED)
async def create_entity(
    data: EntityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Register an entity owned by the caller."""
    entity = Entity(user_id=current_user.id, **data.model_dump())
    db.add(entity)
    await db.commit()
    await db.refresh(entity)

    return EntityResponse.model_validate(entity)


@router.get("", response_model=List[EntityResponse])
async def list_entities(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Applicants see their own entities; staff see all."""
    query = select(Entity)
    if not current_user.is_staff:
        query = query.where(Entity.user_id == current_user.id)

    result = await db.execute(query.order_by(Entity.name))
    return [EntityResponse.model_validate(e) for e in result.scalars().all()]
