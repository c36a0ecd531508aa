"""Notifications router."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user, require_staff
from app.models.notification import Notification, ManagerNotification
from app.schemas.notification import NotificationResponse, ManagerNotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _unit_filter(query, current_user: CurrentUser):
    if current_user.is_super_admin:
        return query
    return query.where(
        ManagerNotification.target_unit == current_user.staff_unit,
        or_(
            ManagerNotification.target_position.is_(None),
            ManagerNotification.target_position == current_user.staff_position,
        ),
    )


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """The caller's notifications, newest first."""
    query = select(Notification).where(Notification.user_id == current_user.id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    result = await db.execute(query.order_by(Notification.created_at.desc()))
    return [NotificationResponse.model_validate(n) for n in result.scalars().all()]


@router.get("/unit", response_model=List[ManagerNotificationResponse])
async def list_unit_notifications(
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    """Notifications addressed to the caller's unit and position."""
    query = _unit_filter(select(ManagerNotification), current_user)
    if unread_only:
        query = query.where(ManagerNotification.is_read.is_(False))

    result = await db.execute(query.order_by(ManagerNotification.created_at.desc()))
    return [ManagerNotificationResponse.model_validate(n) for n in result.scalars().all()]


@router.post("/unit/{notification_id}/read", response_model=ManagerNotificationResponse)
async def mark_unit_notification_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    """Mark a unit notification as read."""
    result = await db.execute(
        _unit_filter(select(ManagerNotification), current_user).where(
            ManagerNotification.id == notification_id
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)

    return ManagerNotificationResponse.model_validate(notification)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Mark one of the caller's notifications as read."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == current_user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)

    return NotificationResponse.model_validate(notification)
