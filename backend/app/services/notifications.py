"""User and unit notification service."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    InitialAssessmentStatus,
    NotificationType,
    StaffPosition,
    StaffUnit,
)
from app.models.notification import Notification, ManagerNotification
from app.models.permit import PermitApplication

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates notifications in the caller's transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify_user(
        self,
        user_id: UUID,
        title: str,
        message: str,
        notification_type: NotificationType,
        related_permit_id: Optional[UUID] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type.value,
            related_permit_id=related_permit_id,
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def notify_unit(
        self,
        unit: StaffUnit,
        notification_type: NotificationType,
        message: str,
        related_id: UUID,
        position: Optional[StaffPosition] = StaffPosition.MANAGER,
        details: Optional[dict[str, Any]] = None,
    ) -> ManagerNotification:
        notification = ManagerNotification(
            target_unit=unit,
            target_position=position,
            type=notification_type.value,
            message=message,
            related_id=related_id,
            details=details or {},
        )
        self.db.add(notification)
        await self.db.flush()
        logger.info("Notified %s unit: %s", unit.value, notification_type.value)
        return notification

    async def notify_initial_assessment_outcome(
        self,
        application: PermitApplication,
        status: InitialAssessmentStatus,
        notes: str,
        feedback: Optional[str] = None,
    ) -> Optional[Notification]:
        """Tell the applicant how their initial assessment went."""
        title, message, notification_type = initial_assessment_notice(
            application.title, status, notes, feedback
        )
        if notification_type is None:
            return None
        return await self.notify_user(
            application.user_id,
            title,
            message,
            notification_type,
            related_permit_id=application.id,
        )


def initial_assessment_notice(
    title: str,
    status: InitialAssessmentStatus,
    notes: str,
    feedback: Optional[str] = None,
) -> tuple[str, str, Optional[NotificationType]]:
    """Applicant-facing title, message and type for an initial assessment result."""
    detail = feedback or notes
    if status == InitialAssessmentStatus.PASSED:
        return (
            "Initial Assessment Completed",
            f'Your application "{title}" has passed the initial assessment '
            "and is now proceeding to technical review.",
            NotificationType.ASSESSMENT_PASSED,
        )
    if status == InitialAssessmentStatus.FAILED:
        return (
            "Initial Assessment Failed",
            f'Your application "{title}" did not pass the initial assessment. {detail}',
            NotificationType.ASSESSMENT_FAILED,
        )
    if status == InitialAssessmentStatus.REQUIRES_CLARIFICATION:
        return (
            "Clarification Required",
            f'Your application "{title}" requires additional information. {detail}',
            NotificationType.CLARIFICATION_REQUIRED,
        )
    return ("", "", None)
