"""Staff directory queries."""

from typing import Any

from sqlalchemy import func, select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.enums import (
    ComplianceAssessmentStatus,
    InitialAssessmentStatus,
    StaffPosition,
    StaffUnit,
    TaskStatus,
)
from app.models.profile import Profile
from app.models.task import TASK_MODELS


async def list_unit_staff(db: AsyncSession, unit: StaffUnit) -> list[Profile]:
    """Active officers and managers of a unit ordered by first name."""
    result = await db.execute(
        select(Profile)
        .where(
            Profile.staff_unit == unit,
            Profile.is_active.is_(True),
            Profile.staff_position.in_([StaffPosition.OFFICER, StaffPosition.MANAGER]),
        )
        .order_by(Profile.first_name, Profile.email)
    )
    return list(result.scalars().all())


async def count_active_assignments(db: AsyncSession, unit: StaffUnit) -> dict[Any, int]:
    """Open assessments plus open tasks per assignee within a unit."""
    counts: dict[Any, int] = {}

    def add(rows):
        for assignee, n in rows:
            if assignee is not None:
                counts[assignee] = counts.get(assignee, 0) + n

    if unit == StaffUnit.REGISTRY:
        rows = await db.execute(
            select(InitialAssessment.assessed_by, func.count())
            .where(InitialAssessment.assessment_status == InitialAssessmentStatus.PENDING)
            .group_by(InitialAssessment.assessed_by)
        )
        add(rows.all())
    elif unit == StaffUnit.COMPLIANCE:
        rows = await db.execute(
            select(ComplianceAssessment.assessed_by, func.count())
            .where(
                or_(
                    ComplianceAssessment.assessment_status == ComplianceAssessmentStatus.PENDING,
                    ComplianceAssessment.assessment_status == ComplianceAssessmentStatus.IN_PROGRESS,
                )
            )
            .group_by(ComplianceAssessment.assessed_by)
        )
        add(rows.all())

    task_model = TASK_MODELS.get(unit)
    if task_model is not None:
        rows = await db.execute(
            select(task_model.assigned_to, func.count())
            .where(task_model.status != TaskStatus.COMPLETED)
            .group_by(task_model.assigned_to)
        )
        add(rows.all())

    return counts
