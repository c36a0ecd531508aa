"""Dashboard router - KPI counts for the registry and compliance units."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, require_unit_staff
from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.enums import (
    ApplicationStatus,
    ComplianceAssessmentStatus,
    InitialAssessmentStatus,
    StaffUnit,
    TaskStatus,
)
from app.models.permit import PermitApplication
from app.models.task import TASK_MODELS
from app.schemas.dashboard import RegistryDashboardStats, ComplianceDashboardStats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


async def _count_by(db: AsyncSession, column) -> dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {getattr(value, "value", value): count for value, count in result.all()}


async def _application_counts(db: AsyncSession) -> dict[str, int]:
    counts = await _count_by(db, PermitApplication.status)
    # Drafts are still with the applicant
    counts.pop(ApplicationStatus.DRAFT.value, None)
    return {s.value: counts.get(s.value, 0) for s in ApplicationStatus if s != ApplicationStatus.DRAFT}


async def _task_counts(db: AsyncSession, unit: StaffUnit) -> dict[str, Any]:
    model = TASK_MODELS[unit]
    now = datetime.utcnow()
    result = await db.execute(
        select(
            func.sum(case((model.status != TaskStatus.COMPLETED, 1), else_=0)).label("open"),
            func.sum(
                case(
                    ((model.status != TaskStatus.COMPLETED) & (model.due_date < now), 1),
                    else_=0,
                )
            ).label("overdue"),
        )
    )
    row = result.one()
    return {"tasks_open": row.open or 0, "tasks_overdue": row.overdue or 0}


@router.get("/registry", response_model=RegistryDashboardStats)
async def get_registry_stats(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_unit_staff(StaffUnit.REGISTRY)),
):
    """Registry KPIs: applications and initial assessments by status, open work."""
    assessment_counts = await _count_by(db, InitialAssessment.assessment_status)

    unassigned = await db.execute(
        select(func.count(PermitApplication.id)).where(
            PermitApplication.status == ApplicationStatus.SUBMITTED,
            PermitApplication.assigned_officer_id.is_(None),
        )
    )

    return RegistryDashboardStats(
        applications_by_status=await _application_counts(db),
        initial_assessments_by_status={
            s.value: assessment_counts.get(s.value, 0) for s in InitialAssessmentStatus
        },
        unassigned_submissions=unassigned.scalar_one(),
        **await _task_counts(db, StaffUnit.REGISTRY),
    )


@router.get("/compliance", response_model=ComplianceDashboardStats)
async def get_compliance_stats(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_unit_staff(StaffUnit.COMPLIANCE)),
):
    """Compliance KPIs: assessments by status, average score, open work."""
    assessment_counts = await _count_by(db, ComplianceAssessment.assessment_status)

    score_query = await db.execute(
        select(
            func.avg(ComplianceAssessment.compliance_score).label("average_score"),
            func.sum(
                case((ComplianceAssessment.assessed_by.is_(None), 1), else_=0)
            ).label("unassigned"),
        )
    )
    scores = score_query.one()

    return ComplianceDashboardStats(
        applications_by_status=await _application_counts(db),
        compliance_assessments_by_status={
            s.value: assessment_counts.get(s.value, 0) for s in ComplianceAssessmentStatus
        },
        unassigned_assessments=scores.unassigned or 0,
        average_compliance_score=round(float(scores.average_score or 0), 1),
        **await _task_counts(db, StaffUnit.COMPLIANCE),
    )
