"""Initial assessments router (registry stage)."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import CurrentUser, require_unit_manager, require_unit_staff
from app.models.assessment import InitialAssessment
from app.models.enums import InitialAssessmentStatus, StaffUnit
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.routers.applications import assignment_http_error
from app.schemas.assessment import (
    InitialAssessmentListItem,
    InitialAssessmentResponse,
    InitialAssessmentUpdate,
)
from app.schemas.permit import (
    ApplicationSummary,
    AssignOfficerRequest,
    BulkAssignRequest,
    BulkAssignResult,
)
from app.schemas.profile import OfficerRef
from app.services.assessments import update_initial_assessment
from app.services.assignment import (
    AssignmentError,
    AssignmentNotFound,
    assign_registry_officer,
    bulk_assign,
    load_application_for_assignment,
    resolve_officer,
)
from app.services.audit import publish_committed
from app.services.filters import apply_search

router = APIRouter(prefix="/initial-assessments", tags=["initial-assessments"])

settings = get_settings()

registry_staff = require_unit_staff(StaffUnit.REGISTRY)
registry_manager = require_unit_manager(StaffUnit.REGISTRY)


def _list_item(
    assessment: InitialAssessment,
    application: PermitApplication,
    assessor: Optional[Profile],
) -> InitialAssessmentListItem:
    return InitialAssessmentListItem(
        **InitialAssessmentResponse.model_validate(assessment).model_dump(),
        application=ApplicationSummary.model_validate(application),
        assessor=(
            OfficerRef(id=assessor.id, full_name=assessor.full_name, email=assessor.email)
            if assessor else None
        ),
    )


async def _load_for_assessment(db: AsyncSession, assessment_id: UUID) -> PermitApplication:
    assessment = await db.get(InitialAssessment, assessment_id)
    if not assessment:
        raise AssignmentNotFound("Initial assessment not found")
    return await load_application_for_assignment(db, assessment.permit_application_id)


@router.get("", response_model=List[InitialAssessmentListItem])
async def list_initial_assessments(
    search: Optional[str] = None,
    status_filter: Optional[InitialAssessmentStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_staff),
):
    """List initial assessments, newest first.

    Officers only see assessments assigned to them.
    """
    query = (
        select(InitialAssessment, PermitApplication, Profile)
        .join(PermitApplication, InitialAssessment.permit_application_id == PermitApplication.id)
        .outerjoin(Profile, InitialAssessment.assessed_by == Profile.id)
    )
    if not current_user.is_manager_of(StaffUnit.REGISTRY):
        query = query.where(InitialAssessment.assessed_by == current_user.id)
    if status_filter:
        query = query.where(InitialAssessment.assessment_status == status_filter)
    query = apply_search(query, search)

    query = query.order_by(InitialAssessment.created_at.desc()).limit(
        settings.initial_assessment_list_limit
    )

    result = await db.execute(query)
    return [_list_item(a, app, p) for a, app, p in result.all()]


@router.post("/bulk-assign", response_model=BulkAssignResult)
async def bulk_assign_initial_assessments(
    data: BulkAssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_manager),
):
    """Assign many initial assessments to one registry officer."""
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.REGISTRY)
    except AssignmentError as e:
        raise assignment_http_error(e)

    result = await bulk_assign(
        data.ids,
        load=lambda assessment_id: _load_for_assessment(db, assessment_id),
        apply=lambda application: assign_registry_officer(
            db, application, officer, current_user.profile
        ),
    )
    await db.commit()
    await publish_committed(db)
    return result


@router.get("/{assessment_id}", response_model=InitialAssessmentListItem)
async def get_initial_assessment(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_staff),
):
    """Get an initial assessment with its application."""
    result = await db.execute(
        select(InitialAssessment, PermitApplication, Profile)
        .join(PermitApplication, InitialAssessment.permit_application_id == PermitApplication.id)
        .outerjoin(Profile, InitialAssessment.assessed_by == Profile.id)
        .where(InitialAssessment.id == assessment_id)
    )
    row = result.first()
    if not row or (
        row[0].assessed_by != current_user.id
        and not current_user.is_manager_of(StaffUnit.REGISTRY)
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Initial assessment not found")

    return _list_item(*row)


@router.patch("/{assessment_id}", response_model=InitialAssessmentResponse)
async def update_assessment(
    assessment_id: UUID,
    data: InitialAssessmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_staff),
):
    """Amend notes, feedback or outcome text."""
    assessment = await db.get(InitialAssessment, assessment_id)
    if not assessment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Initial assessment not found")
    if (
        assessment.assessed_by != current_user.id
        and not current_user.is_manager_of(StaffUnit.REGISTRY)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not assigned to this assessment")

    application = await db.get(PermitApplication, assessment.permit_application_id)
    await update_initial_assessment(
        db,
        assessment,
        application,
        current_user.profile,
        data.model_dump(exclude_unset=True),
    )
    await db.commit()
    await publish_committed(db)
    await db.refresh(assessment)

    return InitialAssessmentResponse.model_validate(assessment)


@router.post("/{assessment_id}/assign", response_model=InitialAssessmentResponse)
async def assign_initial_assessment(
    assessment_id: UUID,
    data: AssignOfficerRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_manager),
):
    """Assign an initial assessment to a registry officer."""
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.REGISTRY)
        application = await _load_for_assessment(db, assessment_id)
    except AssignmentError as e:
        raise assignment_http_error(e)

    await assign_registry_officer(db, application, officer, current_user.profile)
    await db.commit()
    await publish_committed(db)

    assessment = await db.get(InitialAssessment, assessment_id)
    await db.refresh(assessment)
    return InitialAssessmentResponse.model_validate(assessment)
