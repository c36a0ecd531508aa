"""Compliance assessments router (technical stage)."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, require_unit_manager, require_unit_staff
from app.models.assessment import ComplianceAssessment, InitialAssessment
from app.models.enums import ComplianceAssessmentStatus, StaffUnit
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.routers.applications import assignment_http_error
from app.schemas.assessment import (
    ComplianceAssessmentDetail,
    ComplianceAssessmentListItem,
    ComplianceAssessmentResponse,
    ComplianceAssessmentUpdate,
    ComplianceAssignRequest,
    InitialAssessmentResponse,
)
from app.schemas.permit import ApplicationSummary, BulkAssignRequest, BulkAssignResult
from app.schemas.profile import OfficerRef
from app.services.assessments import update_compliance_assessment
from app.services.assignment import (
    AssignmentError,
    assign_compliance_officer,
    bulk_assign,
    load_compliance_assessment_for_assignment,
    resolve_officer,
)
from app.services.audit import publish_committed
from app.services.filters import apply_search
from app.services.workflow import WorkflowError

router = APIRouter(prefix="/compliance-assessments", tags=["compliance-assessments"])

compliance_staff = require_unit_staff(StaffUnit.COMPLIANCE)
compliance_manager = require_unit_manager(StaffUnit.COMPLIANCE)


def _row_fields(
    assessment: ComplianceAssessment,
    application: PermitApplication,
    assessor: Optional[Profile],
) -> dict:
    return {
        **ComplianceAssessmentResponse.model_validate(assessment).model_dump(exclude={"status_badge"}),
        "application": ApplicationSummary.model_validate(application),
        "assessor": (
            OfficerRef(id=assessor.id, full_name=assessor.full_name, email=assessor.email)
            if assessor else None
        ),
    }


def _base_query():
    return (
        select(ComplianceAssessment, PermitApplication, Profile)
        .join(PermitApplication, ComplianceAssessment.permit_application_id == PermitApplication.id)
        .outerjoin(Profile, ComplianceAssessment.assessed_by == Profile.id)
    )


@router.get("", response_model=List[ComplianceAssessmentListItem])
async def list_compliance_assessments(
    search: Optional[str] = None,
    status_filter: Optional[ComplianceAssessmentStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_staff),
):
    """List compliance assessments with their applications, newest first.

    Officers only see assessments assigned to them.
    """
    query = _base_query()
    if not current_user.is_manager_of(StaffUnit.COMPLIANCE):
        query = query.where(ComplianceAssessment.assessed_by == current_user.id)
    if status_filter:
        query = query.where(ComplianceAssessment.assessment_status == status_filter)
    query = apply_search(query, search)
    query = query.order_by(ComplianceAssessment.created_at.desc())

    result = await db.execute(query)
    return [ComplianceAssessmentListItem(**_row_fields(*row)) for row in result.all()]


@router.post("/bulk-assign", response_model=BulkAssignResult)
async def bulk_assign_compliance_assessments(
    data: BulkAssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_manager),
):
    """Assign many compliance assessments to one officer; per-item results."""
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.COMPLIANCE)
    except AssignmentError as e:
        raise assignment_http_error(e)

    result = await bulk_assign(
        data.ids,
        load=lambda assessment_id: load_compliance_assessment_for_assignment(db, assessment_id),
        apply=lambda assessment: assign_compliance_officer(
            db, assessment, officer, current_user.profile, notes=data.assessment_notes
        ),
    )
    await db.commit()
    await publish_committed(db)
    return result


@router.get("/{assessment_id}", response_model=ComplianceAssessmentDetail)
async def get_compliance_assessment(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_staff),
):
    """Get a compliance assessment with the application's initial assessment."""
    result = await db.execute(_base_query().where(ComplianceAssessment.id == assessment_id))
    row = result.first()
    if not row or (
        row[0].assessed_by != current_user.id
        and not current_user.is_manager_of(StaffUnit.COMPLIANCE)
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Compliance assessment not found")

    initial_result = await db.execute(
        select(InitialAssessment).where(
            InitialAssessment.permit_application_id == row[0].permit_application_id
        )
    )
    initial = initial_result.scalar_one_or_none()

    return ComplianceAssessmentDetail(
        **_row_fields(*row),
        initial_assessment=InitialAssessmentResponse.model_validate(initial) if initial else None,
    )


@router.post("/{assessment_id}/assign", response_model=ComplianceAssessmentResponse)
async def assign_assessment(
    assessment_id: UUID,
    data: ComplianceAssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_manager),
):
    """Assign a compliance assessment to an officer and mark it in progress."""
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.COMPLIANCE)
        assessment = await load_compliance_assessment_for_assignment(db, assessment_id)
    except AssignmentError as e:
        raise assignment_http_error(e)

    await assign_compliance_officer(
        db, assessment, officer, current_user.profile, notes=data.assessment_notes
    )
    await db.commit()
    await publish_committed(db)
    await db.refresh(assessment)

    return ComplianceAssessmentResponse.model_validate(assessment)


@router.patch("/{assessment_id}", response_model=ComplianceAssessmentResponse)
async def update_assessment(
    assessment_id: UUID,
    data: ComplianceAssessmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_staff),
):
    """Save technical review results (assigned officer or compliance manager)."""
    assessment = await db.get(ComplianceAssessment, assessment_id)
    if not assessment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Compliance assessment not found")
    if (
        assessment.assessed_by != current_user.id
        and not current_user.is_manager_of(StaffUnit.COMPLIANCE)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not assigned to this assessment")

    application = await db.get(PermitApplication, assessment.permit_application_id)
    try:
        await update_compliance_assessment(
            db,
            assessment,
            application,
            current_user.profile,
            data.model_dump(exclude_unset=True),
        )
    except WorkflowError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await db.commit()
    await publish_committed(db)
    await db.refresh(assessment)

    return ComplianceAssessmentResponse.model_validate(assessment)
