"""Permit applications router."""

import io
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import (
    CurrentUser,
    get_current_user,
    require_unit_manager,
    require_unit_staff,
)
from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.audit import RegistryAuditEntry
from app.models.entity import Entity
from app.models.enums import ApplicationStatus, StaffUnit
from app.models.fee import PrescribedActivity
from app.models.permit import PermitApplication
from app.schemas.assessment import (
    ComplianceAssessmentResponse,
    ComplianceAssignRequest,
    InitialAssessmentRecord,
    InitialAssessmentResponse,
)
from app.schemas.audit import AuditEntryResponse
from app.schemas.permit import (
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    AssignOfficerRequest,
    BulkAssignRequest,
    BulkAssignResult,
    StatusTransitionRequest,
)
from app.services.assessments import record_initial_assessment
from app.services.assignment import (
    AssignmentError,
    AssignmentNotFound,
    assign_compliance_officer,
    assign_registry_officer,
    bulk_assign,
    load_application_for_assignment,
    load_compliance_assessment_for_assignment,
    resolve_officer,
)
from app.services.audit import publish_committed
from app.services.filters import (
    apply_application_visibility,
    apply_search,
    can_view_application,
)
from app.services.pdf_generator import get_pdf_generator
from app.services.workflow import (
    APPLICANT_EDITABLE,
    AccessDenied,
    WorkflowError,
    check_transition_access,
    decide_application,
    ensure_manual_transition,
    ensure_transition,
    submit_application,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])

registry_manager = require_unit_manager(StaffUnit.REGISTRY)
registry_staff = require_unit_staff(StaffUnit.REGISTRY)
compliance_manager = require_unit_manager(StaffUnit.COMPLIANCE)


def assignment_http_error(e: AssignmentError) -> HTTPException:
    if isinstance(e, AssignmentNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def get_visible_application(
    db: AsyncSession, application_id: UUID, current_user: CurrentUser
) -> PermitApplication:
    """Load an application the caller may see, else 404."""
    application = await db.get(PermitApplication, application_id)
    if not application or not can_view_application(current_user, application):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return application


async def _owned_entity(db: AsyncSession, entity_id: UUID, current_user: CurrentUser) -> Entity:
    entity = await db.get(Entity, entity_id)
    if not entity or (entity.user_id != current_user.id and not current_user.is_super_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entity not found")
    if entity.is_suspended:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Entity is suspended")
    return entity


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a draft application."""
    application = PermitApplication(user_id=current_user.id, **data.model_dump())

    if data.entity_id:
        entity = await _owned_entity(db, data.entity_id, current_user)
        application.entity_name = entity.name
        application.entity_type = entity.entity_type

    if data.activity_id:
        activity = await db.get(PrescribedActivity, data.activity_id)
        if not activity:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prescribed activity not found")
        if not application.activity_level:
            application.activity_level = f"Level {activity.level}"

    db.add(application)
    await db.commit()
    await db.refresh(application)

    return ApplicationResponse.model_validate(application)


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    search: Optional[str] = None,
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List applications visible to the caller, newest first."""
    query = apply_application_visibility(select(PermitApplication), current_user)
    query = apply_search(query, search)
    if status_filter:
        query = query.where(PermitApplication.status == status_filter)

    query = query.order_by(PermitApplication.created_at.desc()).offset(offset).limit(limit)

    result = await db.execute(query)
    return [ApplicationResponse.model_validate(a) for a in result.scalars().all()]


@router.post("/bulk-assign", response_model=BulkAssignResult)
async def bulk_assign_applications(
    data: BulkAssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_manager),
):
    """Assign many applications to one registry officer.

    Each application is validated independently; the ones that fail are
    reported and the rest are assigned.
    """
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.REGISTRY)
    except AssignmentError as e:
        raise assignment_http_error(e)

    result = await bulk_assign(
        data.ids,
        load=lambda application_id: load_application_for_assignment(db, application_id),
        apply=lambda application: assign_registry_officer(
            db, application, officer, current_user.profile
        ),
    )
    await db.commit()
    await publish_committed(db)
    return result


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get application details."""
    application = await get_visible_application(db, application_id, current_user)
    return ApplicationResponse.model_validate(application)


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: UUID,
    data: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Edit an application (applicant only, while draft or awaiting clarification)."""
    application = await get_visible_application(db, application_id, current_user)
    if application.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the applicant can edit this application")
    if application.status not in APPLICANT_EDITABLE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Application cannot be edited while {application.status.value}",
        )

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("entity_id"):
        entity = await _owned_entity(db, update_data["entity_id"], current_user)
        application.entity_name = entity.name
        application.entity_type = entity.entity_type

    for field, value in update_data.items():
        setattr(application, field, value)

    await db.commit()
    await db.refresh(application)

    return ApplicationResponse.model_validate(application)


@router.post("/{application_id}/submit", response_model=ApplicationResponse)
async def submit(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Submit an application (or resubmit after clarification)."""
    application = await get_visible_application(db, application_id, current_user)
    try:
        ensure_transition(application.status, ApplicationStatus.SUBMITTED)
        check_transition_access(current_user, application, ApplicationStatus.SUBMITTED)
        await submit_application(db, application, current_user.profile)
    except AccessDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except WorkflowError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await db.commit()
    await publish_committed(db)
    await db.refresh(application)

    return ApplicationResponse.model_validate(application)


@router.post("/{application_id}/transition", response_model=ApplicationResponse)
async def transition(
    application_id: UUID,
    data: StatusTransitionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Explicit status change: submit, cancel or the final decision.

    Review-stage moves belong to assignment and assessment recording and
    are refused with 409.
    """
    application = await get_visible_application(db, application_id, current_user)
    try:
        ensure_manual_transition(application.status, data.to_status)
        check_transition_access(current_user, application, data.to_status)
        if data.to_status == ApplicationStatus.SUBMITTED:
            await submit_application(db, application, current_user.profile)
        else:
            await decide_application(
                db,
                application,
                data.to_status,
                current_user.profile,
                notes=data.notes,
                permit_number=data.permit_number,
            )
    except AccessDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except WorkflowError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await db.commit()
    await publish_committed(db)
    await db.refresh(application)

    return ApplicationResponse.model_validate(application)


@router.post("/{application_id}/assign-officer", response_model=ApplicationResponse)
async def assign_officer(
    application_id: UUID,
    data: AssignOfficerRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_manager),
):
    """Assign the initial assessment to a registry officer."""
    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.REGISTRY)
        application = await load_application_for_assignment(db, application_id)
    except AssignmentError as e:
        raise assignment_http_error(e)

    await assign_registry_officer(db, application, officer, current_user.profile)
    await db.commit()
    await publish_committed(db)
    await db.refresh(application)

    return ApplicationResponse.model_validate(application)


@router.post(
    "/{application_id}/assign-compliance-officer",
    response_model=ComplianceAssessmentResponse,
)
async def assign_application_compliance_officer(
    application_id: UUID,
    data: ComplianceAssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(compliance_manager),
):
    """Assign the application's technical assessment to a compliance officer."""
    result = await db.execute(
        select(ComplianceAssessment).where(
            ComplianceAssessment.permit_application_id == application_id
        )
    )
    compliance = result.scalar_one_or_none()
    if not compliance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Compliance assessment not found")

    try:
        officer = await resolve_officer(db, data.officer_id, StaffUnit.COMPLIANCE)
        await load_compliance_assessment_for_assignment(db, compliance.id)
    except AssignmentError as e:
        raise assignment_http_error(e)

    await assign_compliance_officer(
        db, compliance, officer, current_user.profile, notes=data.assessment_notes
    )
    await db.commit()
    await publish_committed(db)
    await db.refresh(compliance)

    return ComplianceAssessmentResponse.model_validate(compliance)


@router.post(
    "/{application_id}/initial-assessment",
    response_model=InitialAssessmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_assessment(
    application_id: UUID,
    data: InitialAssessmentRecord,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(registry_staff),
):
    """Record the initial assessment outcome (assigned officer or registry manager)."""
    application = await get_visible_application(db, application_id, current_user)
    if (
        application.assigned_officer_id != current_user.id
        and not current_user.is_manager_of(StaffUnit.REGISTRY)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the assigned officer or a registry manager can assess this application",
        )

    try:
        assessment = await record_initial_assessment(
            db,
            application,
            current_user.profile,
            assessment_status=data.assessment_status,
            assessment_outcome=data.assessment_outcome,
            assessment_notes=data.assessment_notes,
            feedback_provided=data.feedback_provided,
            permit_activity_type=data.permit_activity_type,
        )
    except WorkflowError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await db.commit()
    await publish_committed(db)
    await db.refresh(assessment)

    return InitialAssessmentResponse.model_validate(assessment)


@router.get("/{application_id}/report.pdf")
async def download_assessment_summary(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Assessment summary PDF (application, both assessments, audit trail)."""
    application = await get_visible_application(db, application_id, current_user)

    initial = (await db.execute(
        select(InitialAssessment).where(InitialAssessment.permit_application_id == application.id)
    )).scalar_one_or_none()
    compliance = (await db.execute(
        select(ComplianceAssessment).where(ComplianceAssessment.permit_application_id == application.id)
    )).scalar_one_or_none()
    entries = (await db.execute(
        select(RegistryAuditEntry)
        .where(RegistryAuditEntry.permit_application_id == application.id)
        .order_by(RegistryAuditEntry.created_at)
    )).scalars().all()

    report = {
        "application": ApplicationResponse.model_validate(application).model_dump(),
        "initial_assessment": (
            InitialAssessmentResponse.model_validate(initial).model_dump() if initial else None
        ),
        "compliance_assessment": (
            ComplianceAssessmentResponse.model_validate(compliance).model_dump() if compliance else None
        ),
        "audit_trail": [AuditEntryResponse.model_validate(e).model_dump() for e in entries],
    }

    pdf_bytes = get_pdf_generator().generate_assessment_summary(report)
    filename = f"assessment_summary_{application.application_number or application.id}.pdf"
    headers = {"Content-Disposition": f'inline; filename="{filename}"'}
    return StreamingResponse(io.BytesIO(pdf_bytes), media_type="application/pdf", headers=headers)
