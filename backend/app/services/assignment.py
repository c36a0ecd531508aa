"""Officer assignment for applications and assessments.

Bulk assignment validates every item before applying any of them; items
that fail validation are reported and the rest are assigned.
"""

import logging
from typing import Awaitable, Callable, Optional, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.enums import (
    ApplicationStatus,
    AuditActionType,
    ComplianceAssessmentStatus,
    InitialAssessmentStatus,
    NotificationType,
    StaffPosition,
    StaffUnit,
    UserType,
)
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.schemas.permit import BulkAssignResult, BulkAssignFailure
from app.services.audit import AuditTrailService
from app.services.notifications import NotificationService
from app.services.workflow import transition_application

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASSIGNABLE_POSITIONS = (StaffPosition.OFFICER, StaffPosition.MANAGER)
DEFAULT_COMPLIANCE_NOTES = "Assigned for technical assessment"


class AssignmentError(Exception):
    """Item cannot be assigned; the message is shown to the caller."""


class AssignmentNotFound(AssignmentError):
    """Item or officer does not exist."""


async def resolve_officer(db: AsyncSession, officer_id: UUID, unit: StaffUnit) -> Profile:
    """Load an active officer or manager of the unit."""
    officer = await db.get(Profile, officer_id)
    if officer is None:
        raise AssignmentNotFound("Officer not found")
    if (
        not officer.is_active
        or officer.user_type == UserType.PUBLIC
        or officer.staff_unit != unit
        or officer.staff_position not in ASSIGNABLE_POSITIONS
    ):
        raise AssignmentError(f"Profile is not an active {unit.value} officer")
    return officer


# ---------------------------------------------------------------------------
# Registry stage
# ---------------------------------------------------------------------------

async def load_application_for_assignment(
    db: AsyncSession, application_id: UUID
) -> PermitApplication:
    application = await db.get(PermitApplication, application_id)
    if application is None:
        raise AssignmentNotFound("Application not found")
    if application.status not in (
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDER_INITIAL_REVIEW,
    ):
        raise AssignmentError(
            f"Application is {application.status.value} and cannot be assigned"
        )

    assessment = await _initial_assessment(db, application.id)
    if assessment is not None and assessment.assessment_status != InitialAssessmentStatus.PENDING:
        raise AssignmentError("Initial assessment already completed")
    return application


async def _initial_assessment(
    db: AsyncSession, application_id: UUID
) -> Optional[InitialAssessment]:
    result = await db.execute(
        select(InitialAssessment).where(
            InitialAssessment.permit_application_id == application_id
        )
    )
    return result.scalar_one_or_none()


async def assign_registry_officer(
    db: AsyncSession,
    application: PermitApplication,
    officer: Profile,
    assigner: Profile,
) -> PermitApplication:
    """Assign the initial assessment of an application to a registry officer."""
    previous_officer_id = application.assigned_officer_id
    application.assigned_officer_id = officer.id

    assessment = await _initial_assessment(db, application.id)
    if assessment is None:
        assessment = InitialAssessment(
            permit_application_id=application.id,
            assessment_status=InitialAssessmentStatus.PENDING,
        )
        db.add(assessment)
    assessment.assessed_by = officer.id
    await db.flush()

    await AuditTrailService(db).record(
        application,
        AuditActionType.OFFICER_ASSIGNED,
        officer=assigner,
        assessment_id=assessment.id,
        changes_made={
            "assigned_officer_id": {
                "from": str(previous_officer_id) if previous_officer_id else None,
                "to": str(officer.id),
            }
        },
        details={"officer_name": officer.full_name, "stage": "initial"},
    )

    if application.status == ApplicationStatus.SUBMITTED:
        await transition_application(
            db,
            application,
            ApplicationStatus.UNDER_INITIAL_REVIEW,
            officer=assigner,
            assessment_id=assessment.id,
        )
    return application


# ---------------------------------------------------------------------------
# Compliance stage
# ---------------------------------------------------------------------------

async def load_compliance_assessment_for_assignment(
    db: AsyncSession, assessment_id: UUID
) -> ComplianceAssessment:
    assessment = await db.get(ComplianceAssessment, assessment_id)
    if assessment is None:
        raise AssignmentNotFound("Compliance assessment not found")
    if assessment.assessment_status not in (
        ComplianceAssessmentStatus.PENDING,
        ComplianceAssessmentStatus.IN_PROGRESS,
    ):
        raise AssignmentError(
            f"Assessment is {assessment.assessment_status.value} and cannot be assigned"
        )
    return assessment


async def assign_compliance_officer(
    db: AsyncSession,
    assessment: ComplianceAssessment,
    officer: Profile,
    assigner: Profile,
    notes: Optional[str] = None,
) -> ComplianceAssessment:
    """Hand a compliance assessment to an officer and mark it in progress."""
    application = await db.get(PermitApplication, assessment.permit_application_id)
    previous_status = assessment.assessment_status

    assessment.assessed_by = officer.id
    assessment.assigned_by = assigner.id
    assessment.assessment_status = ComplianceAssessmentStatus.IN_PROGRESS
    assessment.assessment_notes = notes or DEFAULT_COMPLIANCE_NOTES
    application.assigned_compliance_officer_id = officer.id
    await db.flush()

    await AuditTrailService(db).record(
        application,
        AuditActionType.OFFICER_ASSIGNED,
        officer=assigner,
        assessment_id=assessment.id,
        previous_status=previous_status,
        new_status=assessment.assessment_status,
        assessment_notes=assessment.assessment_notes,
        details={"officer_name": officer.full_name, "stage": "compliance"},
    )
    await NotificationService(db).notify_unit(
        StaffUnit.COMPLIANCE,
        NotificationType.TASK_ASSIGNED,
        f"Technical assessment for {application.application_number or application.title} "
        f"assigned to {officer.full_name}.",
        related_id=assessment.id,
        position=StaffPosition.OFFICER,
        details={"officer_id": str(officer.id)},
    )
    return assessment


# ---------------------------------------------------------------------------
# Bulk
# ---------------------------------------------------------------------------

async def bulk_assign(
    ids: Sequence[UUID],
    load: Callable[[UUID], Awaitable[T]],
    apply: Callable[[T], Awaitable[object]],
) -> BulkAssignResult:
    """Validate every id with ``load``, then ``apply`` the ones that passed."""
    valid: list[tuple[UUID, T]] = []
    failed: list[BulkAssignFailure] = []
    seen: set[UUID] = set()

    for item_id in ids:
        if item_id in seen:
            continue
        seen.add(item_id)
        try:
            valid.append((item_id, await load(item_id)))
        except AssignmentError as e:
            failed.append(BulkAssignFailure(id=item_id, reason=str(e)))

    assigned: list[UUID] = []
    for item_id, item in valid:
        await apply(item)
        assigned.append(item_id)

    total = len(seen)
    if failed:
        logger.warning("Bulk assign: %d of %d items failed", len(failed), total)
    return BulkAssignResult(
        assigned=assigned,
        failed=failed,
        assigned_count=len(assigned),
        total=total,
        message=f"{len(assigned)} of {total} assigned",
    )
