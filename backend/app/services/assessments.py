"""Initial and compliance assessment outcomes and their workflow effects."""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.enums import (
    ApplicationStatus,
    AuditActionType,
    ComplianceAssessmentStatus,
    InitialAssessmentStatus,
    NotificationType,
    StaffUnit,
)
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.services.audit import AuditTrailService
from app.services.notifications import NotificationService
from app.services.workflow import WorkflowError, transition_application

logger = logging.getLogger(__name__)

COMPLIANCE_OUTCOME_STATUS = {
    ComplianceAssessmentStatus.PASSED: ApplicationStatus.PENDING_DECISION,
    ComplianceAssessmentStatus.FAILED: ApplicationStatus.REJECTED,
    ComplianceAssessmentStatus.REQUIRES_CLARIFICATION: ApplicationStatus.REQUIRES_CLARIFICATION,
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return getattr(value, "value", value)


def diff_changes(obj, changes: dict[str, Any]) -> dict[str, Any]:
    """{field: {from, to}} for the fields that actually change."""
    diff = {}
    for field, value in changes.items():
        current = getattr(obj, field)
        if current != value:
            diff[field] = {"from": _jsonable(current), "to": _jsonable(value)}
    return diff


def initial_outcome_status(
    status: InitialAssessmentStatus, outcome: Optional[str]
) -> Optional[ApplicationStatus]:
    """Application status implied by an initial assessment result.

    A pass only advances the application when the outcome is the approval
    outcome; other pass outcomes keep it in initial review.
    """
    if status == InitialAssessmentStatus.PASSED:
        if outcome == get_settings().approval_outcome:
            return ApplicationStatus.UNDER_TECHNICAL_REVIEW
        return None
    if status == InitialAssessmentStatus.FAILED:
        return ApplicationStatus.REJECTED
    if status == InitialAssessmentStatus.REQUIRES_CLARIFICATION:
        return ApplicationStatus.REQUIRES_CLARIFICATION
    return None


async def record_initial_assessment(
    db: AsyncSession,
    application: PermitApplication,
    assessor: Profile,
    assessment_status: InitialAssessmentStatus,
    assessment_outcome: str,
    assessment_notes: str,
    feedback_provided: Optional[str] = None,
    permit_activity_type: Optional[str] = None,
) -> InitialAssessment:
    """Record the registry-stage decision and move the application on."""
    target = initial_outcome_status(assessment_status, assessment_outcome)
    if application.status != ApplicationStatus.UNDER_INITIAL_REVIEW:
        raise WorkflowError(
            application.status, target or ApplicationStatus.UNDER_INITIAL_REVIEW
        )

    result = await db.execute(
        select(InitialAssessment).where(
            InitialAssessment.permit_application_id == application.id
        )
    )
    assessment = result.scalar_one_or_none()
    created = assessment is None
    if created:
        assessment = InitialAssessment(permit_application_id=application.id)
        db.add(assessment)

    previous_status = assessment.assessment_status or InitialAssessmentStatus.PENDING
    previous_outcome = assessment.assessment_outcome
    first_decision = created or previous_status == InitialAssessmentStatus.PENDING

    assessment.assessment_status = assessment_status
    assessment.assessment_outcome = assessment_outcome
    assessment.assessment_notes = assessment_notes
    assessment.feedback_provided = feedback_provided
    assessment.permit_activity_type = permit_activity_type
    assessment.assessment_date = datetime.utcnow()
    if assessment.assessed_by is None:
        assessment.assessed_by = assessor.id
    await db.flush()

    await AuditTrailService(db).record(
        application,
        AuditActionType.ASSESSMENT_CREATED if first_decision else AuditActionType.ASSESSMENT_UPDATED,
        officer=assessor,
        assessment_id=assessment.id,
        previous_status=previous_status,
        new_status=assessment_status,
        previous_outcome=previous_outcome,
        new_outcome=assessment_outcome,
        assessment_notes=assessment_notes,
        feedback_provided=feedback_provided,
        details={"stage": "initial"},
    )

    notifications = NotificationService(db)
    if target is not None:
        await transition_application(
            db, application, target, officer=assessor, assessment_id=assessment.id
        )

    if target == ApplicationStatus.UNDER_TECHNICAL_REVIEW:
        compliance = await _ensure_compliance_assessment(db, application, assessor)
        await notifications.notify_unit(
            StaffUnit.COMPLIANCE,
            NotificationType.INITIAL_ASSESSMENT_PASSED,
            f"Application {application.application_number or application.title} passed "
            "initial assessment and awaits technical assessment assignment.",
            related_id=compliance.id,
            details={"permit_application_id": str(application.id)},
        )

    await notifications.notify_initial_assessment_outcome(
        application, assessment_status, assessment_notes, feedback_provided
    )
    return assessment


async def _ensure_compliance_assessment(
    db: AsyncSession, application: PermitApplication, assigned_by: Profile
) -> ComplianceAssessment:
    result = await db.execute(
        select(ComplianceAssessment).where(
            ComplianceAssessment.permit_application_id == application.id
        )
    )
    compliance = result.scalar_one_or_none()
    if compliance is None:
        compliance = ComplianceAssessment(
            permit_application_id=application.id,
            assigned_by=assigned_by.id,
            assessment_status=ComplianceAssessmentStatus.PENDING,
        )
        db.add(compliance)
        await db.flush()
        await AuditTrailService(db).record(
            application,
            AuditActionType.ASSESSMENT_CREATED,
            officer=assigned_by,
            assessment_id=compliance.id,
            new_status=ComplianceAssessmentStatus.PENDING,
            details={"stage": "compliance"},
        )
    elif compliance.assessment_status == ComplianceAssessmentStatus.REQUIRES_CLARIFICATION:
        # Back from clarification: the same officer picks it up again
        compliance.assessment_status = (
            ComplianceAssessmentStatus.IN_PROGRESS
            if compliance.assessed_by
            else ComplianceAssessmentStatus.PENDING
        )
    return compliance


async def update_initial_assessment(
    db: AsyncSession,
    assessment: InitialAssessment,
    application: PermitApplication,
    officer: Profile,
    changes: dict[str, Any],
) -> InitialAssessment:
    """Amend notes, feedback or outcome text without changing the decision."""
    diff = diff_changes(assessment, changes)
    for field, value in changes.items():
        setattr(assessment, field, value)
    await db.flush()

    if diff:
        await AuditTrailService(db).record(
            application,
            AuditActionType.ASSESSMENT_UPDATED,
            officer=officer,
            assessment_id=assessment.id,
            previous_outcome=diff.get("assessment_outcome", {}).get("from"),
            new_outcome=assessment.assessment_outcome,
            assessment_notes=assessment.assessment_notes,
            feedback_provided=assessment.feedback_provided,
            changes_made=diff,
            details={"stage": "initial"},
        )
    return assessment


async def update_compliance_assessment(
    db: AsyncSession,
    assessment: ComplianceAssessment,
    application: PermitApplication,
    officer: Profile,
    changes: dict[str, Any],
) -> ComplianceAssessment:
    """Save technical review fields; a final status moves the application."""
    new_status = changes.get("assessment_status")
    previous_status = assessment.assessment_status
    target = None
    if new_status is not None and new_status != previous_status:
        target = COMPLIANCE_OUTCOME_STATUS.get(new_status)
        if application.status != ApplicationStatus.UNDER_TECHNICAL_REVIEW:
            if target is not None:
                raise WorkflowError(application.status, target)
            if previous_status in COMPLIANCE_OUTCOME_STATUS:
                # Reopening happens by sending the decision back
                raise WorkflowError(
                    application.status,
                    application.status,
                    f"Compliance assessment is {previous_status.value} and cannot be "
                    f"reopened while the application is {application.status.value}",
                )

    diff = diff_changes(assessment, changes)
    for field, value in changes.items():
        setattr(assessment, field, value)
    if assessment.assessed_by is None:
        assessment.assessed_by = officer.id
        application.assigned_compliance_officer_id = officer.id
    await db.flush()

    if diff:
        await AuditTrailService(db).record(
            application,
            AuditActionType.ASSESSMENT_UPDATED,
            officer=officer,
            assessment_id=assessment.id,
            previous_status=previous_status,
            new_status=assessment.assessment_status,
            assessment_notes=assessment.assessment_notes,
            changes_made=diff,
            details={"stage": "compliance"},
        )

    if target is not None:
        await transition_application(
            db, application, target, officer=officer, assessment_id=assessment.id
        )
        notifications = NotificationService(db)
        if target == ApplicationStatus.PENDING_DECISION:
            await notifications.notify_unit(
                StaffUnit.DIRECTORATE,
                NotificationType.COMPLIANCE_ASSESSMENT_COMPLETED,
                f"Application {application.application_number or application.title} "
                "completed technical assessment and awaits a decision.",
                related_id=application.id,
                position=None,
                details={"compliance_score": assessment.compliance_score},
            )
        elif target == ApplicationStatus.REQUIRES_CLARIFICATION:
            await notifications.notify_user(
                application.user_id,
                "Clarification Required",
                f'Your application "{application.title}" requires additional information. '
                f"{assessment.recommendations or assessment.assessment_notes or ''}".rstrip(),
                NotificationType.CLARIFICATION_REQUIRED,
                related_permit_id=application.id,
            )
        elif target == ApplicationStatus.REJECTED:
            await notifications.notify_user(
                application.user_id,
                "Application Rejected",
                f'Your application "{application.title}" did not pass technical assessment.',
                NotificationType.APPLICATION_DECIDED,
                related_permit_id=application.id,
            )
    return assessment
