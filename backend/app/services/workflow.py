"""Permit application workflow: legal status transitions and their side effects.

    draft -> submitted -> under_initial_review -> under_technical_review
          -> pending_decision -> approved | rejected

Clarification loops back through submitted. Every transition writes an audit
entry in the same transaction as the status change.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CurrentUser
from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.enums import (
    ApplicationStatus,
    AuditActionType,
    ComplianceAssessmentStatus,
    InitialAssessmentStatus,
    NotificationType,
    StaffUnit,
)
from app.models.entity import Entity
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.services.audit import AuditTrailService
from app.services.notifications import NotificationService

logger = logging.getLogger(__name__)

S = ApplicationStatus

TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED, S.CANCELLED}),
    S.SUBMITTED: frozenset({S.UNDER_INITIAL_REVIEW, S.CANCELLED}),
    S.UNDER_INITIAL_REVIEW: frozenset(
        {S.UNDER_TECHNICAL_REVIEW, S.REQUIRES_CLARIFICATION, S.REJECTED}
    ),
    S.REQUIRES_CLARIFICATION: frozenset({S.SUBMITTED, S.CANCELLED}),
    S.UNDER_TECHNICAL_REVIEW: frozenset(
        {S.PENDING_DECISION, S.REQUIRES_CLARIFICATION, S.REJECTED}
    ),
    S.PENDING_DECISION: frozenset({S.APPROVED, S.REJECTED, S.UNDER_TECHNICAL_REVIEW}),
    S.APPROVED: frozenset(),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

# Statuses in which the applicant may still edit the application
APPLICANT_EDITABLE = frozenset({S.DRAFT, S.REQUIRES_CLARIFICATION})

# Stages whose exits are driven by assignment or by recording an assessment.
# Only cancellation leaves them through the plain transition endpoint.
ASSESSMENT_STAGES = frozenset({S.SUBMITTED, S.UNDER_INITIAL_REVIEW, S.UNDER_TECHNICAL_REVIEW})


class WorkflowError(Exception):
    """Illegal status transition."""

    def __init__(
        self,
        from_status: ApplicationStatus,
        to_status: ApplicationStatus,
        message: Optional[str] = None,
    ):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            message
            or f"Cannot move application from {from_status.value} to {to_status.value}"
        )


class AccessDenied(Exception):
    """Caller's role does not allow the requested action."""


def can_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    return to_status in TRANSITIONS.get(from_status, frozenset())


def ensure_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> None:
    if not can_transition(from_status, to_status):
        raise WorkflowError(from_status, to_status)


def ensure_manual_transition(
    from_status: ApplicationStatus, to_status: ApplicationStatus
) -> None:
    """Like ensure_transition, for moves requested directly by status.

    Leaving the review stages needs an officer assignment or an assessment
    record, so those moves are refused here.
    """
    ensure_transition(from_status, to_status)
    if from_status in ASSESSMENT_STAGES and to_status != S.CANCELLED:
        action = (
            "assigning a registry officer"
            if from_status == S.SUBMITTED
            else "recording the assessment"
        )
        raise WorkflowError(
            from_status,
            to_status,
            f"An application moves from {from_status.value} to {to_status.value} "
            f"by {action}",
        )


def check_transition_access(
    user: CurrentUser,
    application: PermitApplication,
    to_status: ApplicationStatus,
) -> None:
    """Raise AccessDenied unless the caller may drive this transition.

    Applicants submit and cancel their own applications and the final
    decision belongs to managers who can decide. Review-stage moves are
    made by the assignment and assessment services, not through here.
    """
    if user.is_super_admin:
        return

    from_status = application.status

    if from_status in (S.DRAFT, S.REQUIRES_CLARIFICATION) or (
        from_status == S.SUBMITTED and to_status == S.CANCELLED
    ):
        if application.user_id != user.id:
            raise AccessDenied("Only the applicant can submit or cancel this application")
        return

    if from_status == S.PENDING_DECISION:
        if not user.can_decide:
            raise AccessDenied("Decision privileges required")
        return

    if from_status in TERMINAL_STATUSES:
        raise AccessDenied("Application is closed")
    raise AccessDenied("Application is under review")


async def transition_application(
    db: AsyncSession,
    application: PermitApplication,
    to_status: ApplicationStatus,
    officer: Optional[Profile] = None,
    notes: Optional[str] = None,
    assessment_id: Any = None,
    details: Optional[dict[str, Any]] = None,
) -> PermitApplication:
    """Move an application to a new status, writing a status_changed entry."""
    from_status = application.status
    ensure_transition(from_status, to_status)

    application.status = to_status
    if to_status == S.APPROVED:
        application.approval_date = datetime.utcnow()

    await AuditTrailService(db).record(
        application,
        AuditActionType.STATUS_CHANGED,
        officer=officer,
        assessment_id=assessment_id,
        previous_status=from_status,
        new_status=to_status,
        assessment_notes=notes,
        details=details,
    )
    logger.info(
        "Application %s: %s -> %s", application.id, from_status.value, to_status.value
    )
    return application


def generate_application_number(now: Optional[datetime] = None) -> str:
    """Application reference such as PA-2026-3F9A1C."""
    now = now or datetime.utcnow()
    return f"PA-{now.year}-{secrets.token_hex(3).upper()}"


async def submit_application(
    db: AsyncSession,
    application: PermitApplication,
    applicant: Profile,
) -> PermitApplication:
    """Submit (or resubmit after clarification) an application.

    Assigns an application number on first submission, makes sure a pending
    initial assessment exists and notifies registry managers.
    """
    ensure_transition(application.status, S.SUBMITTED)
    resubmission = application.status == S.REQUIRES_CLARIFICATION

    if application.entity_id and not application.entity_name:
        entity = await db.get(Entity, application.entity_id)
        if entity:
            application.entity_name = entity.name
            application.entity_type = entity.entity_type

    if not application.application_number:
        application.application_number = generate_application_number()
    if not application.application_date:
        application.application_date = datetime.utcnow()

    result = await db.execute(
        select(InitialAssessment).where(
            InitialAssessment.permit_application_id == application.id
        )
    )
    assessment = result.scalar_one_or_none()
    if assessment is None:
        assessment = InitialAssessment(
            permit_application_id=application.id,
            assessment_status=InitialAssessmentStatus.PENDING,
        )
        db.add(assessment)
        await db.flush()
    elif assessment.assessment_status != InitialAssessmentStatus.PENDING:
        # Clarified applications go back through initial review
        assessment.assessment_status = InitialAssessmentStatus.PENDING

    await transition_application(
        db,
        application,
        S.SUBMITTED,
        officer=applicant,
        assessment_id=assessment.id,
        details={"resubmission": resubmission},
    )

    await NotificationService(db).notify_unit(
        StaffUnit.REGISTRY,
        NotificationType.APPLICATION_SUBMITTED,
        f'Application {application.application_number} "{application.title}" '
        f"{'was resubmitted' if resubmission else 'was submitted'} and awaits assignment.",
        related_id=application.id,
        details={"application_number": application.application_number},
    )
    return application


async def decide_application(
    db: AsyncSession,
    application: PermitApplication,
    to_status: ApplicationStatus,
    officer: Profile,
    notes: Optional[str] = None,
    permit_number: Optional[str] = None,
) -> PermitApplication:
    """Apply a status change requested through the transition endpoint."""
    await transition_application(db, application, to_status, officer=officer, notes=notes)

    if to_status == S.APPROVED and permit_number:
        application.permit_number = permit_number

    if to_status in (S.APPROVED, S.REJECTED):
        outcome = "approved" if to_status == S.APPROVED else "rejected"
        await NotificationService(db).notify_user(
            application.user_id,
            f"Application {outcome.capitalize()}",
            f'Your application "{application.title}" has been {outcome}.'
            + (f" {notes}" if notes else ""),
            NotificationType.APPLICATION_DECIDED,
            related_permit_id=application.id,
        )
    elif to_status == S.UNDER_TECHNICAL_REVIEW:
        await reopen_compliance_assessment(db, application, officer, notes)
    return application


async def reopen_compliance_assessment(
    db: AsyncSession,
    application: PermitApplication,
    officer: Profile,
    notes: Optional[str] = None,
) -> Optional[ComplianceAssessment]:
    """Put a concluded technical assessment back in progress after a send-back."""
    result = await db.execute(
        select(ComplianceAssessment).where(
            ComplianceAssessment.permit_application_id == application.id
        )
    )
    compliance = result.scalar_one_or_none()
    if compliance is None:
        return None

    previous_status = compliance.assessment_status
    compliance.assessment_status = (
        ComplianceAssessmentStatus.IN_PROGRESS
        if compliance.assessed_by
        else ComplianceAssessmentStatus.PENDING
    )
    await db.flush()

    await AuditTrailService(db).record(
        application,
        AuditActionType.ASSESSMENT_UPDATED,
        officer=officer,
        assessment_id=compliance.id,
        previous_status=previous_status,
        new_status=compliance.assessment_status,
        assessment_notes=notes,
        details={"stage": "compliance", "reopened": True},
    )
    if compliance.assessed_by:
        await NotificationService(db).notify_user(
            compliance.assessed_by,
            "Assessment Reopened",
            f'Application "{application.title}" was sent back for further technical assessment.'
            + (f" {notes}" if notes else ""),
            NotificationType.ASSESSMENT_REOPENED,
            related_permit_id=application.id,
        )
    return compliance
