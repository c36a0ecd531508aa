"""Enumeration types for the permit administration domain model."""

from enum import Enum


class UserType(str, Enum):
    """Account type of a profile."""
    PUBLIC = "public"            # Applicant
    STAFF = "staff"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class StaffUnit(str, Enum):
    """Organizational unit controlling which dashboard a user sees."""
    REGISTRY = "registry"
    REVENUE = "revenue"
    COMPLIANCE = "compliance"
    FINANCE = "finance"
    DIRECTORATE = "directorate"
    SYSTEMS_ADMIN = "systems_admin"


class StaffPosition(str, Enum):
    """Position within a staff unit."""
    OFFICER = "officer"
    MANAGER = "manager"
    DIRECTOR = "director"
    MANAGING_DIRECTOR = "managing_director"


MANAGER_POSITIONS = (
    StaffPosition.MANAGER,
    StaffPosition.DIRECTOR,
    StaffPosition.MANAGING_DIRECTOR,
)


class ApplicationStatus(str, Enum):
    """Workflow status of a permit application."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_INITIAL_REVIEW = "under_initial_review"
    REQUIRES_CLARIFICATION = "requires_clarification"
    UNDER_TECHNICAL_REVIEW = "under_technical_review"
    PENDING_DECISION = "pending_decision"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class InitialAssessmentStatus(str, Enum):
    """Registry-stage assessment result."""
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    REQUIRES_CLARIFICATION = "requires_clarification"


class ComplianceAssessmentStatus(str, Enum):
    """Compliance-stage (technical) assessment status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    PASSED = "passed"
    FAILED = "failed"
    REQUIRES_CLARIFICATION = "requires_clarification"


class TaskStatus(str, Enum):
    """Status of a unit task."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskPriority(str, Enum):
    """Priority of a unit task."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AuditActionType(str, Enum):
    """Actions recorded in the registry audit trail."""
    STATUS_CHANGED = "status_changed"
    ASSESSMENT_CREATED = "assessment_created"
    ASSESSMENT_UPDATED = "assessment_updated"
    OFFICER_ASSIGNED = "officer_assigned"
    FEE_CALCULATED = "fee_calculated"


class NotificationType(str, Enum):
    """Type of a user or manager notification."""
    APPLICATION_SUBMITTED = "application_submitted"
    ASSESSMENT_PASSED = "assessment_passed"
    ASSESSMENT_FAILED = "assessment_failed"
    CLARIFICATION_REQUIRED = "clarification_required"
    INITIAL_ASSESSMENT_PASSED = "initial_assessment_passed"
    COMPLIANCE_ASSESSMENT_COMPLETED = "compliance_assessment_completed"
    APPLICATION_DECIDED = "application_decided"
    ASSESSMENT_REOPENED = "assessment_reopened"
    TASK_ASSIGNED = "task_assigned"


# Task types offered per unit
TASK_TYPES: dict[StaffUnit, tuple[str, ...]] = {
    StaffUnit.REGISTRY: (
        "document_review",
        "application_processing",
        "permit_issuance",
        "data_entry",
        "verification",
    ),
    StaffUnit.COMPLIANCE: (
        "site_inspection",
        "compliance_review",
        "report_assessment",
        "enforcement_action",
        "follow_up",
        "inspection",
        "intent_assessment",
        "permit_assessment",
    ),
    StaffUnit.REVENUE: (
        "invoice_processing",
        "payment_verification",
        "collection_followup",
        "reconciliation",
        "reporting",
    ),
}

TASK_UNITS = tuple(TASK_TYPES.keys())
