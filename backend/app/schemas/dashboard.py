"""Dashboard KPI schemas."""

from app.schemas.base import BaseSchema


class RegistryDashboardStats(BaseSchema):
    """Registry unit KPIs."""

    applications_by_status: dict[str, int]
    initial_assessments_by_status: dict[str, int]
    unassigned_submissions: int
    tasks_overdue: int
    tasks_open: int


class ComplianceDashboardStats(BaseSchema):
    """Compliance unit KPIs."""

    applications_by_status: dict[str, int]
    compliance_assessments_by_status: dict[str, int]
    unassigned_assessments: int
    average_compliance_score: float
    tasks_overdue: int
    tasks_open: int
