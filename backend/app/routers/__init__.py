"""API Routers for EcoPermit Administration."""

from app.routers.auth import router as auth_router
from app.routers.staff import router as staff_router
from app.routers.entities import router as entities_router
from app.routers.applications import router as applications_router
from app.routers.initial_assessments import router as initial_assessments_router
from app.routers.compliance_assessments import router as compliance_assessments_router
from app.routers.tasks import router as tasks_router
from app.routers.audit import router as audit_router
from app.routers.notifications import router as notifications_router
from app.routers.fees import router as fees_router
from app.routers.dashboard import router as dashboard_router

__all__ = [
    "auth_router",
    "staff_router",
    "entities_router",
    "applications_router",
    "initial_assessments_router",
    "compliance_assessments_router",
    "tasks_router",
    "audit_router",
    "notifications_router",
    "fees_router",
    "dashboard_router",
]
