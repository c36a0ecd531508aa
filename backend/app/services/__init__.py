"""Services for EcoPermit Administration."""

from app.services.audit import AuditTrailService, publish_committed
from app.services.notifications import NotificationService
from app.services.realtime import AuditBroadcaster, broadcaster
from app.services.workflow import WorkflowError, AccessDenied
from app.services.pdf_generator import PDFGenerator, get_pdf_generator

__all__ = [
    "AuditTrailService",
    "publish_committed",
    "NotificationService",
    "AuditBroadcaster",
    "broadcaster",
    "WorkflowError",
    "AccessDenied",
    "PDFGenerator",
    "get_pdf_generator",
]
