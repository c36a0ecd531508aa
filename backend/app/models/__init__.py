"""SQLAlchemy models for EcoPermit Administration.

Covers the permit approval pipeline:
- Profiles and Entities
- PermitApplication with its InitialAssessment and ComplianceAssessment
- Unit tasks (registry, compliance, revenue)
- Registry audit trail and notifications
- Prescribed activities and fee structures
"""

from app.models.profile import Profile
from app.models.entity import Entity
from app.models.fee import PrescribedActivity, FeeStructure
from app.models.permit import PermitApplication
from app.models.assessment import InitialAssessment, ComplianceAssessment
from app.models.task import RegistryTask, ComplianceTask, RevenueTask, TASK_MODELS
from app.models.audit import RegistryAuditEntry
from app.models.notification import Notification, ManagerNotification

__all__ = [
    "Profile",
    "Entity",
    "PrescribedActivity",
    "FeeStructure",
    "PermitApplication",
    "InitialAssessment",
    "ComplianceAssessment",
    "RegistryTask",
    "ComplianceTask",
    "RevenueTask",
    "TASK_MODELS",
    "RegistryAuditEntry",
    "Notification",
    "ManagerNotification",
]
