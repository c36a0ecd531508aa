"""Registry audit trail service."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import RegistryAuditEntry
from app.models.enums import AuditActionType
from app.models.permit import PermitApplication
from app.models.profile import Profile
from app.schemas.audit import AuditEntryResponse
from app.services.realtime import broadcaster

logger = logging.getLogger(__name__)

# Session.info key holding entries awaiting post-commit broadcast
PENDING_KEY = "pending_audit_entries"


def _value(v: Any) -> Optional[str]:
    if v is None:
        return None
    return getattr(v, "value", v)


class AuditTrailService:
    """Writes append-only audit entries and broadcasts them once committed."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        application: PermitApplication,
        action_type: AuditActionType,
        officer: Optional[Profile] = None,
        assessment_id: Optional[UUID] = None,
        previous_status: Any = None,
        new_status: Any = None,
        previous_outcome: Optional[str] = None,
        new_outcome: Optional[str] = None,
        assessment_notes: Optional[str] = None,
        feedback_provided: Optional[str] = None,
        changes_made: Optional[dict[str, Any]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> RegistryAuditEntry:
        """Create an audit entry in the current transaction."""
        entry = RegistryAuditEntry(
            permit_application_id=application.id,
            assessment_id=assessment_id,
            officer_id=officer.id if officer else None,
            officer_name=officer.full_name if officer else None,
            officer_email=officer.email if officer else None,
            action_type=action_type,
            previous_status=_value(previous_status),
            new_status=_value(new_status),
            previous_outcome=previous_outcome,
            new_outcome=new_outcome,
            assessment_notes=assessment_notes,
            feedback_provided=feedback_provided,
            changes_made=changes_made,
            details=details or {},
        )
        self.db.add(entry)
        await self.db.flush()

        self.db.info.setdefault(PENDING_KEY, []).append(entry)
        return entry


async def publish_committed(db: AsyncSession) -> int:
    """Broadcast audit entries written in the just-committed transaction.

    Call after ``db.commit()``. Delivery failures never affect the write.
    """
    entries: list[RegistryAuditEntry] = db.info.pop(PENDING_KEY, [])
    sent = 0
    for entry in entries:
        message = {
            "type": "audit_entry",
            "entry": AuditEntryResponse.model_validate(entry).model_dump(mode="json"),
        }
        sent += await broadcaster.publish(entry.permit_application_id, message)
    return sent
