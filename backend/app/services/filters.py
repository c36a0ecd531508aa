"""Listing filters: free-text search and per-role visibility."""

from typing import Optional

from sqlalchemy import Select, or_

from app.core.security import CurrentUser
from app.models.enums import ApplicationStatus, StaffUnit
from app.models.permit import PermitApplication


LIKE_ESCAPE = "\\"


def like_pattern(text: str) -> str:
    """Substring pattern with LIKE wildcards in ``text`` taken literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f"%{text}%"


def apply_search(stmt: Select, search: Optional[str]) -> Select:
    """Case-insensitive substring match on title, entity name or application number."""
    if not search or not search.strip():
        return stmt
    pattern = like_pattern(search.strip())
    return stmt.where(
        or_(
            PermitApplication.title.ilike(pattern, escape=LIKE_ESCAPE),
            PermitApplication.entity_name.ilike(pattern, escape=LIKE_ESCAPE),
            PermitApplication.application_number.ilike(pattern, escape=LIKE_ESCAPE),
        )
    )


def apply_application_visibility(stmt: Select, user: CurrentUser) -> Select:
    """Restrict an application query to what the caller may see.

    Applicants see their own applications, registry and compliance officers
    only those assigned to them, and everyone else on staff every submitted
    application.
    """
    if user.is_super_admin:
        return stmt
    if not user.is_staff:
        return stmt.where(PermitApplication.user_id == user.id)

    stmt = stmt.where(PermitApplication.status != ApplicationStatus.DRAFT)

    if user.staff_unit == StaffUnit.REGISTRY and not user.is_manager_of(StaffUnit.REGISTRY):
        return stmt.where(PermitApplication.assigned_officer_id == user.id)
    if user.staff_unit == StaffUnit.COMPLIANCE and not user.is_manager_of(StaffUnit.COMPLIANCE):
        return stmt.where(PermitApplication.assigned_compliance_officer_id == user.id)
    return stmt


def can_view_application(user: CurrentUser, application: PermitApplication) -> bool:
    """Single-record counterpart of apply_application_visibility."""
    if user.is_super_admin or application.user_id == user.id:
        return True
    if not user.is_staff or application.status == ApplicationStatus.DRAFT:
        return False
    if user.staff_unit == StaffUnit.REGISTRY and not user.is_manager_of(StaffUnit.REGISTRY):
        return application.assigned_officer_id == user.id
    if user.staff_unit == StaffUnit.COMPLIANCE and not user.is_manager_of(StaffUnit.COMPLIANCE):
        return application.assigned_compliance_officer_id == user.id
    return True
