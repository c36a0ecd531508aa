"""Display labels and badge variants for workflow statuses."""

from enum import Enum
from typing import Union

COMPLIANCE_STATUS_BADGES: dict[str, dict[str, str]] = {
    "pending": {"label": "Pending Assignment", "variant": "info"},
    "in_progress": {"label": "In Progress", "variant": "warning"},
    "passed": {"label": "Passed", "variant": "success"},
    "failed": {"label": "Failed", "variant": "destructive"},
    "requires_clarification": {"label": "Requires Clarification", "variant": "outline"},
}


def status_badge(status: Union[str, Enum, None]) -> dict[str, str]:
    """Badge for an assessment status; unknown values render as-is."""
    value = status.value if isinstance(status, Enum) else (status or "")
    badge = COMPLIANCE_STATUS_BADGES.get(value)
    if badge is None:
        return {"label": value, "variant": "secondary"}
    return dict(badge)


def status_label(status: Union[str, Enum, None]) -> str:
    """Human label for a status value, e.g. under_initial_review -> Under Initial Review."""
    value = status.value if isinstance(status, Enum) else (status or "")
    return value.replace("_", " ").title()
