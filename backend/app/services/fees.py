"""Permit fee calculation (INTEGER CENTS).

Administration fee = (annual recurrent fee / 365) x processing days.
Technical fee = work plan amount.
"""

import logging
import math
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fee import PrescribedActivity, FeeStructure

logger = logging.getLogger(__name__)

# Technical form per application type
FORM_MAP: dict[str, str] = {
    "new": "Form 9",
    "compliance": "Form 5",
    "enforcement": "Form 6",
    "amalgamation": "Form 7",
    "amendment": "Form 8",
    "renewal": "Form 10",
    "transfer": "Form 11",
    "surrender": "Form 12",
}
ADMINISTRATION_FORM = "Form 2"
DEFAULT_WORK_PLAN_AMOUNT = 15500

FEE_CATEGORIES: dict[str, dict[str, Any]] = {
    "Red Category": {
        "multiplier": 1.5,
        "description": "High impact projects requiring comprehensive EIA",
    },
    "Orange Category": {
        "multiplier": 1.2,
        "description": "Medium impact projects requiring environmental clearance",
    },
    "Green Category": {
        "multiplier": 1.0,
        "description": "Low impact projects with minimal requirements",
    },
}

BASE_PROCESSING_DAYS: dict[str, int] = {
    "new": 86,
    "amendment": 30,
    "transfer": 21,
    "amalgamation": 45,
    "compliance": 14,
    "renewal": 21,
    "surrender": 14,
    "enforcement": 30,
}


class ActivityNotFound(LookupError):
    """Prescribed activity does not exist."""


class FeeStructureNotFound(LookupError):
    """No active fee structure matches the activity."""


def calculate_fees(
    annual_recurrent_fee: float,
    processing_days: int,
    application_type: str,
    work_plan_amount: float = DEFAULT_WORK_PLAN_AMOUNT,
) -> dict[str, Any]:
    """Fee breakdown with the forms that go with it."""
    administration_fee = annual_recurrent_fee / 365 * processing_days
    technical_fee = work_plan_amount
    return {
        "administration_fee": administration_fee,
        "technical_fee": technical_fee,
        "total_fee": administration_fee + technical_fee,
        "form_number": ADMINISTRATION_FORM,
        "additional_form": FORM_MAP.get(application_type, ADMINISTRATION_FORM),
    }


def get_fee_category(category: str) -> dict[str, Any]:
    """Multiplier and description for a category; unknown means Green."""
    return dict(FEE_CATEGORIES.get(category, FEE_CATEGORIES["Green Category"]))


def get_processing_days_estimate(application_type: str, category: str) -> int:
    base = BASE_PROCESSING_DAYS.get(application_type, 30)
    return math.ceil(base * get_fee_category(category)["multiplier"])


def default_processing_days(level: int, fee_category: Optional[str]) -> int:
    """Statutory processing days by activity level."""
    if level == 2:
        return 30 if fee_category == "2.1" else 60
    if level == 3:
        return 90
    return 30


def administration_fee_cents(annual_recurrent_fee_cents: int, processing_days: int) -> int:
    return round(annual_recurrent_fee_cents / 365 * processing_days)


async def calculate_application_fee(
    db: AsyncSession,
    activity_id: UUID,
    custom_processing_days: Optional[int] = None,
    permit_type: Optional[str] = None,
) -> dict[str, Any]:
    """Look up the activity's fee structure and compute its fees."""
    activity = await db.get(PrescribedActivity, activity_id)
    if activity is None:
        raise ActivityNotFound("Prescribed activity not found")

    stmt = select(FeeStructure).where(
        FeeStructure.activity_type == f"Level {activity.level}",
        FeeStructure.is_active.is_(True),
    )
    if permit_type:
        stmt = stmt.where(FeeStructure.permit_operation == permit_type)
    if activity.fee_category:
        # Prefer the structure for the activity's own category when one exists
        result = await db.execute(
            stmt.where(FeeStructure.fee_category == activity.fee_category).limit(1)
        )
        structure = result.scalar_one_or_none()
    else:
        structure = None

    if structure is None:
        result = await db.execute(stmt.order_by(FeeStructure.created_at).limit(1))
        structure = result.scalar_one_or_none()

    if structure is None:
        logger.warning("No fee structure for activity %s (level %s)", activity_id, activity.level)
        raise FeeStructureNotFound("No fee structure found for this activity")

    processing_days = custom_processing_days or default_processing_days(
        activity.level, activity.fee_category
    )
    admin_cents = administration_fee_cents(structure.annual_recurrent_fee_cents, processing_days)
    technical_cents = structure.work_plan_amount_cents

    return {
        "activity_id": activity.id,
        "activity_level": activity.level,
        "fee_category": activity.fee_category or structure.fee_category,
        "permit_operation": structure.permit_operation,
        "processing_days": processing_days,
        "annual_recurrent_fee_cents": structure.annual_recurrent_fee_cents,
        "administration_fee_cents": admin_cents,
        "technical_fee_cents": technical_cents,
        "total_fee_cents": admin_cents + technical_cents,
        "administration_form": structure.administration_form,
        "technical_form": structure.technical_form,
    }
