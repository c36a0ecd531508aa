"""Fee calculation router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, require_staff
from app.models.enums import AuditActionType
from app.models.permit import PermitApplication
from app.schemas.fee import FeeCalculationRequest, FeeCalculationResponse
from app.services.audit import AuditTrailService, publish_committed
from app.services.fees import (
    ActivityNotFound,
    FeeStructureNotFound,
    calculate_application_fee,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fees", tags=["fees"])


@router.post("/calculate", response_model=FeeCalculationResponse)
async def calculate_fee(
    data: FeeCalculationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    """Calculate administration and technical fees for a prescribed activity.

    With permit_application_id the fee is stored on the application and an
    audit entry is written.
    """
    application = None
    if data.permit_application_id:
        application = await db.get(PermitApplication, data.permit_application_id)
        if not application:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")

    try:
        fee = await calculate_application_fee(
            db,
            data.activity_id,
            custom_processing_days=data.custom_processing_days,
            permit_type=data.permit_type,
        )
    except ActivityNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FeeStructureNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if application is not None:
        previous = application.fee_amount_cents
        application.fee_amount_cents = fee["total_fee_cents"]
        application.fee_breakdown = {
            "administration_fee_cents": fee["administration_fee_cents"],
            "technical_fee_cents": fee["technical_fee_cents"],
            "processing_days": fee["processing_days"],
            "administration_form": fee["administration_form"],
            "technical_form": fee["technical_form"],
        }
        await AuditTrailService(db).record(
            application,
            AuditActionType.FEE_CALCULATED,
            officer=current_user.profile,
            changes_made={"fee_amount_cents": {"from": previous, "to": fee["total_fee_cents"]}},
            details={
                "calculation_method": "calculate_application_fee",
                "activity_id": str(data.activity_id),
                "processing_days": fee["processing_days"],
            },
        )
        await db.commit()
        await publish_committed(db)
        logger.info("Fee %s cents stored on application %s", fee["total_fee_cents"], application.id)

    return FeeCalculationResponse(**fee, permit_application_id=data.permit_application_id)
