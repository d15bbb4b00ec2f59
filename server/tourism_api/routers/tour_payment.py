"""Tour payment router."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user, require_admin
from ..core.exceptions import ProblemDetailsException
from ..core.observability import metrics_collector
from ..core.responses import success_response
from ..models.user import User
from ..schemas.payment import Payment, PaymentType, TourPaymentRequest
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tour-payments", tags=["tour-payments"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)
ADMIN_DEPENDENCY = Depends(require_admin)


def _bookings_response(payments) -> JSONResponse:
    return success_response(
        count=len(payments),
        bookings=[Payment.model_validate(p) for p in payments]
    )


@router.post("/submit", status_code=201)
async def submit_tour_payment(
    request: TourPaymentRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Pay for a tour; the amount must equal the tour price times the number of persons."""
    try:
        payment = await PaymentService(db).submit_tour_payment(current_user, request)
        metrics_collector.record_payment_submitted(payment.type)
        return success_response(
            201,
            message="Tour payment submitted successfully and awaiting approval",
            payment=Payment.model_validate(payment)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in tour payment submission",
            extra={
                "user_id": str(current_user.id),
                "tour_id": str(request.tour_id),
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/my-bookings")
async def get_my_tour_bookings(
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    payments = await PaymentService(db).list_payments(user_id=current_user.id, payment_type=PaymentType.TOUR)
    return _bookings_response(payments)


@router.get("/all")
async def get_all_tour_bookings(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List every tour payment (admin only)."""
    return _bookings_response(await PaymentService(db).list_payments(payment_type=PaymentType.TOUR))


@router.get("/tour/{tour_id}")
async def get_tour_bookings(
    tour_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List the payments made for one tour (admin only)."""
    payments = await PaymentService(db).list_payments(payment_type=PaymentType.TOUR, tour_id=tour_id)
    return _bookings_response(payments)
