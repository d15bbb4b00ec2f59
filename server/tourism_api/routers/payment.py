"""Payment router for submissions, owner edits and admin review."""

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user, get_idempotency_key, require_admin
from ..core.exceptions import ProblemDetailsException
from ..core.observability import metrics_collector
from ..core.responses import success_payload, success_response
from ..models.payment import Payment as PaymentModel
from ..models.user import User
from ..schemas.payment import (
    Payment,
    PaymentStatus,
    PaymentType,
    SubmitPaymentRequest,
    UpdatePaymentRequest,
)
from ..services.idempotency_service import REPLAY_HEADER, IdempotencyService, Operation
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)
ADMIN_DEPENDENCY = Depends(require_admin)
IDEMPOTENCY_KEY_DEPENDENCY = Depends(get_idempotency_key)


def _convert_payment_to_schema(payment: PaymentModel) -> Payment:
    return Payment.model_validate(payment)


def _payment_list(payments: list[PaymentModel]) -> JSONResponse:
    return success_response(
        count=len(payments),
        payments=[_convert_payment_to_schema(p) for p in payments]
    )


async def _run_idempotent(
    scope: str,
    idempotency_key: Optional[str],
    request_body: dict[str, Any],
    operation: Operation,
    db: AsyncSession
) -> JSONResponse:
    status_code, body, replayed = await IdempotencyService(db).run_once(
        scope, idempotency_key, request_body, operation
    )
    headers = {REPLAY_HEADER: "true"} if replayed else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@router.post("/submit", status_code=201)
async def submit_payment(
    request: SubmitPaymentRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY,
    idempotency_key: Optional[str] = IDEMPOTENCY_KEY_DEPENDENCY
) -> JSONResponse:
    """
    Submit a cart, event or general payment for admin approval.

    Supplying an Idempotency-Key header makes retries return the original
    response instead of creating a second payment.
    """
    payment_service = PaymentService(db)

    async def operation() -> tuple[int, dict[str, Any]]:
        payment = await payment_service.submit_payment(current_user, request)
        metrics_collector.record_payment_submitted(payment.type)
        return 201, success_payload(
            message="Payment submitted successfully and awaiting approval",
            payment=_convert_payment_to_schema(payment)
        )

    try:
        return await _run_idempotent(
            scope=f"payments/submit:{current_user.id}",
            idempotency_key=idempotency_key,
            request_body=request.fingerprint_body(),
            operation=operation,
            db=db
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in payment submission",
            extra={
                "user_id": str(current_user.id),
                "type": request.type.value,
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/user-history")
async def get_user_history(
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """List the caller's payments, newest first."""
    return _payment_list(await PaymentService(db).list_payments(user_id=current_user.id))


@router.get("/user-orders")
async def get_user_orders(
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """List the caller's payments, newest first."""
    return _payment_list(await PaymentService(db).list_payments(user_id=current_user.id))


@router.get("/pending")
async def get_pending_payments(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List payments awaiting review (admin only)."""
    return _payment_list(await PaymentService(db).list_payments(status=PaymentStatus.PENDING))


@router.get("")
async def get_all_payments(
    status: Optional[PaymentStatus] = Query(None),
    payment_type: Optional[PaymentType] = Query(None, alias="type"),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List all payments with optional status and type filters (admin only)."""
    return _payment_list(await PaymentService(db).list_payments(status=status, payment_type=payment_type))


@router.put("/approve/{payment_id}")
async def approve_payment(
    payment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    payment = await PaymentService(db).review_payment(payment_id, PaymentStatus.APPROVED, admin)
    metrics_collector.record_payment_reviewed(payment.status)
    return success_response(
        message="Payment approved successfully",
        payment=_convert_payment_to_schema(payment)
    )


@router.put("/reject/{payment_id}")
async def reject_payment(
    payment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    payment = await PaymentService(db).review_payment(payment_id, PaymentStatus.REJECTED, admin)
    metrics_collector.record_payment_reviewed(payment.status)
    return success_response(message="Payment rejected", payment=_convert_payment_to_schema(payment))


@router.get("/{payment_id}")
async def get_payment(
    payment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Get one payment with its user (admin only)."""
    payment = await PaymentService(db).get_payment_by_id_or_raise(payment_id)
    return success_response(payment=_convert_payment_to_schema(payment))


@router.put("/{payment_id}")
async def update_payment(
    payment_id: UUID,
    request: UpdatePaymentRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Edit a pending or rejected payment; edits send it back for review."""
    payment = await PaymentService(db).update_payment(payment_id, request, current_user)
    return success_response(
        message="Payment updated successfully",
        payment=_convert_payment_to_schema(payment)
    )


@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Delete a payment that is still pending."""
    await PaymentService(db).delete_payment(payment_id, current_user)
    return success_response(message="Payment deleted successfully")
