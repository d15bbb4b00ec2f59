"""Payment service for submission, owner edits and admin review."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.card_validation import mask_card_number
from ..core.database import to_naive_utc
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..models.payment import Payment, PaymentItem, PaymentStatus, PaymentType
from ..models.user import User
from ..schemas.payment import SubmitPaymentRequest, TourPaymentRequest, UpdatePaymentRequest
from .tour_service import TourService

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01

EDITABLE_STATUSES = {PaymentStatus.PENDING.value, PaymentStatus.REJECTED.value}


class PaymentService:
    """Service for payment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    def _base_query(self):
        return (
            select(Payment)
            .options(selectinload(Payment.items), selectinload(Payment.user))
            .order_by(Payment.created_at.desc())
            .execution_options(populate_existing=True)
        )

    async def submit_payment(self, user: User, request: SubmitPaymentRequest) -> Payment:
        """
        Record a cart, event or general payment for admin review.

        Card details are validated by the request schema; only the masked
        card number is stored.

        Args:
            user: Paying user
            request: Payment details

        Returns:
            Created payment in ``pending`` status
        """
        payment = Payment(
            user_id=user.id,
            type=request.type.value,
            amount=request.amount,
            card_number=mask_card_number(request.card_number),
            card_holder=request.card_holder,
            expiry_date=request.expiry_date,
            status=PaymentStatus.PENDING.value,
            number_of_tickets=request.number_of_tickets,
            special_requirements=request.special_requirements,
            customer_info=request.customer_info,
        )
        if request.type == PaymentType.EVENT:
            payment.event_ref = request.event_id
        if request.type == PaymentType.CART:
            payment.items = [
                PaymentItem(equipment_id=item.equipment_id, quantity=item.quantity, price=item.price)
                for item in request.items or []
            ]

        self.db.add(payment)
        await self.db.commit()

        logger.info(
            "Payment submitted",
            extra={
                "payment_id": str(payment.id),
                "user_id": str(user.id),
                "type": payment.type,
                "amount": payment.amount,
            }
        )
        return await self.get_payment_by_id_or_raise(payment.id)

    async def submit_tour_payment(self, user: User, request: TourPaymentRequest) -> Payment:
        """
        Record a payment for a tour.

        Raises:
            NotFoundError: If the tour does not exist
            ValidationError: If the amount does not match price times persons
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(request.tour_id)

        expected_amount = round(tour.price * request.number_of_persons, 2)
        if abs(request.amount - expected_amount) > AMOUNT_TOLERANCE:
            logger.warning(
                "Tour payment amount mismatch",
                extra={
                    "tour_id": str(tour.id),
                    "expected": expected_amount,
                    "received": request.amount,
                }
            )
            raise ValidationError(
                detail=f"Invalid payment amount. Expected: {expected_amount}, Received: {request.amount}"
            )

        travel_date = to_naive_utc(request.travel_date) if request.travel_date else tour.date
        payment = Payment(
            user_id=user.id,
            type=PaymentType.TOUR.value,
            amount=request.amount,
            card_number=mask_card_number(request.card_number),
            card_holder=request.card_holder,
            expiry_date=request.expiry_date,
            status=PaymentStatus.PENDING.value,
            tour_id=tour.id,
            number_of_tickets=request.number_of_persons,
            special_requirements=request.special_requirements,
            customer_info=request.customer_info.model_dump(),
            tour_details={
                "tour_id": str(tour.id),
                "name": tour.name,
                "location": tour.location,
                "price": tour.price,
                "duration": tour.duration,
                "persons": request.number_of_persons,
                "travel_date": travel_date.isoformat(),
            },
        )
        self.db.add(payment)
        await self.db.commit()

        logger.info(
            "Tour payment submitted",
            extra={
                "payment_id": str(payment.id),
                "user_id": str(user.id),
                "tour_id": str(tour.id),
                "amount": payment.amount,
            }
        )
        return await self.get_payment_by_id_or_raise(payment.id)

    async def get_payment_by_id(self, payment_id: UUID) -> Optional[Payment]:
        result = await self.db.execute(self._base_query().where(Payment.id == payment_id))
        return result.scalar_one_or_none()

    async def get_payment_by_id_or_raise(self, payment_id: UUID) -> Payment:
        """
        Get payment by ID or raise NotFoundError.

        Raises:
            NotFoundError: If payment not found
        """
        payment = await self.get_payment_by_id(payment_id)
        if payment is None:
            logger.warning("Payment not found", extra={"payment_id": str(payment_id)})
            raise NotFoundError(resource_type="payment", resource_id=str(payment_id))
        return payment

    async def list_payments(
        self,
        user_id: Optional[UUID] = None,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        tour_id: Optional[UUID] = None,
    ) -> list[Payment]:
        stmt = self._base_query()
        if user_id is not None:
            stmt = stmt.where(Payment.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Payment.status == status.value)
        if payment_type is not None:
            stmt = stmt.where(Payment.type == payment_type.value)
        if tour_id is not None:
            stmt = stmt.where(Payment.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get_owned(self, payment_id: UUID, requester: User) -> Payment:
        payment = await self.get_payment_by_id_or_raise(payment_id)
        if payment.user_id != requester.id and not requester.is_admin:
            raise AuthorizationError(detail="Not authorized to modify this payment")
        return payment

    async def update_payment(self, payment_id: UUID, request: UpdatePaymentRequest, requester: User) -> Payment:
        """
        Edit a pending or rejected payment; a rejected payment goes back to pending.

        Raises:
            NotFoundError: If payment not found
            AuthorizationError: If the requester is neither owner nor admin
            InvalidStateError: If the payment was already approved
        """
        payment = await self._get_owned(payment_id, requester)
        if payment.status not in EDITABLE_STATUSES:
            raise InvalidStateError(
                resource_type="payment",
                current_status=payment.status,
                detail="Only pending or rejected payments can be edited",
            )

        if request.amount is not None:
            payment.amount = request.amount
        if request.card_number is not None:
            payment.card_number = mask_card_number(request.card_number)
        for field in ("card_holder", "expiry_date", "number_of_tickets", "special_requirements", "customer_info"):
            value = getattr(request, field)
            if value is not None:
                setattr(payment, field, value)

        previous_status = payment.status
        payment.status = PaymentStatus.PENDING.value
        await self.db.commit()

        logger.info(
            "Payment updated",
            extra={
                "payment_id": str(payment_id),
                "previous_status": previous_status,
                "updated_by": str(requester.id),
            }
        )
        return await self.get_payment_by_id_or_raise(payment_id)

    async def delete_payment(self, payment_id: UUID, requester: User) -> None:
        """
        Delete a payment that has not been reviewed yet.

        Raises:
            NotFoundError: If payment not found
            AuthorizationError: If the requester is neither owner nor admin
            InvalidStateError: If the payment is no longer pending
        """
        payment = await self._get_owned(payment_id, requester)
        if payment.status != PaymentStatus.PENDING.value:
            raise InvalidStateError(
                resource_type="payment",
                current_status=payment.status,
                detail="Only pending payments can be deleted",
            )

        await self.db.delete(payment)
        await self.db.commit()
        logger.info(
            "Payment deleted",
            extra={"payment_id": str(payment_id), "deleted_by": str(requester.id)}
        )

    async def review_payment(self, payment_id: UUID, decision: PaymentStatus, reviewer: User) -> Payment:
        """
        Approve or reject a pending payment.

        Args:
            payment_id: Payment to review
            decision: ``approved`` or ``rejected``
            reviewer: Admin making the decision

        Raises:
            NotFoundError: If payment not found
            InvalidStateError: If the payment was already reviewed
        """
        payment = await self.get_payment_by_id_or_raise(payment_id)
        if payment.status != PaymentStatus.PENDING.value:
            raise InvalidStateError(
                resource_type="payment",
                current_status=payment.status,
                detail=f"Payment already {payment.status}",
            )

        payment.status = decision.value
        await self.db.commit()

        logger.info(
            "Payment reviewed",
            extra={
                "payment_id": str(payment_id),
                "decision": decision.value,
                "reviewer_id": str(reviewer.id),
            }
        )
        return await self.get_payment_by_id_or_raise(payment_id)
