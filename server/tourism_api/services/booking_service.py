"""Booking service for tour reservations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import to_naive_utc
from ..core.exceptions import AuthorizationError, NotFoundError
from ..models.booking import Booking, BookingStatus
from ..models.user import User
from ..schemas.booking import CreateBookingRequest
from .tour_service import TourService

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    def _base_query(self):
        return (
            select(Booking)
            .options(selectinload(Booking.user), selectinload(Booking.tour))
            .order_by(Booking.created_at.desc())
        )

    async def create_booking(self, user: User, request: CreateBookingRequest) -> Booking:
        """
        Book a tour for a user.

        Args:
            user: Authenticated user making the booking
            request: Tour and travel date

        Returns:
            Created booking in ``PENDING`` status

        Raises:
            NotFoundError: If the tour does not exist
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(request.tour_id)

        booking = Booking(
            user_id=user.id,
            tour_id=tour.id,
            travel_date=to_naive_utc(request.travel_date),
            status=BookingStatus.PENDING.value,
        )
        self.db.add(booking)
        await self.db.commit()

        logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "user_id": str(user.id),
                "tour_id": str(tour.id),
                "travel_date": booking.travel_date.isoformat(),
            }
        )
        return await self.get_booking_by_id_or_raise(booking.id)

    async def get_booking_by_id(self, booking_id: UUID) -> Optional[Booking]:
        stmt = self._base_query().where(Booking.id == booking_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: UUID) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        Raises:
            NotFoundError: If booking not found
        """
        booking = await self.get_booking_by_id(booking_id)
        if booking is None:
            logger.warning("Booking not found", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def get_booking_for_user(self, booking_id: UUID, user: User) -> Booking:
        """
        Get a booking visible to the caller.

        Raises:
            NotFoundError: If booking not found
            AuthorizationError: If the caller is neither the owner nor an admin
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        if booking.user_id != user.id and not user.is_admin:
            raise AuthorizationError(detail="Not authorized to view this booking")
        return booking

    async def list_all_bookings(self) -> list[Booking]:
        result = await self.db.execute(self._base_query())
        return list(result.scalars().all())

    async def list_bookings_for_user(self, user_id: UUID, requester: User) -> list[Booking]:
        """
        List a user's bookings.

        Raises:
            AuthorizationError: If the requester is neither that user nor an admin
        """
        if user_id != requester.id and not requester.is_admin:
            logger.warning(
                "Booking list denied",
                extra={"user_id": str(user_id), "requester_id": str(requester.id)}
            )
            raise AuthorizationError(detail="Not authorized to view these bookings")

        result = await self.db.execute(self._base_query().where(Booking.user_id == user_id))
        return list(result.scalars().all())

    async def list_bookings_for_tour(self, tour_id: UUID) -> list[Booking]:
        result = await self.db.execute(self._base_query().where(Booking.tour_id == tour_id))
        return list(result.scalars().all())

    async def update_status(self, booking_id: UUID, status: BookingStatus) -> Booking:
        booking = await self.get_booking_by_id_or_raise(booking_id)
        previous = booking.status
        booking.status = status.value
        await self.db.commit()

        logger.info(
            "Booking status changed",
            extra={"booking_id": str(booking_id), "from": previous, "to": status.value}
        )
        return await self.get_booking_by_id_or_raise(booking_id)

    async def delete_booking(self, booking_id: UUID) -> None:
        """
        Delete a booking.

        Raises:
            NotFoundError: If booking not found
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        await self.db.delete(booking)
        await self.db.commit()
        logger.info("Booking deleted", extra={"booking_id": str(booking_id)})
