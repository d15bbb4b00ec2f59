"""Booking router for tour reservations."""

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
from ..models.booking import Booking as BookingModel
from ..models.user import User
from ..schemas.booking import Booking, CreateBookingRequest, UpdateBookingStatusRequest
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/booking", tags=["booking"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)
ADMIN_DEPENDENCY = Depends(require_admin)


def _convert_booking_to_schema(booking: BookingModel) -> Booking:
    """Convert booking model (with user and tour loaded) to schema."""
    return Booking.model_validate(booking)


def _booking_list(bookings: list[BookingModel]) -> JSONResponse:
    return success_response(
        count=len(bookings),
        bookings=[_convert_booking_to_schema(b) for b in bookings]
    )


@router.post("/bookings", status_code=201)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Book a tour for the authenticated user; new bookings start as PENDING."""
    try:
        booking = await BookingService(db).create_booking(current_user, request)
        metrics_collector.record_booking_created()
        return success_response(
            201,
            message="Booking created successfully",
            booking=_convert_booking_to_schema(booking)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "tour_id": str(request.tour_id),
                "user_id": str(current_user.id),
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/all")
async def list_all_bookings(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List every booking, newest first (admin only)."""
    return _booking_list(await BookingService(db).list_all_bookings())


@router.get("/bookings/user/{user_id}")
async def list_user_bookings(
    user_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """List a user's bookings; callers may only see their own unless they are admins."""
    return _booking_list(await BookingService(db).list_bookings_for_user(user_id, current_user))


@router.get("/bookings/tour/{tour_id}")
async def list_tour_bookings(
    tour_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    return _booking_list(await BookingService(db).list_bookings_for_tour(tour_id))


@router.get("/booking/{booking_id}")
async def get_booking(
    booking_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    booking = await BookingService(db).get_booking_for_user(booking_id, current_user)
    return success_response(booking=_convert_booking_to_schema(booking))


@router.put("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: UUID,
    request: UpdateBookingStatusRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Confirm or cancel a booking (admin only)."""
    booking = await BookingService(db).update_status(booking_id, request.status)
    return success_response(
        message=f"Booking status updated to {booking.status}",
        booking=_convert_booking_to_schema(booking)
    )


@router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete a booking (admin only)."""
    try:
        await BookingService(db).delete_booking(booking_id)

        logger.info(
            "Booking deleted",
            extra={"booking_id": str(booking_id), "admin_id": str(admin.id)}
        )
        return success_response(message="Booking deleted successfully")

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking deletion",
            extra={"booking_id": str(booking_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e
