"""Booking-related Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.booking import BookingStatus
from .tour import TourSummary
from .user import UserSummary


class CreateBookingRequest(BaseModel):
    """Request schema for booking a tour."""

    tour_id: UUID = Field(..., description="Tour to book")
    travel_date: datetime = Field(..., description="Requested travel date")


class UpdateBookingStatusRequest(BaseModel):
    """Request schema for an admin changing a booking's status."""

    status: BookingStatus = Field(..., description="New booking status")


class Booking(BaseModel):
    """Booking response schema."""

    id: UUID = Field(..., description="Unique booking ID")
    user_id: UUID = Field(..., description="Booking owner")
    tour_id: UUID = Field(..., description="Booked tour")
    travel_date: datetime = Field(..., description="Travel date (ISO 8601)")
    status: BookingStatus = Field(..., description="Booking status")
    created_at: datetime = Field(..., description="Booking creation time (ISO 8601)")
    user: Optional[UserSummary] = None
    tour: Optional[TourSummary] = None

    class Config:
        from_attributes = True
