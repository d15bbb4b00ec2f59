"""Tour-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class Tour(BaseModel):
    """Tour response schema."""

    id: UUID = Field(..., description="Unique tour ID")
    name: str = Field(..., description="Tour name")
    description: str = Field(..., description="Tour description")
    location: str = Field(..., description="Where the tour takes place")
    price: float = Field(..., ge=0, description="Price per person")
    duration: int = Field(..., ge=1, description="Duration in days")
    date: datetime = Field(..., description="Tour start date")
    image: str = Field(..., description="Image URL path")
    created_at: datetime

    class Config:
        from_attributes = True


class TourSummary(BaseModel):
    """Minimal tour reference embedded in bookings."""

    id: UUID
    name: str
    location: str
    price: float
    image: str

    class Config:
        from_attributes = True
