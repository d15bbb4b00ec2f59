"""Cart-related Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.database import to_naive_utc
from .equipment import EquipmentSummary


class AddToCartRequest(BaseModel):
    """Request schema for adding equipment to a cart."""

    user_id: UUID = Field(..., description="Cart owner; must be the caller")
    equipment_id: UUID = Field(..., description="Equipment to add")
    quantity: int = Field(1, ge=1, description="Units to add")
    price: Optional[float] = Field(None, ge=0, description="Unit price; zero or omitted uses the equipment price")
    is_rental: bool = Field(False, description="Rent instead of buy")
    start_date: Optional[datetime] = Field(None, description="Rental start")
    end_date: Optional[datetime] = Field(None, description="Rental end")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_rental_dates(self) -> "AddToCartRequest":
        if self.is_rental:
            if self.start_date is None or self.end_date is None:
                raise ValueError("Rental items require start and end dates")
            if self.end_date <= self.start_date:
                raise ValueError("Rental end date must be after the start date")
        return self


class UpdateCartItemRequest(BaseModel):
    """Request schema for changing a cart line's quantity."""

    quantity: int = Field(..., description="New quantity; must be positive")


class CartItem(BaseModel):
    """Cart line response schema."""

    id: UUID
    equipment_id: UUID
    quantity: int
    price: float
    is_rental: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    line_total: float = Field(..., description="Price of this line")
    equipment: Optional[EquipmentSummary] = None


class CartResponse(BaseModel):
    """Cart contents with computed totals."""

    success: bool = True
    cart_id: Optional[UUID] = None
    user_id: UUID
    cart_items: List[CartItem] = Field(default_factory=list)
    total_price: float = 0.0
    rental_subtotal: float = 0.0
    purchase_subtotal: float = 0.0
