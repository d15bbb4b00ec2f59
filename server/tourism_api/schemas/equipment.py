"""Camping equipment Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.equipment import EquipmentCategory


class Equipment(BaseModel):
    """Camping equipment response schema."""

    id: UUID = Field(..., description="Unique equipment ID")
    name: str
    description: str
    price: float = Field(..., ge=0, description="Unit price (per day when rented)")
    quantity: int = Field(..., ge=0, description="Units in stock")
    category: EquipmentCategory
    image: str = Field(..., description="Image URL path")
    is_available: bool
    low_stock_threshold: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EquipmentSummary(BaseModel):
    """Minimal equipment reference embedded in cart lines."""

    id: UUID
    name: str
    price: float
    image: str
    quantity: int
    is_available: bool

    class Config:
        from_attributes = True
