"""Stock order Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..core.database import to_naive_utc
from ..models.stock_order import StockOrderStatus
from .supplier import SupplierSummary


class StockOrderItemIn(BaseModel):
    """Equipment line of a new stock order."""

    equipment_id: UUID
    quantity: int = Field(..., ge=1)
    unit_price: Optional[float] = Field(None, ge=0, description="Defaults to the equipment price")
    notes: Optional[str] = None


class TrackingInfo(BaseModel):
    tracking_number: Optional[str] = Field(None, max_length=255)
    carrier: Optional[str] = Field(None, max_length=255)
    tracking_url: Optional[str] = Field(None, max_length=512)


class CreateStockOrderRequest(BaseModel):
    """Request schema for placing a stock order with a supplier."""

    supplier_id: UUID = Field(..., description="Supplier to order from")
    items: List[StockOrderItemIn] = Field(..., min_length=1, description="Equipment to order")
    expected_delivery_date: Optional[datetime] = None
    tracking: Optional[TrackingInfo] = None
    notes: Optional[str] = None

    @field_validator("expected_delivery_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None


class UpdateStockOrderStatusRequest(BaseModel):
    """Request schema for moving a stock order through its lifecycle."""

    status: StockOrderStatus = Field(..., description="New order status")
    tracking: Optional[TrackingInfo] = None
    delivery_date: Optional[datetime] = Field(None, description="Defaults to now when delivered")

    @field_validator("delivery_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None


class CancelStockOrderRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class StockOrderItem(BaseModel):
    """Stock order line response schema."""

    id: UUID
    equipment_id: UUID
    equipment_name: str
    quantity: int
    unit_price: float
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class StockOrder(BaseModel):
    """Stock order response schema."""

    id: UUID
    supplier_id: UUID
    supplier: Optional[SupplierSummary] = None
    status: StockOrderStatus
    items: List[StockOrderItem] = Field(default_factory=list)
    total_amount: float
    is_auto_order: bool
    order_date: datetime
    expected_delivery_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    tracking_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    updated_at: datetime

    class Config:
        from_attributes = True
