"""Inventory-related Pydantic schemas."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class StockChange(BaseModel):
    """One row of a batch stock update."""

    equipment_id: UUID = Field(..., description="Equipment to adjust")
    quantity_change: int = Field(..., description="Signed change in units")
    reference: Optional[str] = Field(None, max_length=255, description="External reference, e.g. a delivery note")
    notes: Optional[str] = None


class BatchUpdateRequest(BaseModel):
    """Request schema for a batch stock update."""

    items: List[StockChange] = Field(..., min_length=1, description="Stock changes to apply")
    reason: str = Field(..., min_length=1, max_length=500, description="Why the stock changed")


class BatchUpdateResult(BaseModel):
    """Outcome of one batch row."""

    equipment_id: UUID
    success: bool
    quantity_before: Optional[int] = None
    quantity_after: Optional[int] = None
    message: Optional[str] = None


class AuditLog(BaseModel):
    """Inventory audit log response schema."""

    id: UUID
    equipment_id: UUID
    equipment_name: str
    action_type: str
    quantity_before: int
    quantity_after: int
    reason: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    performed_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class StockItem(BaseModel):
    """Equipment row in a stock report."""

    id: UUID
    name: str
    category: str
    quantity: int
    threshold: int


class CategorySummary(BaseModel):
    """Per-category stock totals."""

    item_count: int = 0
    total_quantity: int = 0
    total_value: float = 0.0


class InventoryStats(BaseModel):
    """Inventory report."""

    total_items: int
    total_quantity: int
    total_value: float
    categories: Dict[str, CategorySummary]
    low_stock_items: List[StockItem]
    out_of_stock_items: List[StockItem]
    generated_at: datetime
