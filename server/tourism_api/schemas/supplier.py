"""Supplier and reorder configuration Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .user import EmailAddress


class CreateSupplierRequest(BaseModel):
    """Request schema for adding a supplier."""

    name: str = Field(..., min_length=1, max_length=255, description="Supplier name")
    email: EmailAddress = Field(..., max_length=255, description="Unique contact email")
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class UpdateSupplierRequest(BaseModel):
    """Request schema for editing a supplier; omitted fields are unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailAddress] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)
    active: Optional[bool] = None
    notes: Optional[str] = None


class Supplier(BaseModel):
    """Supplier response schema."""

    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    active: bool
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupplierSummary(BaseModel):
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class SetReorderConfigRequest(BaseModel):
    """Request schema for creating or replacing an item's reorder configuration."""

    threshold: int = Field(..., ge=1, description="Stock level below which the item needs restocking")
    reorder_quantity: int = Field(..., ge=1, description="Units to order when restocking")
    preferred_supplier_id: Optional[UUID] = Field(None, description="Supplier used for automatic reorders")
    auto_reorder_enabled: bool = Field(False, description="Let the stock monitor place orders for this item")


class ReorderConfig(BaseModel):
    """Reorder configuration response schema; ``id`` is empty for unconfigured items."""

    id: Optional[UUID] = None
    equipment_id: UUID
    equipment_name: Optional[str] = None
    threshold: int
    reorder_quantity: int
    auto_reorder_enabled: bool
    preferred_supplier: Optional[SupplierSummary] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None
