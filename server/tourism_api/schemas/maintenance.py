"""Maintenance record and damage report Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..core.database import to_naive_utc
from ..models.maintenance import (
    DamageSeverity,
    DamageStatus,
    DamageType,
    MaintenancePriority,
    MaintenanceStatus,
    MaintenanceType,
)


class CreateMaintenanceRequest(BaseModel):
    """Request schema for scheduling maintenance on an equipment item."""

    equipment_id: UUID
    maintenance_type: MaintenanceType
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    description: str = Field(..., min_length=1)
    scheduled_date: datetime
    estimated_cost: Optional[float] = Field(None, ge=0)
    performed_by: Optional[str] = Field(None, max_length=255, description="Technician or workshop")
    vendor_id: Optional[UUID] = Field(None, description="Supplier doing the work")
    notes: Optional[str] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class UpdateMaintenanceRequest(BaseModel):
    """Request schema for editing a maintenance record; omitted fields are unchanged."""

    maintenance_type: Optional[MaintenanceType] = None
    status: Optional[MaintenanceStatus] = None
    priority: Optional[MaintenancePriority] = None
    description: Optional[str] = Field(None, min_length=1)
    scheduled_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)
    performed_by: Optional[str] = Field(None, max_length=255)
    vendor_id: Optional[UUID] = None
    notes: Optional[str] = None

    @field_validator("scheduled_date", "start_date", "completion_date")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None


class MaintenanceRecord(BaseModel):
    """Maintenance record response schema."""

    id: UUID
    equipment_id: UUID
    vendor_id: Optional[UUID] = None
    maintenance_type: MaintenanceType
    status: MaintenanceStatus
    priority: MaintenancePriority
    description: str
    scheduled_date: datetime
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateDamageReportRequest(BaseModel):
    """Request schema for reporting damage to an equipment item."""

    equipment_id: UUID
    damage_type: DamageType
    severity: DamageSeverity
    description: str = Field(..., min_length=1)
    location: Optional[str] = Field(None, max_length=255, description="Where the damage was found")
    images: List[str] = Field(default_factory=list, description="Image URL paths")


class UpdateDamageReportRequest(BaseModel):
    """Request schema for an admin recording how damage was resolved."""

    status: Optional[DamageStatus] = None
    maintenance_record_id: Optional[UUID] = None
    estimated_repair_cost: Optional[float] = Field(None, ge=0)
    actual_repair_cost: Optional[float] = Field(None, ge=0)
    resolution_notes: Optional[str] = None


class DamageReport(BaseModel):
    """Damage report response schema."""

    id: UUID
    equipment_id: UUID
    maintenance_record_id: Optional[UUID] = None
    damage_type: DamageType
    severity: DamageSeverity
    status: DamageStatus
    description: str
    location: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    estimated_repair_cost: Optional[float] = None
    actual_repair_cost: Optional[float] = None
    resolution_notes: Optional[str] = None
    reported_by: str
    report_date: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
