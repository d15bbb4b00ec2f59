"""Maintenance record and damage report model definitions."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Float, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow


class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    CALIBRATION = "calibration"
    INSPECTION = "inspection"
    CLEANING = "cleaning"
    OTHER = "other"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DamageType(str, Enum):
    PHYSICAL = "physical"
    WATER = "water"
    WEAR_AND_TEAR = "wear-and-tear"
    ELECTRICAL = "electrical"
    MISSING_PARTS = "missing-parts"
    OTHER = "other"


class DamageSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    CRITICAL = "critical"


class DamageStatus(str, Enum):
    REPORTED = "reported"
    INSPECTED = "inspected"
    REPAIRABLE = "repairable"
    UNREPAIRABLE = "unrepairable"
    REPAIRED = "repaired"
    REPLACED = "replaced"
    WRITTEN_OFF = "written-off"


class MaintenanceRecord(Base):
    """Scheduled or completed service work on an equipment item."""

    __tablename__ = "maintenance_records"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    equipment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("camping_equipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    vendor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True
    )

    maintenance_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MaintenanceStatus.SCHEDULED.value,
        index=True
    )
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=MaintenancePriority.MEDIUM.value)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    scheduled_date: Mapped[datetime] = mapped_column(nullable=False, index=True)
    start_date: Mapped[datetime | None] = mapped_column(nullable=True)
    completion_date: Mapped[datetime | None] = mapped_column(nullable=True)

    estimated_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Usernames of the admins involved
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'in-progress', 'completed', 'cancelled')",
            name="ck_maintenance_status_valid"
        ),
        CheckConstraint("estimated_cost IS NULL OR estimated_cost >= 0", name="ck_maintenance_estimate_non_negative"),
        CheckConstraint("actual_cost IS NULL OR actual_cost >= 0", name="ck_maintenance_cost_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<MaintenanceRecord(id={self.id}, equipment_id={self.equipment_id}, "
            f"type='{self.maintenance_type}', status='{self.status}')>"
        )


class DamageReport(Base):
    """Damage found on an equipment item, and how it was resolved."""

    __tablename__ = "damage_reports"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    equipment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("camping_equipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    maintenance_record_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("maintenance_records.id", ondelete="SET NULL"),
        nullable=True
    )

    damage_type: Mapped[str] = mapped_column(String(20), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DamageStatus.REPORTED.value,
        index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    estimated_repair_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_repair_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    reported_by: Mapped[str] = mapped_column(String(255), nullable=False)  # username of the reporter

    report_date: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "severity IN ('minor', 'moderate', 'major', 'critical')",
            name="ck_damage_severity_valid"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<DamageReport(id={self.id}, equipment_id={self.equipment_id}, "
            f"severity='{self.severity}', status='{self.status}')>"
        )
