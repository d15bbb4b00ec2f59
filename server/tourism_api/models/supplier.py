"""Supplier and reorder configuration model definitions."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .equipment import CampingEquipment


class Supplier(Base):
    """Vendor that restocks equipment."""

    __tablename__ = "suppliers"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Contact information
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Inactive suppliers are skipped by automatic reorders
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Timestamps
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
        CheckConstraint("length(name) > 0", name="ck_supplier_name_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<Supplier(id={self.id}, name='{self.name}', active={self.active})>"


class ReorderConfig(Base):
    """Restocking rule for one equipment item."""

    __tablename__ = "reorder_configs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    equipment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("camping_equipment.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )
    preferred_supplier_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    reorder_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    auto_reorder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("threshold >= 1", name="ck_reorder_config_threshold_positive"),
        CheckConstraint("reorder_quantity >= 1", name="ck_reorder_config_quantity_positive"),
    )

    # Relationships
    equipment: Mapped["CampingEquipment"] = relationship("CampingEquipment")
    preferred_supplier: Mapped["Supplier | None"] = relationship("Supplier")

    def __repr__(self) -> str:
        return (
            f"<ReorderConfig(equipment_id={self.equipment_id}, threshold={self.threshold}, "
            f"auto={self.auto_reorder_enabled})>"
        )
