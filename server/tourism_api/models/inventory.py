"""Inventory audit log model definition."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow


class InventoryAction(str, Enum):
    """Kind of stock change recorded in the audit log."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STOCK_IN = "stock-in"
    STOCK_OUT = "stock-out"
    MAINTENANCE = "maintenance"
    DAMAGE = "damage"


class InventoryAuditLog(Base):
    """Audit trail entry for a change to an equipment item's stock."""

    __tablename__ = "inventory_audit_logs"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Plain reference so the trail outlives deleted equipment
    equipment_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    equipment_name: Mapped[str] = mapped_column(String(255), nullable=False)

    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity_before: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)

    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    performed_by: Mapped[str] = mapped_column(String(255), nullable=False)  # username of the actor

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True
    )

    __table_args__ = (
        CheckConstraint("quantity_before >= 0", name="ck_inventory_audit_before_non_negative"),
        CheckConstraint("quantity_after >= 0", name="ck_inventory_audit_after_non_negative"),
        CheckConstraint("length(reason) > 0", name="ck_inventory_audit_reason_not_empty"),
        CheckConstraint(
            "action_type IN ('create', 'update', 'delete', 'stock-in', 'stock-out', 'maintenance', 'damage')",
            name="ck_inventory_audit_action_valid"
        ),
    )

    @property
    def delta(self) -> int:
        return self.quantity_after - self.quantity_before

    def __repr__(self) -> str:
        return (
            f"<InventoryAuditLog(id={self.id}, equipment_id={self.equipment_id}, "
            f"action='{self.action_type}', {self.quantity_before}->{self.quantity_after})>"
        )
