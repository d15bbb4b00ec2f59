"""Stock order and stock order item model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .supplier import Supplier


class StockOrderStatus(str, Enum):
    """Lifecycle of a purchase order placed with a supplier."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class StockOrder(Base):
    """Purchase order for restocking equipment from a supplier."""

    __tablename__ = "stock_orders"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    supplier_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StockOrderStatus.PENDING.value,
        index=True
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_auto_order: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    expected_delivery_date: Mapped[datetime | None] = mapped_column(nullable=True)
    delivery_date: Mapped[datetime | None] = mapped_column(nullable=True)

    # Shipment tracking
    tracking_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    carrier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tracking_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)  # username, or "system" for auto orders

    # Timestamps
    order_date: Mapped[datetime] = mapped_column(
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
        CheckConstraint("total_amount >= 0", name="ck_stock_order_total_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="ck_stock_order_status_valid"
        ),
    )

    # Relationships
    supplier: Mapped["Supplier"] = relationship("Supplier")
    items: Mapped[list["StockOrderItem"]] = relationship(
        "StockOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def calculate_total(self) -> float:
        return round(sum(item.quantity * item.unit_price for item in self.items), 2)

    def __repr__(self) -> str:
        return f"<StockOrder(id={self.id}, status='{self.status}', total={self.total_amount})>"


class StockOrderItem(Base):
    """One equipment line of a stock order."""

    __tablename__ = "stock_order_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    order_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("stock_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Plain reference so the order survives equipment deletion
    equipment_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    equipment_name: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_stock_order_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_stock_order_item_price_non_negative"),
    )

    order: Mapped["StockOrder"] = relationship("StockOrder", back_populates="items")

    def __repr__(self) -> str:
        return f"<StockOrderItem(id={self.id}, equipment_id={self.equipment_id}, quantity={self.quantity})>"
