"""Camping equipment model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Float, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .cart import CartItem


class EquipmentCategory(str, Enum):
    """Camping equipment category enumeration."""
    TENTS = "Tents"
    SLEEPING_BAGS = "Sleeping Bags"
    COOKING = "Cooking"
    LIGHTING = "Lighting"
    HIKING = "Hiking"
    OTHER = "Other"


DEFAULT_EQUIPMENT_IMAGE = "/images/default-equipment.jpg"


class CampingEquipment(Base):
    """Rentable or purchasable inventory item."""

    __tablename__ = "camping_equipment"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Catalogue information
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=EquipmentCategory.OTHER.value,
        index=True
    )
    image: Mapped[str] = mapped_column(String(512), nullable=False, default=DEFAULT_EQUIPMENT_IMAGE)

    # Stock
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    low_stock_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_equipment_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_equipment_quantity_non_negative"),
        CheckConstraint(
            "category IN ('Tents', 'Sleeping Bags', 'Cooking', 'Lighting', 'Hiking', 'Other')",
            name="ck_equipment_category_valid"
        ),
    )

    # Relationships
    cart_items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        back_populates="equipment",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return (
            f"<CampingEquipment(id={self.id}, name='{self.name}', "
            f"quantity={self.quantity}, category='{self.category}')>"
        )
