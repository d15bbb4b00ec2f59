"""Payment and payment item model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Float, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .tour import Tour
    from .user import User


class PaymentType(str, Enum):
    """What a payment is for."""
    EVENT = "event"
    CART = "cart"
    GENERAL = "general"
    TOUR = "tour"


class PaymentStatus(str, Enum):
    """Admin review status of a payment."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Payment(Base):
    """A submitted card payment awaiting admin review."""

    __tablename__ = "payments"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    type: Mapped[str] = mapped_column(String(20), nullable=False, default=PaymentType.GENERAL.value)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
        index=True
    )

    # Card details; only the masked number is ever stored
    card_number: Mapped[str] = mapped_column(String(19), nullable=False)
    card_holder: Mapped[str] = mapped_column(String(255), nullable=False)
    expiry_date: Mapped[str] = mapped_column(String(5), nullable=False)

    # Event payments
    event_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    number_of_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    special_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Tour payments
    tour_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    customer_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    tour_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
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
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        CheckConstraint("number_of_tickets >= 1", name="ck_payment_tickets_positive"),
        CheckConstraint(
            "type IN ('event', 'cart', 'general', 'tour')",
            name="ck_payment_type_valid"
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_payment_status_valid"
        ),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="payments")
    tour: Mapped["Tour | None"] = relationship("Tour")
    items: Mapped[list["PaymentItem"]] = relationship(
        "PaymentItem",
        back_populates="payment",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, type='{self.type}', amount={self.amount}, "
            f"status='{self.status}')>"
        )


class PaymentItem(Base):
    """Snapshot of a cart line paid for by a cart payment."""

    __tablename__ = "payment_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    payment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Kept as a plain reference so the record survives equipment deletion
    equipment_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_payment_item_quantity_positive"),
    )

    payment: Mapped["Payment"] = relationship("Payment", back_populates="items")

    def __repr__(self) -> str:
        return f"<PaymentItem(id={self.id}, equipment_id={self.equipment_id}, quantity={self.quantity})>"
