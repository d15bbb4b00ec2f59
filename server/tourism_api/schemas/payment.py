"""Payment-related Pydantic schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.card_validation import (
    CardValidationError,
    mask_card_number,
    validate_card_holder,
    validate_card_number,
    validate_cvv,
    validate_email,
    validate_expiry,
)
from ..models.payment import PaymentStatus, PaymentType
from .user import UserSummary


def _run(check, value):
    try:
        return check(value)
    except CardValidationError as e:
        raise ValueError(str(e)) from e


class CardDetails(BaseModel):
    """Card fields shared by every payment submission.

    The full card number and CVV are validated here and never stored.
    """

    card_number: str = Field(..., description="16-digit card number, spaces allowed")
    card_holder: str = Field(..., max_length=255, description="Name on the card")
    expiry_date: str = Field(..., description="Expiry in MM/YY format")
    cvv: Optional[str] = Field(None, description="3 or 4 digit security code")

    @field_validator("card_number")
    @classmethod
    def check_card_number(cls, v: str) -> str:
        return _run(validate_card_number, v)

    @field_validator("card_holder")
    @classmethod
    def check_card_holder(cls, v: str) -> str:
        return _run(validate_card_holder, v)

    @field_validator("expiry_date")
    @classmethod
    def check_expiry(cls, v: str) -> str:
        return _run(validate_expiry, v)

    @field_validator("cvv")
    @classmethod
    def check_cvv(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _run(validate_cvv, v)

    def fingerprint_body(self) -> Dict[str, Any]:
        """Request body used to match idempotent retries, without the CVV or full card number."""
        body = self.model_dump(mode="json", exclude={"cvv"})
        body["card_number"] = mask_card_number(self.card_number)
        return body


class PaymentItemIn(BaseModel):
    """Cart line paid for by a cart payment."""

    equipment_id: UUID
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class SubmitPaymentRequest(CardDetails):
    """Request schema for submitting a cart, event or general payment."""

    type: PaymentType = Field(PaymentType.GENERAL, description="What the payment is for")
    amount: float = Field(..., gt=0, description="Amount charged")
    event_id: Optional[str] = Field(None, max_length=255, description="Event reference for event payments")
    number_of_tickets: int = Field(1, ge=1, description="Tickets bought for event payments")
    special_requirements: Optional[str] = None
    items: Optional[List[PaymentItemIn]] = Field(None, description="Cart lines for cart payments")
    customer_info: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_variant(self) -> "SubmitPaymentRequest":
        if self.type == PaymentType.TOUR:
            raise ValueError("Tour payments must be submitted to /api/tour-payments/submit")
        if self.type == PaymentType.EVENT and not self.event_id:
            raise ValueError("Event ID is required for event payments")
        if self.type == PaymentType.CART and not self.items:
            raise ValueError("Cart payments require at least one item")
        return self


class UpdatePaymentRequest(BaseModel):
    """Request schema for editing a pending or rejected payment."""

    amount: Optional[float] = Field(None, gt=0)
    card_number: Optional[str] = None
    card_holder: Optional[str] = Field(None, max_length=255)
    expiry_date: Optional[str] = None
    number_of_tickets: Optional[int] = Field(None, ge=1)
    special_requirements: Optional[str] = None
    customer_info: Optional[Dict[str, Any]] = None

    @field_validator("card_number")
    @classmethod
    def check_card_number(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _run(validate_card_number, v)

    @field_validator("card_holder")
    @classmethod
    def check_card_holder(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _run(validate_card_holder, v)

    @field_validator("expiry_date")
    @classmethod
    def check_expiry(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _run(validate_expiry, v)


class CustomerInfo(BaseModel):
    """Contact details captured with a tour payment."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=32)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _run(validate_email, v)


class TourPaymentRequest(CardDetails):
    """Request schema for paying for a tour."""

    tour_id: UUID = Field(..., description="Tour being paid for")
    amount: float = Field(..., gt=0, description="Must equal tour price times persons")
    number_of_persons: int = Field(1, ge=1, le=50, description="Travellers covered")
    travel_date: Optional[datetime] = None
    customer_info: CustomerInfo
    special_requirements: Optional[str] = None


class PaymentItem(BaseModel):
    equipment_id: UUID
    quantity: int
    price: float

    class Config:
        from_attributes = True


class Payment(BaseModel):
    """Payment response schema with the card number masked."""

    id: UUID = Field(..., description="Unique payment ID")
    user_id: UUID
    type: PaymentType
    amount: float
    card_number: str = Field(..., description="Masked card number")
    card_holder: str
    expiry_date: str
    status: PaymentStatus
    event_ref: Optional[str] = None
    number_of_tickets: int
    special_requirements: Optional[str] = None
    tour_id: Optional[UUID] = None
    customer_info: Optional[Dict[str, Any]] = None
    tour_details: Optional[Dict[str, Any]] = None
    items: List[PaymentItem] = Field(default_factory=list)
    user: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
