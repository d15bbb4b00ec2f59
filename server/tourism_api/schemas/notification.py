"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class Notification(BaseModel):
    """Notification response schema."""

    id: UUID
    type: str
    message: str
    equipment_id: Optional[UUID] = None
    quantity: Optional[int] = None
    threshold: Optional[int] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
