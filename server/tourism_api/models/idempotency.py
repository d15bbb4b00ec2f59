"""Stored responses for payment submissions retried with an Idempotency-Key."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow


class IdempotencyRecord(Base):
    """First response produced for a (scope, key) pair, kept until it expires."""

    __tablename__ = "idempotency_records"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Scope names the operation and the calling user, e.g. ``payments/submit:<user id>``
    scope: Mapped[str] = mapped_column(String(100), nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)

    request_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    response_body: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    expires_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        CheckConstraint("length(idempotency_key) > 0", name="ck_idempotency_key_not_empty"),
        CheckConstraint("status_code BETWEEN 100 AND 599", name="ck_idempotency_status_code"),
        UniqueConstraint("scope", "idempotency_key", name="uq_idempotency_scope_key"),
    )

    def __repr__(self) -> str:
        return f"<IdempotencyRecord(scope='{self.scope}', key='{self.idempotency_key}', status={self.status_code})>"
