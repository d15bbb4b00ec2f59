"""Replay of payment submissions retried with the same Idempotency-Key."""

import hashlib
import json
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..core.exceptions import IdempotencyMismatchError
from ..models.idempotency import IdempotencyRecord

logger = logging.getLogger(__name__)

REPLAY_HEADER = "Idempotent-Replayed"

Operation = Callable[[], Awaitable[tuple[int, dict[str, Any]]]]


def request_fingerprint(request_body: dict[str, Any]) -> str:
    """SHA-256 of the body serialized with sorted keys."""
    normalized = json.dumps(request_body, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


class IdempotencyService:
    """Stores the first response per (scope, key) and replays it on retries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, scope: str, key: str) -> Optional[IdempotencyRecord]:
        result = await self.db.execute(
            select(IdempotencyRecord).where(
                IdempotencyRecord.scope == scope,
                IdempotencyRecord.idempotency_key == key,
            )
        )
        return result.scalar_one_or_none()

    async def lookup(self, scope: str, key: str, request_body: dict[str, Any]) -> Optional[tuple[int, dict[str, Any]]]:
        """
        Return the stored ``(status_code, body)`` for a live key, or None.

        An expired record is removed so the key can be used again.

        Raises:
            IdempotencyMismatchError: If the key was first used with a different body
        """
        record = await self._find(scope, key)
        if record is None:
            return None

        if record.expires_at <= utcnow():
            await self.db.delete(record)
            await self.db.commit()
            return None

        if record.request_hash != request_fingerprint(request_body):
            logger.warning("Idempotency key reused with a different body", extra={"scope": scope, "key": key})
            raise IdempotencyMismatchError(key)

        logger.info("Replaying stored response", extra={"scope": scope, "key": key, "status_code": record.status_code})
        return record.status_code, record.response_body

    async def remember(
        self,
        scope: str,
        key: str,
        request_body: dict[str, Any],
        status_code: int,
        response_body: dict[str, Any],
    ) -> None:
        self.db.add(IdempotencyRecord(
            scope=scope,
            idempotency_key=key,
            request_hash=request_fingerprint(request_body),
            status_code=status_code,
            response_body=response_body,
            expires_at=utcnow() + timedelta(hours=settings.idempotency_ttl_hours),
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent retry stored the same key first
            await self.db.rollback()
            logger.info("Idempotency record already stored", extra={"scope": scope, "key": key})

    async def run_once(
        self,
        scope: str,
        key: Optional[str],
        request_body: dict[str, Any],
        operation: Operation,
    ) -> tuple[int, dict[str, Any], bool]:
        """
        Run ``operation`` at most once per key.

        Returns:
            ``(status_code, body, replayed)``; without a key the operation
            always runs and nothing is stored
        """
        if key is None:
            status_code, body = await operation()
            return status_code, body, False

        stored = await self.lookup(scope, key, request_body)
        if stored is not None:
            return stored[0], stored[1], True

        status_code, body = await operation()
        await self.remember(scope, key, request_body, status_code, body)
        return status_code, body, False

    async def cleanup_expired_records(self) -> int:
        """Delete expired records and return how many were removed."""
        result = await self.db.execute(delete(IdempotencyRecord).where(IdempotencyRecord.expires_at <= utcnow()))
        await self.db.commit()

        deleted = result.rowcount or 0
        if deleted:
            logger.info("Expired idempotency records removed", extra={"deleted_count": deleted})
        return deleted
