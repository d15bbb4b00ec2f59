"""Background worker for purging expired idempotency records."""

from ..core.database import async_session_factory
from ..services.idempotency_service import IdempotencyService
from .base import BaseWorker


class IdempotencyCleanupWorker(BaseWorker):
    def __init__(self, interval_seconds: int = 3600):
        super().__init__(name="IdempotencyCleanup", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            return await IdempotencyService(db).cleanup_expired_records()
