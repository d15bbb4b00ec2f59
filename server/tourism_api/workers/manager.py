"""Lifecycle of the background workers started with the application."""

import asyncio
import logging

from ..core.config import settings
from .base import BaseWorker
from .idempotency_cleanup_worker import IdempotencyCleanupWorker
from .stock_monitor_worker import StockMonitorWorker

logger = logging.getLogger(__name__)

IDEMPOTENCY_CLEANUP_INTERVAL_SECONDS = 3600


class WorkerManager:
    """Holds the stock monitor and idempotency cleanup workers by name."""

    def __init__(self):
        self.workers: dict[str, BaseWorker] = {
            "stock_monitor": StockMonitorWorker(interval_seconds=settings.stock_check_interval_seconds),
            "idempotency_cleanup": IdempotencyCleanupWorker(interval_seconds=IDEMPOTENCY_CLEANUP_INTERVAL_SECONDS),
        }

    async def start_all(self) -> None:
        for name, worker in self.workers.items():
            try:
                await worker.start()
            except Exception as e:
                logger.error("Failed to start worker", extra={"worker": name, "error": str(e)}, exc_info=True)

    async def stop_all(self) -> None:
        results = await asyncio.gather(*(w.stop() for w in self.workers.values()), return_exceptions=True)
        for name, result in zip(self.workers, results):
            if isinstance(result, Exception):
                logger.error("Error stopping worker", extra={"worker": name, "error": str(result)})

    def status(self) -> dict[str, bool]:
        """Map worker name to whether its loop is running."""
        return {name: worker.is_running for name, worker in self.workers.items()}


worker_manager = WorkerManager()
