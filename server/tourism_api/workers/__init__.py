"""Background workers for stock monitoring and housekeeping."""

from .idempotency_cleanup_worker import IdempotencyCleanupWorker
from .stock_monitor_worker import StockMonitorWorker

__all__ = ["IdempotencyCleanupWorker", "StockMonitorWorker"]
