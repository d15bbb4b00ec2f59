"""Background worker that alerts admins about low and exhausted stock."""

import logging

from ..core.database import async_session_factory
from ..core.observability import metrics_collector
from ..services.inventory_service import InventoryService
from ..services.notification_service import NotificationService
from ..services.stock_order_service import StockOrderService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class StockMonitorWorker(BaseWorker):
    """
    Periodically scans equipment stock levels.

    Each pass refreshes the stock gauges and creates notifications for
    admins who have not yet been alerted about an item. Items with
    automatic reordering enabled are ordered from their preferred supplier.
    """

    def __init__(self, interval_seconds: int = 3600):
        super().__init__(name="StockMonitor", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            try:
                low_stock, out_of_stock = await InventoryService(db).scan_stock_levels()
                metrics_collector.set_stock_alerts(len(low_stock), len(out_of_stock))

                if not low_stock and not out_of_stock:
                    return 0

                created = await NotificationService(db).notify_admins_of_stock(low_stock, out_of_stock)
                orders = await StockOrderService(db).create_auto_orders(low_stock + out_of_stock)
                logger.info(
                    "Stock levels checked",
                    extra={
                        "low_stock": len(low_stock),
                        "out_of_stock": len(out_of_stock),
                        "created_count": created,
                        "auto_orders": len(orders),
                        "worker": self.name,
                    }
                )
                return created

            except Exception:
                await db.rollback()
                raise
