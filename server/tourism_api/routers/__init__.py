"""FastAPI routers package."""

from .auth import router as auth_router
from .booking import router as booking_router
from .cart import router as cart_router
from .equipment import router as equipment_router
from .health import router as health_router
from .inventory import router as inventory_router
from .maintenance import router as maintenance_router
from .metrics import router as metrics_router
from .notification import router as notification_router
from .payment import router as payment_router
from .stock_order import router as stock_order_router
from .supplier import reorder_router
from .supplier import router as supplier_router
from .tour import router as tour_router
from .tour_payment import router as tour_payment_router

__all__ = [
    "auth_router",
    "booking_router",
    "cart_router",
    "equipment_router",
    "health_router",
    "inventory_router",
    "maintenance_router",
    "metrics_router",
    "notification_router",
    "payment_router",
    "reorder_router",
    "stock_order_router",
    "supplier_router",
    "tour_router",
    "tour_payment_router",
]
