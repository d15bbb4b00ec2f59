"""Service layer package."""

from .booking_service import BookingService
from .cart_service import CartService
from .equipment_service import EquipmentService
from .idempotency_service import IdempotencyService
from .inventory_service import InventoryService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .tour_service import TourService
from .user_service import UserService

__all__ = [
    "BookingService",
    "CartService",
    "EquipmentService",
    "IdempotencyService",
    "InventoryService",
    "NotificationService",
    "PaymentService",
    "TourService",
    "UserService",
]
