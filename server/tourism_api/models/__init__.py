"""Models module exporting all database models."""

from .booking import Booking, BookingStatus
from .cart import Cart, CartItem
from .equipment import DEFAULT_EQUIPMENT_IMAGE, CampingEquipment, EquipmentCategory
from .idempotency import IdempotencyRecord
from .inventory import InventoryAction, InventoryAuditLog
from .maintenance import (
    DamageReport,
    DamageSeverity,
    DamageStatus,
    DamageType,
    MaintenancePriority,
    MaintenanceRecord,
    MaintenanceStatus,
    MaintenanceType,
)
from .notification import Notification, NotificationType
from .payment import Payment, PaymentItem, PaymentStatus, PaymentType
from .stock_order import StockOrder, StockOrderItem, StockOrderStatus
from .supplier import ReorderConfig, Supplier
from .tour import Tour
from .user import DEFAULT_ADMIN_DEPARTMENT, DEFAULT_ADMIN_PERMISSIONS, User, UserRole

__all__ = [
    # Accounts
    "User",
    "UserRole",
    "DEFAULT_ADMIN_DEPARTMENT",
    "DEFAULT_ADMIN_PERMISSIONS",

    # Tours and bookings
    "Tour",
    "Booking",
    "BookingStatus",

    # Equipment and cart
    "CampingEquipment",
    "EquipmentCategory",
    "DEFAULT_EQUIPMENT_IMAGE",
    "Cart",
    "CartItem",

    # Payments
    "Payment",
    "PaymentItem",
    "PaymentStatus",
    "PaymentType",

    # Inventory and notifications
    "InventoryAuditLog",
    "InventoryAction",
    "Notification",
    "NotificationType",

    # Suppliers and restocking
    "Supplier",
    "ReorderConfig",
    "StockOrder",
    "StockOrderItem",
    "StockOrderStatus",

    # Equipment care
    "MaintenanceRecord",
    "MaintenanceType",
    "MaintenanceStatus",
    "MaintenancePriority",
    "DamageReport",
    "DamageType",
    "DamageSeverity",
    "DamageStatus",

    # Idempotency
    "IdempotencyRecord",
]
