"""Stock order service for purchase orders, deliveries and automatic reorders."""

import logging
from collections import defaultdict
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import utcnow
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.equipment import CampingEquipment
from ..models.inventory import InventoryAction
from ..models.notification import NotificationType
from ..models.stock_order import StockOrder, StockOrderItem, StockOrderStatus
from ..models.supplier import Supplier
from ..schemas.stock_order import CreateStockOrderRequest, TrackingInfo, UpdateStockOrderStatusRequest
from .inventory_service import InventoryService
from .notification_service import NotificationService
from .supplier_service import ReorderConfigService, SupplierService

logger = logging.getLogger(__name__)

AUTO_ORDER_USER = "system"

OPEN_STATUSES = (
    StockOrderStatus.PENDING.value,
    StockOrderStatus.CONFIRMED.value,
    StockOrderStatus.SHIPPED.value,
)

# Allowed status changes; delivered and cancelled are final
TRANSITIONS = {
    StockOrderStatus.PENDING.value: {
        StockOrderStatus.CONFIRMED.value,
        StockOrderStatus.SHIPPED.value,
        StockOrderStatus.DELIVERED.value,
        StockOrderStatus.CANCELLED.value,
    },
    StockOrderStatus.CONFIRMED.value: {
        StockOrderStatus.SHIPPED.value,
        StockOrderStatus.DELIVERED.value,
        StockOrderStatus.CANCELLED.value,
    },
    StockOrderStatus.SHIPPED.value: {StockOrderStatus.DELIVERED.value},
    StockOrderStatus.DELIVERED.value: set(),
    StockOrderStatus.CANCELLED.value: set(),
}

CANCELLABLE_STATUSES = {StockOrderStatus.PENDING.value, StockOrderStatus.CONFIRMED.value}


class StockOrderService:
    """Service for stock order operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.inventory_service = InventoryService(db)
        self.notification_service = NotificationService(db)

    def _base_query(self):
        return (
            select(StockOrder)
            .options(selectinload(StockOrder.items), selectinload(StockOrder.supplier))
            .order_by(StockOrder.order_date.desc())
            .execution_options(populate_existing=True)
        )

    async def get_order_by_id(self, order_id: UUID) -> Optional[StockOrder]:
        result = await self.db.execute(self._base_query().where(StockOrder.id == order_id))
        return result.scalar_one_or_none()

    async def get_order_by_id_or_raise(self, order_id: UUID) -> StockOrder:
        """
        Get stock order by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self.get_order_by_id(order_id)
        if order is None:
            raise NotFoundError(resource_type="stock order", resource_id=str(order_id))
        return order

    async def list_orders(
        self,
        status: Optional[StockOrderStatus] = None,
        supplier_id: Optional[UUID] = None,
    ) -> list[StockOrder]:
        stmt = self._base_query()
        if status is not None:
            stmt = stmt.where(StockOrder.status == status.value)
        if supplier_id is not None:
            stmt = stmt.where(StockOrder.supplier_id == supplier_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def _apply_tracking(order: StockOrder, tracking: Optional[TrackingInfo]) -> None:
        if tracking is None:
            return
        for field, value in tracking.model_dump(exclude_none=True).items():
            setattr(order, field, value)

    async def create_order(self, request: CreateStockOrderRequest, created_by: str) -> StockOrder:
        """
        Place an order with a supplier.

        Lines without a unit price are priced at the equipment's current
        price; the order total is the sum of quantity times unit price.

        Raises:
            NotFoundError: If the supplier or any equipment does not exist
            ValidationError: If the supplier is inactive
        """
        supplier = await SupplierService(self.db).get_supplier_by_id_or_raise(request.supplier_id)
        if not supplier.active:
            raise ValidationError(detail="Cannot order from an inactive supplier")

        items = []
        for line in request.items:
            equipment = await self.db.get(CampingEquipment, line.equipment_id)
            if equipment is None:
                raise NotFoundError(
                    resource_type="equipment",
                    resource_id=str(line.equipment_id),
                    detail=f"Equipment with ID {line.equipment_id} not found",
                )
            items.append(StockOrderItem(
                equipment_id=equipment.id,
                equipment_name=equipment.name,
                quantity=line.quantity,
                unit_price=line.unit_price if line.unit_price is not None else equipment.price,
                notes=line.notes,
            ))

        order = StockOrder(
            supplier_id=supplier.id,
            items=items,
            expected_delivery_date=request.expected_delivery_date,
            notes=request.notes,
            created_by=created_by,
        )
        self._apply_tracking(order, request.tracking)
        order.total_amount = order.calculate_total()

        self.db.add(order)
        await self.notification_service.notify_admins(
            NotificationType.STOCK_ORDER,
            f"Order placed with {supplier.name} for {len(items)} items",
        )
        await self.db.commit()
        metrics_collector.record_stock_order_created(is_auto_order=False)

        logger.info(
            "Stock order created",
            extra={
                "order_id": str(order.id),
                "supplier_id": str(supplier.id),
                "items": len(items),
                "total_amount": order.total_amount,
                "created_by": created_by,
            }
        )
        return await self.get_order_by_id_or_raise(order.id)

    async def update_status(
        self,
        order_id: UUID,
        request: UpdateStockOrderStatusRequest,
        performed_by: str,
    ) -> StockOrder:
        """
        Move an order to a new status.

        Delivering an order adds every line to stock with an audit entry.

        Raises:
            NotFoundError: If the order does not exist
            InvalidStateError: If the order cannot move to the requested status
        """
        if request.status == StockOrderStatus.CANCELLED:
            return await self.cancel_order(order_id, reason=None, performed_by=performed_by)

        order = await self.get_order_by_id_or_raise(order_id)
        new_status = request.status.value
        if new_status != order.status and new_status not in TRANSITIONS[order.status]:
            raise InvalidStateError(
                resource_type="stock order",
                current_status=order.status,
                detail=f"Cannot change a {order.status} order to {new_status}",
            )

        previous_status = order.status
        order.status = new_status
        self._apply_tracking(order, request.tracking)

        if new_status == StockOrderStatus.DELIVERED.value and previous_status != new_status:
            order.delivery_date = request.delivery_date or utcnow()
            await self._receive(order, performed_by)
            await self.notification_service.notify_admins(
                NotificationType.STOCK_ORDER,
                f"Stock order {order.id} delivered; inventory updated",
            )

        await self.db.commit()

        logger.info(
            "Stock order status updated",
            extra={
                "order_id": str(order_id),
                "previous_status": previous_status,
                "status": new_status,
                "performed_by": performed_by,
            }
        )
        return await self.get_order_by_id_or_raise(order_id)

    async def _receive(self, order: StockOrder, performed_by: str) -> None:
        for item in order.items:
            stmt = (
                select(CampingEquipment)
                .where(CampingEquipment.id == item.equipment_id)
                .with_for_update()
            )
            equipment = (await self.db.execute(stmt)).scalar_one_or_none()
            if equipment is None:
                logger.warning(
                    "Delivered equipment no longer exists",
                    extra={"order_id": str(order.id), "equipment_id": str(item.equipment_id)}
                )
                continue

            before = equipment.quantity
            equipment.quantity = before + item.quantity
            self.inventory_service.record_audit(
                equipment,
                InventoryAction.STOCK_IN,
                before,
                equipment.quantity,
                reason="Stock order delivered",
                performed_by=performed_by,
                reference=str(order.id),
            )

    async def cancel_order(self, order_id: UUID, reason: Optional[str], performed_by: str) -> StockOrder:
        """
        Cancel a pending or confirmed order, appending the reason to its notes.

        Raises:
            NotFoundError: If the order does not exist
            InvalidStateError: If the order has shipped or is already closed
        """
        order = await self.get_order_by_id_or_raise(order_id)
        if order.status not in CANCELLABLE_STATUSES:
            raise InvalidStateError(
                resource_type="stock order",
                current_status=order.status,
                detail=f"Cannot cancel an order with status '{order.status}'",
            )

        note = f"Cancellation reason: {reason or 'Not specified'}"
        order.notes = f"{order.notes}\n\n{note}" if order.notes else note
        order.status = StockOrderStatus.CANCELLED.value
        await self.notification_service.notify_admins(
            NotificationType.STOCK_ORDER,
            f"Stock order {order.id} cancelled: {reason or 'Not specified'}",
        )
        await self.db.commit()

        logger.info(
            "Stock order cancelled",
            extra={"order_id": str(order_id), "reason": reason, "performed_by": performed_by}
        )
        return await self.get_order_by_id_or_raise(order_id)

    async def create_auto_orders(self, equipment: list[CampingEquipment]) -> list[StockOrder]:
        """
        Place one order per preferred supplier for items that need restocking.

        Only items whose reorder configuration enables automatic reorders
        with an active preferred supplier are ordered. Items already on an
        open order are skipped so repeated scans do not order twice.

        Args:
            equipment: Low and out of stock items from a stock scan

        Returns:
            Created orders
        """
        configs = await ReorderConfigService(self.db).configs_by_equipment([item.id for item in equipment])
        candidates = [
            (item, configs[item.id]) for item in equipment
            if item.id in configs
            and configs[item.id].auto_reorder_enabled
            and configs[item.id].preferred_supplier is not None
            and configs[item.id].preferred_supplier.active
        ]
        if not candidates:
            return []

        on_order = set((await self.db.execute(
            select(StockOrderItem.equipment_id)
            .join(StockOrder, StockOrder.id == StockOrderItem.order_id)
            .where(
                StockOrder.status.in_(OPEN_STATUSES),
                StockOrderItem.equipment_id.in_([item.id for item, _ in candidates]),
            )
        )).scalars().all())

        by_supplier: dict[UUID, list[StockOrderItem]] = defaultdict(list)
        suppliers: dict[UUID, Supplier] = {}
        for item, config in candidates:
            if item.id in on_order:
                continue
            suppliers[config.preferred_supplier_id] = config.preferred_supplier
            by_supplier[config.preferred_supplier_id].append(StockOrderItem(
                equipment_id=item.id,
                equipment_name=item.name,
                quantity=config.reorder_quantity,
                unit_price=item.price,
            ))

        orders = []
        for supplier_id, items in by_supplier.items():
            order = StockOrder(
                supplier_id=supplier_id,
                items=items,
                is_auto_order=True,
                notes="Automatic reorder for low stock",
                created_by=AUTO_ORDER_USER,
            )
            order.total_amount = order.calculate_total()
            self.db.add(order)
            orders.append(order)
            await self.notification_service.notify_admins(
                NotificationType.STOCK_ORDER,
                f"Automatic order placed with {suppliers[supplier_id].name} for {len(items)} items",
            )

        if not orders:
            return []

        await self.db.commit()
        for _ in orders:
            metrics_collector.record_stock_order_created(is_auto_order=True)

        logger.info(
            "Automatic reorders placed",
            extra={
                "orders": len(orders),
                "items": sum(len(items) for items in by_supplier.values()),
                "skipped_on_order": len(on_order),
            }
        )
        return orders
