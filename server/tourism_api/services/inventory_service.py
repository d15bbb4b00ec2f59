"""Inventory service for stock adjustments, audit trail and reporting."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..core.exceptions import ValidationError
from ..models.equipment import CampingEquipment, EquipmentCategory
from ..models.inventory import InventoryAction, InventoryAuditLog
from ..schemas.inventory import BatchUpdateRequest, BatchUpdateResult

logger = logging.getLogger(__name__)


def stock_threshold(equipment: CampingEquipment) -> int:
    """Low-stock threshold for an item, falling back to the configured default."""
    if equipment.low_stock_threshold is not None:
        return equipment.low_stock_threshold
    return settings.low_stock_threshold


def is_out_of_stock(equipment: CampingEquipment) -> bool:
    return equipment.quantity <= 0


def is_low_stock(equipment: CampingEquipment) -> bool:
    """In stock but below the item's threshold."""
    return 0 < equipment.quantity < stock_threshold(equipment)


class InventoryService:
    """Service for inventory operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record_audit(
        self,
        equipment: CampingEquipment,
        action_type: InventoryAction,
        quantity_before: int,
        quantity_after: int,
        reason: str,
        performed_by: str,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> InventoryAuditLog:
        """
        Add an audit log entry to the session without committing.

        The caller commits it together with the stock change it describes.
        """
        entry = InventoryAuditLog(
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            action_type=action_type.value,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            reason=reason,
            reference=reference,
            notes=notes,
            performed_by=performed_by,
        )
        self.db.add(entry)
        return entry

    async def batch_update(self, request: BatchUpdateRequest, performed_by: str) -> list[BatchUpdateResult]:
        """
        Apply several stock changes in one transaction.

        Rows that reference unknown equipment or would drive stock below
        zero are reported as failures; the remaining rows are applied.

        Args:
            request: Batch of stock changes with a shared reason
            performed_by: Username of the admin making the change

        Returns:
            Per-row results in request order

        Raises:
            ValidationError: If every row failed; nothing is committed then
        """
        results: list[BatchUpdateResult] = []
        applied = 0

        for change in request.items:
            stmt = (
                select(CampingEquipment)
                .where(CampingEquipment.id == change.equipment_id)
                .with_for_update()
            )
            equipment = (await self.db.execute(stmt)).scalar_one_or_none()

            if equipment is None:
                results.append(BatchUpdateResult(
                    equipment_id=change.equipment_id,
                    success=False,
                    message="Equipment not found",
                ))
                continue

            if change.quantity_change == 0:
                results.append(BatchUpdateResult(
                    equipment_id=change.equipment_id,
                    success=False,
                    quantity_before=equipment.quantity,
                    quantity_after=equipment.quantity,
                    message="Quantity change must not be zero",
                ))
                continue

            before = equipment.quantity
            after = before + change.quantity_change
            if after < 0:
                results.append(BatchUpdateResult(
                    equipment_id=change.equipment_id,
                    success=False,
                    quantity_before=before,
                    quantity_after=before,
                    message=f"Cannot remove {abs(change.quantity_change)} units; only {before} in stock",
                ))
                continue

            equipment.quantity = after
            action = InventoryAction.STOCK_IN if change.quantity_change > 0 else InventoryAction.STOCK_OUT
            self.record_audit(
                equipment,
                action,
                before,
                after,
                reason=request.reason,
                performed_by=performed_by,
                reference=change.reference,
                notes=change.notes,
            )
            applied += 1
            results.append(BatchUpdateResult(
                equipment_id=change.equipment_id,
                success=True,
                quantity_before=before,
                quantity_after=after,
            ))

        if applied == 0:
            await self.db.rollback()
            logger.warning(
                "Batch stock update rejected - no rows applied",
                extra={"rows": len(request.items), "performed_by": performed_by}
            )
            raise ValidationError(
                detail="No stock changes could be applied",
                errors={str(r.equipment_id): r.message for r in results},
            )

        await self.db.commit()

        logger.info(
            "Batch stock update completed",
            extra={
                "rows": len(request.items),
                "applied": applied,
                "failed": len(request.items) - applied,
                "performed_by": performed_by,
            }
        )
        return results

    async def list_audit_logs(self, equipment_id: Optional[UUID] = None, limit: int = 100) -> list[InventoryAuditLog]:
        stmt = select(InventoryAuditLog).order_by(InventoryAuditLog.created_at.desc()).limit(limit)
        if equipment_id is not None:
            stmt = stmt.where(InventoryAuditLog.equipment_id == equipment_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def scan_stock_levels(self) -> tuple[list[CampingEquipment], list[CampingEquipment]]:
        """
        Find equipment that needs restocking.

        Returns:
            Tuple of (low_stock, out_of_stock) equipment lists
        """
        result = await self.db.execute(select(CampingEquipment).order_by(CampingEquipment.name))
        equipment = result.scalars().all()
        low = [item for item in equipment if is_low_stock(item)]
        out = [item for item in equipment if is_out_of_stock(item)]
        return low, out

    async def get_stats(self) -> dict:
        """Build the inventory report: totals, per-category summary and restock lists."""
        result = await self.db.execute(select(CampingEquipment))
        equipment = result.scalars().all()

        categories = {
            category.value: {"item_count": 0, "total_quantity": 0, "total_value": 0.0}
            for category in EquipmentCategory
        }
        total_quantity = 0
        total_value = 0.0
        for item in equipment:
            summary = categories.setdefault(
                item.category, {"item_count": 0, "total_quantity": 0, "total_value": 0.0}
            )
            value = item.price * item.quantity
            summary["item_count"] += 1
            summary["total_quantity"] += item.quantity
            summary["total_value"] = round(summary["total_value"] + value, 2)
            total_quantity += item.quantity
            total_value += value

        def _row(item: CampingEquipment) -> dict:
            return {
                "id": item.id,
                "name": item.name,
                "category": item.category,
                "quantity": item.quantity,
                "threshold": stock_threshold(item),
            }

        return {
            "total_items": len(equipment),
            "total_quantity": total_quantity,
            "total_value": round(total_value, 2),
            "categories": categories,
            "low_stock_items": [_row(item) for item in equipment if is_low_stock(item)],
            "out_of_stock_items": [_row(item) for item in equipment if is_out_of_stock(item)],
            "generated_at": utcnow(),
        }
