"""Camping equipment service for catalogue and stock operations."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.cart import CartItem
from ..models.equipment import DEFAULT_EQUIPMENT_IMAGE, CampingEquipment, EquipmentCategory
from ..models.inventory import InventoryAction
from ..models.maintenance import DamageReport, MaintenanceRecord
from ..models.supplier import ReorderConfig
from .inventory_service import InventoryService

logger = logging.getLogger(__name__)

VALID_CATEGORIES = [category.value for category in EquipmentCategory]


class EquipmentService:
    """Service for camping equipment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.inventory_service = InventoryService(db)

    async def list_equipment(self, category: Optional[str] = None) -> list[CampingEquipment]:
        stmt = select(CampingEquipment).order_by(CampingEquipment.created_at.desc())
        if category:
            stmt = stmt.where(CampingEquipment.category == category)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_equipment_by_id(self, equipment_id: UUID) -> Optional[CampingEquipment]:
        stmt = select(CampingEquipment).where(CampingEquipment.id == equipment_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_equipment_by_id_or_raise(self, equipment_id: UUID) -> CampingEquipment:
        """
        Get equipment by ID or raise NotFoundError.

        Raises:
            NotFoundError: If equipment not found
        """
        equipment = await self.get_equipment_by_id(equipment_id)
        if equipment is None:
            logger.warning("Equipment not found", extra={"equipment_id": str(equipment_id)})
            raise NotFoundError(resource_type="camping equipment", resource_id=str(equipment_id))
        return equipment

    async def create_equipment(
        self,
        name: str,
        description: str,
        price: float,
        performed_by: str,
        quantity: int = 1,
        category: str = EquipmentCategory.OTHER.value,
        image: Optional[str] = None,
        is_available: bool = True,
        low_stock_threshold: Optional[int] = None,
    ) -> CampingEquipment:
        """
        Create an equipment item and log its opening stock.

        Args:
            name: Item name
            description: Item description
            price: Unit price
            performed_by: Username of the admin creating it
            quantity: Opening stock
            category: One of the equipment categories
            image: Stored image URL path, default image when omitted
            is_available: Whether the item can be added to carts
            low_stock_threshold: Per-item override of the low-stock threshold

        Returns:
            Created equipment

        Raises:
            ValidationError: If required fields are missing or out of range
        """
        self._validate(name=name, description=description, price=price, quantity=quantity, category=category)

        equipment = CampingEquipment(
            name=name.strip(),
            description=description.strip(),
            price=price,
            quantity=quantity,
            category=category,
            image=image or DEFAULT_EQUIPMENT_IMAGE,
            is_available=is_available,
            low_stock_threshold=low_stock_threshold,
        )
        self.db.add(equipment)
        await self.db.flush()

        self.inventory_service.record_audit(
            equipment,
            InventoryAction.CREATE,
            quantity_before=0,
            quantity_after=equipment.quantity,
            reason="Initial stock",
            performed_by=performed_by,
        )
        await self.db.commit()
        await self.db.refresh(equipment)

        logger.info(
            "Equipment created",
            extra={
                "equipment_id": str(equipment.id),
                "equipment_name": equipment.name,
                "quantity": equipment.quantity,
                "performed_by": performed_by,
            }
        )
        return equipment

    async def update_equipment(
        self,
        equipment_id: UUID,
        changes: dict[str, Any],
        performed_by: str,
    ) -> tuple[CampingEquipment, Optional[str]]:
        """
        Apply a partial update; a quantity change is written to the audit log.

        Returns:
            Tuple of the updated equipment and the replaced image URL, if any
        """
        equipment = await self.get_equipment_by_id_or_raise(equipment_id)
        changes = {key: value for key, value in changes.items() if value is not None}
        self._validate(**{
            k: v for k, v in changes.items() if k in ("name", "description", "price", "quantity", "category")
        })

        quantity_before = equipment.quantity
        previous_image = None
        for field, value in changes.items():
            if field == "image" and value != equipment.image:
                previous_image = equipment.image
            if isinstance(value, str) and field in ("name", "description"):
                value = value.strip()
            setattr(equipment, field, value)

        if equipment.quantity != quantity_before:
            self.inventory_service.record_audit(
                equipment,
                InventoryAction.UPDATE,
                quantity_before=quantity_before,
                quantity_after=equipment.quantity,
                reason="Equipment details updated",
                performed_by=performed_by,
            )

        await self.db.commit()
        await self.db.refresh(equipment)

        logger.info(
            "Equipment updated",
            extra={
                "equipment_id": str(equipment.id),
                "fields": sorted(changes),
                "performed_by": performed_by,
            }
        )
        return equipment, previous_image

    async def delete_equipment(self, equipment_id: UUID, performed_by: str) -> CampingEquipment:
        """
        Delete an equipment item with its cart lines, reorder rule and service history.

        Raises:
            NotFoundError: If equipment not found
        """
        equipment = await self.get_equipment_by_id_or_raise(equipment_id)

        self.inventory_service.record_audit(
            equipment,
            InventoryAction.DELETE,
            quantity_before=equipment.quantity,
            quantity_after=0,
            reason="Equipment removed from catalogue",
            performed_by=performed_by,
        )
        for model in (CartItem, ReorderConfig, DamageReport, MaintenanceRecord):
            await self.db.execute(delete(model).where(model.equipment_id == equipment.id))
        await self.db.delete(equipment)
        await self.db.commit()

        logger.info(
            "Equipment deleted",
            extra={"equipment_id": str(equipment_id), "performed_by": performed_by}
        )
        return equipment

    @staticmethod
    def _validate(
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
        quantity: Optional[int] = None,
        category: Optional[str] = None,
    ) -> None:
        if name is not None and not name.strip():
            raise ValidationError(detail="Please provide name, description, and price")
        if description is not None and not description.strip():
            raise ValidationError(detail="Please provide name, description, and price")
        if price is not None and price < 0:
            raise ValidationError(detail="Price must not be negative")
        if quantity is not None and quantity < 0:
            raise ValidationError(detail="Quantity must not be negative")
        if category is not None and category not in VALID_CATEGORIES:
            raise ValidationError(detail=f"Category must be one of: {', '.join(VALID_CATEGORIES)}")
