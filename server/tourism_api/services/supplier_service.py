"""Supplier service for the supplier directory and per-item reorder rules."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..models.equipment import CampingEquipment
from ..models.stock_order import StockOrder
from ..models.supplier import ReorderConfig, Supplier
from ..schemas.supplier import CreateSupplierRequest, SetReorderConfigRequest, UpdateSupplierRequest

logger = logging.getLogger(__name__)


class SupplierService:
    """Service for supplier operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_suppliers(self, active_only: bool = False) -> list[Supplier]:
        stmt = select(Supplier).order_by(Supplier.name)
        if active_only:
            stmt = stmt.where(Supplier.active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_supplier_by_id_or_raise(self, supplier_id: UUID) -> Supplier:
        """
        Get supplier by ID or raise NotFoundError.

        Raises:
            NotFoundError: If supplier not found
        """
        supplier = await self.db.get(Supplier, supplier_id)
        if supplier is None:
            raise NotFoundError(resource_type="supplier", resource_id=str(supplier_id))
        return supplier

    async def _ensure_email_free(self, email: str, exclude_id: Optional[UUID] = None) -> None:
        stmt = select(Supplier.id).where(Supplier.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Supplier.id != exclude_id)
        if (await self.db.execute(stmt)).first() is not None:
            raise ValidationError(detail="Supplier with this email already exists")

    async def create_supplier(self, request: CreateSupplierRequest, created_by: str) -> Supplier:
        """
        Add a supplier to the directory.

        Raises:
            ValidationError: If another supplier already uses the email
        """
        await self._ensure_email_free(request.email)

        supplier = Supplier(**request.model_dump(), created_by=created_by)
        self.db.add(supplier)
        await self.db.commit()
        await self.db.refresh(supplier)

        logger.info(
            "Supplier created",
            extra={"supplier_id": str(supplier.id), "supplier_name": supplier.name, "created_by": created_by}
        )
        return supplier

    async def update_supplier(self, supplier_id: UUID, request: UpdateSupplierRequest) -> Supplier:
        """
        Apply the fields present in the request.

        Raises:
            NotFoundError: If supplier not found
            ValidationError: If the new email belongs to another supplier
        """
        supplier = await self.get_supplier_by_id_or_raise(supplier_id)

        changes = request.model_dump(exclude_unset=True)
        if changes.get("email") is not None:
            await self._ensure_email_free(changes["email"], exclude_id=supplier.id)
        for field, value in changes.items():
            if value is None and field in ("name", "email", "active"):
                continue
            setattr(supplier, field, value)

        await self.db.commit()
        await self.db.refresh(supplier)

        logger.info("Supplier updated", extra={"supplier_id": str(supplier.id), "fields": sorted(changes)})
        return supplier

    async def delete_supplier(self, supplier_id: UUID) -> None:
        """
        Remove a supplier that has never been ordered from.

        Raises:
            NotFoundError: If supplier not found
            InvalidStateError: If stock orders reference the supplier
        """
        supplier = await self.get_supplier_by_id_or_raise(supplier_id)

        order_count = await self.db.scalar(
            select(func.count()).select_from(StockOrder).where(StockOrder.supplier_id == supplier.id)
        )
        if order_count:
            raise InvalidStateError(
                resource_type="supplier",
                current_status="active" if supplier.active else "inactive",
                detail="Supplier has stock orders; deactivate it instead",
            )

        await self.db.delete(supplier)
        await self.db.commit()
        logger.info("Supplier deleted", extra={"supplier_id": str(supplier_id)})


class ReorderConfigService:
    """Service for reorder configuration operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self):
        return select(ReorderConfig).options(
            selectinload(ReorderConfig.equipment),
            selectinload(ReorderConfig.preferred_supplier),
        ).execution_options(populate_existing=True)

    async def _get_equipment_or_raise(self, equipment_id: UUID) -> CampingEquipment:
        equipment = await self.db.get(CampingEquipment, equipment_id)
        if equipment is None:
            raise NotFoundError(resource_type="equipment", resource_id=str(equipment_id))
        return equipment

    async def get_config(self, equipment_id: UUID) -> Optional[ReorderConfig]:
        result = await self.db.execute(self._base_query().where(ReorderConfig.equipment_id == equipment_id))
        return result.scalar_one_or_none()

    async def get_config_or_default(self, equipment_id: UUID) -> dict:
        """
        The item's reorder rule, or the defaults that apply while it has none.

        Raises:
            NotFoundError: If the equipment does not exist
        """
        equipment = await self._get_equipment_or_raise(equipment_id)
        config = await self.get_config(equipment_id)
        if config is not None:
            return config_view(config)
        return {
            "equipment_id": equipment.id,
            "equipment_name": equipment.name,
            "threshold": settings.low_stock_threshold,
            "reorder_quantity": settings.default_reorder_quantity,
            "auto_reorder_enabled": False,
            "preferred_supplier": None,
        }

    async def list_configs(self) -> list[ReorderConfig]:
        result = await self.db.execute(self._base_query().order_by(ReorderConfig.updated_at.desc()))
        return list(result.scalars().all())

    async def configs_by_equipment(self, equipment_ids: list[UUID]) -> dict[UUID, ReorderConfig]:
        if not equipment_ids:
            return {}
        result = await self.db.execute(self._base_query().where(ReorderConfig.equipment_id.in_(equipment_ids)))
        return {config.equipment_id: config for config in result.scalars().all()}

    async def set_config(
        self,
        equipment_id: UUID,
        request: SetReorderConfigRequest,
        updated_by: str,
    ) -> ReorderConfig:
        """
        Create or replace an item's reorder rule.

        The threshold is copied onto the equipment so stock scans and
        reports use it.

        Raises:
            NotFoundError: If the equipment or preferred supplier does not exist
        """
        equipment = await self._get_equipment_or_raise(equipment_id)
        if request.preferred_supplier_id is not None:
            await SupplierService(self.db).get_supplier_by_id_or_raise(request.preferred_supplier_id)

        config = await self.get_config(equipment_id)
        if config is None:
            config = ReorderConfig(equipment_id=equipment.id)
            self.db.add(config)

        config.threshold = request.threshold
        config.reorder_quantity = request.reorder_quantity
        config.preferred_supplier_id = request.preferred_supplier_id
        config.auto_reorder_enabled = request.auto_reorder_enabled
        config.updated_by = updated_by
        equipment.low_stock_threshold = request.threshold

        await self.db.commit()

        logger.info(
            "Reorder configuration saved",
            extra={
                "equipment_id": str(equipment_id),
                "threshold": request.threshold,
                "reorder_quantity": request.reorder_quantity,
                "auto_reorder_enabled": request.auto_reorder_enabled,
                "updated_by": updated_by,
            }
        )
        return await self.get_config(equipment_id)

    async def delete_config(self, equipment_id: UUID) -> None:
        """
        Remove an item's reorder rule; the default threshold applies again.

        Raises:
            NotFoundError: If the item has no reorder configuration
        """
        config = await self.get_config(equipment_id)
        if config is None:
            raise NotFoundError(
                resource_type="reorder configuration",
                resource_id=str(equipment_id),
                detail="Reorder configuration not found",
            )

        config.equipment.low_stock_threshold = None
        await self.db.delete(config)
        await self.db.commit()
        logger.info("Reorder configuration deleted", extra={"equipment_id": str(equipment_id)})


def config_view(config: ReorderConfig) -> dict:
    """Flatten a stored configuration into the response shape."""
    return {
        "id": config.id,
        "equipment_id": config.equipment_id,
        "equipment_name": config.equipment.name if config.equipment else None,
        "threshold": config.threshold,
        "reorder_quantity": config.reorder_quantity,
        "auto_reorder_enabled": config.auto_reorder_enabled,
        "preferred_supplier": config.preferred_supplier,
        "updated_by": config.updated_by,
        "updated_at": config.updated_at,
    }
