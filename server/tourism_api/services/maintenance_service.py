"""Maintenance service for equipment servicing and damage reports."""

import logging
import math
from datetime import timedelta
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import InvalidStateError, NotFoundError
from ..models.equipment import CampingEquipment
from ..models.inventory import InventoryAction
from ..models.maintenance import (
    DamageReport,
    DamageSeverity,
    DamageStatus,
    MaintenanceRecord,
    MaintenanceStatus,
)
from ..models.notification import NotificationType
from ..schemas.maintenance import (
    CreateDamageReportRequest,
    CreateMaintenanceRequest,
    UpdateDamageReportRequest,
    UpdateMaintenanceRequest,
)
from .inventory_service import InventoryService
from .notification_service import NotificationService
from .supplier_service import SupplierService

logger = logging.getLogger(__name__)

# Maintenance scheduled this close to now takes the item out of service at once
IMMINENT_MAINTENANCE_WINDOW = timedelta(hours=24)

SEVERE_DAMAGE = {DamageSeverity.MAJOR.value, DamageSeverity.CRITICAL.value}
DELETABLE_MAINTENANCE_STATUSES = {MaintenanceStatus.SCHEDULED.value, MaintenanceStatus.CANCELLED.value}


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class MaintenanceService:
    """Service for maintenance record and damage report operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.inventory_service = InventoryService(db)

    async def _get_equipment_or_raise(self, equipment_id: UUID, detail: Optional[str] = None) -> CampingEquipment:
        stmt = select(CampingEquipment).where(CampingEquipment.id == equipment_id).with_for_update()
        equipment = (await self.db.execute(stmt)).scalar_one_or_none()
        if equipment is None:
            raise NotFoundError(resource_type="equipment", resource_id=str(equipment_id), detail=detail)
        return equipment

    def _take_out_of_service(self, equipment: CampingEquipment, action: InventoryAction, **audit) -> None:
        equipment.is_available = False
        self.inventory_service.record_audit(equipment, action, equipment.quantity, equipment.quantity, **audit)

    def _return_to_service(self, equipment: CampingEquipment, action: InventoryAction, **audit) -> None:
        equipment.is_available = True
        self.inventory_service.record_audit(equipment, action, equipment.quantity, equipment.quantity, **audit)

    # Maintenance records

    async def list_records(
        self,
        status: Optional[MaintenanceStatus] = None,
        priority: Optional[str] = None,
        maintenance_type: Optional[str] = None,
        equipment_id: Optional[UUID] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[MaintenanceRecord], int]:
        """
        List maintenance records, soonest scheduled first.

        Returns:
            Tuple of (records on the page, total matching records)
        """
        filters = []
        if status is not None:
            filters.append(MaintenanceRecord.status == status.value)
        if priority is not None:
            filters.append(MaintenanceRecord.priority == priority)
        if maintenance_type is not None:
            filters.append(MaintenanceRecord.maintenance_type == maintenance_type)
        if equipment_id is not None:
            filters.append(MaintenanceRecord.equipment_id == equipment_id)

        total = await self.db.scalar(select(func.count()).select_from(MaintenanceRecord).where(*filters))
        stmt = (
            select(MaintenanceRecord)
            .where(*filters)
            .order_by(MaintenanceRecord.scheduled_date)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def get_record_or_raise(self, record_id: UUID) -> MaintenanceRecord:
        """
        Raises:
            NotFoundError: If the record does not exist
        """
        record = await self.db.get(MaintenanceRecord, record_id)
        if record is None:
            raise NotFoundError(
                resource_type="maintenance record",
                resource_id=str(record_id),
                detail="Maintenance record not found",
            )
        return record

    async def create_record(self, request: CreateMaintenanceRequest, created_by: str) -> MaintenanceRecord:
        """
        Schedule maintenance for an equipment item.

        Work scheduled within a day of now takes the item out of service
        immediately, with an audit entry.

        Raises:
            NotFoundError: If the equipment or vendor does not exist
        """
        equipment = await self._get_equipment_or_raise(request.equipment_id)
        if request.vendor_id is not None:
            await SupplierService(self.db).get_supplier_by_id_or_raise(request.vendor_id)

        record = MaintenanceRecord(
            equipment_id=equipment.id,
            vendor_id=request.vendor_id,
            maintenance_type=request.maintenance_type.value,
            priority=request.priority.value,
            description=request.description,
            scheduled_date=request.scheduled_date,
            estimated_cost=request.estimated_cost,
            performed_by=request.performed_by,
            notes=request.notes,
            created_by=created_by,
        )
        self.db.add(record)
        await self.db.flush()

        imminent = abs(request.scheduled_date - utcnow()) < IMMINENT_MAINTENANCE_WINDOW
        if imminent and equipment.is_available:
            self._take_out_of_service(
                equipment,
                InventoryAction.MAINTENANCE,
                reason=f"Scheduled for {request.maintenance_type.value} maintenance",
                performed_by=created_by,
                reference=str(record.id),
                notes=request.description,
            )

        await self.db.commit()
        await self.db.refresh(record)

        logger.info(
            "Maintenance scheduled",
            extra={
                "record_id": str(record.id),
                "equipment_id": str(equipment.id),
                "maintenance_type": record.maintenance_type,
                "out_of_service": imminent,
                "created_by": created_by,
            }
        )
        return record

    async def update_record(
        self,
        record_id: UUID,
        request: UpdateMaintenanceRequest,
        updated_by: str,
    ) -> MaintenanceRecord:
        """
        Apply the fields present in the request.

        Starting the work takes the item out of service; completing it puts
        the item back. Both changes are audited.

        Raises:
            NotFoundError: If the record, its equipment or the vendor does not exist
        """
        record = await self.get_record_or_raise(record_id)
        equipment = await self._get_equipment_or_raise(record.equipment_id, detail="Associated equipment not found")
        if request.vendor_id is not None:
            await SupplierService(self.db).get_supplier_by_id_or_raise(request.vendor_id)

        previous_status = record.status
        for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(record, field, value.value if isinstance(value, Enum) else value)
        record.updated_by = updated_by

        if record.status != previous_status:
            transition = f"Maintenance status changed from {previous_status} to {record.status}"
            if record.status == MaintenanceStatus.IN_PROGRESS.value:
                if record.start_date is None:
                    record.start_date = utcnow()
                if equipment.is_available:
                    self._take_out_of_service(
                        equipment,
                        InventoryAction.MAINTENANCE,
                        reason="Maintenance started",
                        performed_by=updated_by,
                        reference=str(record.id),
                        notes=transition,
                    )
            elif record.status == MaintenanceStatus.COMPLETED.value:
                if record.completion_date is None:
                    record.completion_date = utcnow()
                if not equipment.is_available:
                    self._return_to_service(
                        equipment,
                        InventoryAction.MAINTENANCE,
                        reason="Maintenance completed",
                        performed_by=updated_by,
                        reference=str(record.id),
                        notes=transition,
                    )

        await self.db.commit()
        await self.db.refresh(record)

        logger.info(
            "Maintenance record updated",
            extra={
                "record_id": str(record_id),
                "previous_status": previous_status,
                "status": record.status,
                "updated_by": updated_by,
            }
        )
        return record

    async def delete_record(self, record_id: UUID) -> None:
        """
        Delete a record whose work has not started.

        Raises:
            NotFoundError: If the record does not exist
            InvalidStateError: If the work is in progress or completed
        """
        record = await self.get_record_or_raise(record_id)
        if record.status not in DELETABLE_MAINTENANCE_STATUSES:
            raise InvalidStateError(
                resource_type="maintenance record",
                current_status=record.status,
                detail=f"Cannot delete maintenance record with status '{record.status}'",
            )

        await self.db.delete(record)
        await self.db.commit()
        logger.info("Maintenance record deleted", extra={"record_id": str(record_id)})

    # Damage reports

    async def list_damage_reports(
        self,
        status: Optional[DamageStatus] = None,
        severity: Optional[str] = None,
        damage_type: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[DamageReport], int]:
        """
        List damage reports, newest first.

        Returns:
            Tuple of (reports on the page, total matching reports)
        """
        filters = []
        if status is not None:
            filters.append(DamageReport.status == status.value)
        if severity is not None:
            filters.append(DamageReport.severity == severity)
        if damage_type is not None:
            filters.append(DamageReport.damage_type == damage_type)

        total = await self.db.scalar(select(func.count()).select_from(DamageReport).where(*filters))
        stmt = (
            select(DamageReport)
            .where(*filters)
            .order_by(DamageReport.report_date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_damage_report(self, request: CreateDamageReportRequest, reported_by: str) -> DamageReport:
        """
        Record damage found on an item.

        Major and critical damage takes the item out of service, and every
        admin is notified.

        Raises:
            NotFoundError: If the equipment does not exist
        """
        equipment = await self._get_equipment_or_raise(request.equipment_id)

        report = DamageReport(
            equipment_id=equipment.id,
            damage_type=request.damage_type.value,
            severity=request.severity.value,
            description=request.description,
            location=request.location,
            images=list(request.images),
            reported_by=reported_by,
        )
        self.db.add(report)
        await self.db.flush()

        if report.severity in SEVERE_DAMAGE and equipment.is_available:
            self._take_out_of_service(
                equipment,
                InventoryAction.DAMAGE,
                reason=f"{report.severity} damage reported: {report.damage_type}",
                performed_by=reported_by,
                reference=str(report.id),
                notes=request.description,
            )

        await NotificationService(self.db).notify_admins(
            NotificationType.DAMAGE_REPORT,
            f"{report.severity.capitalize()} {report.damage_type} damage reported "
            f"for {equipment.name} by {reported_by}",
        )
        await self.db.commit()
        await self.db.refresh(report)

        logger.info(
            "Damage reported",
            extra={
                "report_id": str(report.id),
                "equipment_id": str(equipment.id),
                "severity": report.severity,
                "reported_by": reported_by,
            }
        )
        return report

    async def update_damage_report(
        self,
        report_id: UUID,
        request: UpdateDamageReportRequest,
        performed_by: str,
    ) -> DamageReport:
        """
        Record how damage was resolved.

        A repaired or replaced item returns to service. Writing an item off
        removes one unit from stock and returns the rest to service.

        Raises:
            NotFoundError: If the report, its equipment or the linked record does not exist
        """
        report = await self.db.get(DamageReport, report_id)
        if report is None:
            raise NotFoundError(
                resource_type="damage report",
                resource_id=str(report_id),
                detail="Damage report not found",
            )
        if request.maintenance_record_id is not None:
            await self.get_record_or_raise(request.maintenance_record_id)

        previous_status = report.status
        for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(report, field, value.value if isinstance(value, Enum) else value)

        if report.status != previous_status:
            equipment = await self._get_equipment_or_raise(report.equipment_id, detail="Associated equipment not found")
            audit = {
                "performed_by": performed_by,
                "reference": str(report.id),
            }
            if report.status in (DamageStatus.REPAIRED.value, DamageStatus.REPLACED.value):
                if not equipment.is_available:
                    self._return_to_service(
                        equipment,
                        InventoryAction.DAMAGE,
                        reason=f"Item {report.status}",
                        notes=request.resolution_notes or f"Damage {report.status}",
                        **audit,
                    )
            elif report.status == DamageStatus.WRITTEN_OFF.value:
                before = equipment.quantity
                equipment.quantity = max(before - 1, 0)
                equipment.is_available = True
                self.inventory_service.record_audit(
                    equipment,
                    InventoryAction.STOCK_OUT,
                    before,
                    equipment.quantity,
                    reason="Item written off",
                    notes=request.resolution_notes or "Item written off due to irreparable damage",
                    **audit,
                )

        await self.db.commit()
        await self.db.refresh(report)

        logger.info(
            "Damage report updated",
            extra={
                "report_id": str(report_id),
                "previous_status": previous_status,
                "status": report.status,
                "performed_by": performed_by,
            }
        )
        return report
