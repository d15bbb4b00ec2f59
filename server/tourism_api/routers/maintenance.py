"""Maintenance router for equipment servicing and damage reports."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user, require_admin
from ..core.exceptions import ProblemDetailsException
from ..core.responses import success_response
from ..models.user import User
from ..schemas.maintenance import (
    CreateDamageReportRequest,
    CreateMaintenanceRequest,
    DamageReport,
    DamageSeverity,
    DamageStatus,
    DamageType,
    MaintenancePriority,
    MaintenanceRecord,
    MaintenanceStatus,
    MaintenanceType,
    UpdateDamageReportRequest,
    UpdateMaintenanceRequest,
)
from ..services.maintenance_service import MaintenanceService, page_count

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)
ADMIN_DEPENDENCY = Depends(require_admin)

PAGE_QUERY = Query(1, ge=1)
LIMIT_QUERY = Query(20, ge=1, le=100)


@router.get("/records")
async def list_maintenance_records(
    status: Optional[MaintenanceStatus] = Query(None),
    priority: Optional[MaintenancePriority] = Query(None),
    maintenance_type: Optional[MaintenanceType] = Query(None),
    equipment_id: Optional[UUID] = Query(None),
    page: int = PAGE_QUERY,
    limit: int = LIMIT_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List maintenance records, soonest scheduled first (admin only)."""
    records, total = await MaintenanceService(db).list_records(
        status=status,
        priority=priority.value if priority else None,
        maintenance_type=maintenance_type.value if maintenance_type else None,
        equipment_id=equipment_id,
        page=page,
        limit=limit,
    )
    return success_response(
        count=len(records),
        total=total,
        pages=page_count(total, limit),
        records=[MaintenanceRecord.model_validate(r) for r in records]
    )


@router.get("/records/{record_id}")
async def get_maintenance_record(
    record_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    record = await MaintenanceService(db).get_record_or_raise(record_id)
    return success_response(record=MaintenanceRecord.model_validate(record))


@router.post("/records", status_code=201)
async def create_maintenance_record(
    request: CreateMaintenanceRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """
    Schedule maintenance (admin only).

    Work scheduled within a day takes the item out of service at once.
    """
    try:
        record = await MaintenanceService(db).create_record(request, created_by=admin.username)
        return success_response(
            201,
            message="Maintenance record created successfully",
            record=MaintenanceRecord.model_validate(record)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in maintenance scheduling",
            extra={"equipment_id": str(request.equipment_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/records/{record_id}")
async def update_maintenance_record(
    record_id: UUID,
    request: UpdateMaintenanceRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    record = await MaintenanceService(db).update_record(record_id, request, updated_by=admin.username)
    return success_response(
        message="Maintenance record updated successfully",
        record=MaintenanceRecord.model_validate(record)
    )


@router.delete("/records/{record_id}")
async def delete_maintenance_record(
    record_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete a scheduled or cancelled record (admin only)."""
    await MaintenanceService(db).delete_record(record_id)
    return success_response(message="Maintenance record deleted successfully")


@router.get("/damage-reports")
async def list_damage_reports(
    status: Optional[DamageStatus] = Query(None),
    severity: Optional[DamageSeverity] = Query(None),
    damage_type: Optional[DamageType] = Query(None),
    page: int = PAGE_QUERY,
    limit: int = LIMIT_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List damage reports, newest first (admin only)."""
    reports, total = await MaintenanceService(db).list_damage_reports(
        status=status,
        severity=severity.value if severity else None,
        damage_type=damage_type.value if damage_type else None,
        page=page,
        limit=limit,
    )
    return success_response(
        count=len(reports),
        total=total,
        pages=page_count(total, limit),
        reports=[DamageReport.model_validate(r) for r in reports]
    )


@router.post("/damage-reports", status_code=201)
async def create_damage_report(
    request: CreateDamageReportRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """
    Report damage to an equipment item.

    Any signed-in user may report damage; admins are notified.
    """
    try:
        report = await MaintenanceService(db).create_damage_report(request, reported_by=current_user.username)
        return success_response(
            201,
            message="Damage report created successfully",
            report=DamageReport.model_validate(report)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in damage report creation",
            extra={"equipment_id": str(request.equipment_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/damage-reports/{report_id}")
async def update_damage_report(
    report_id: UUID,
    request: UpdateDamageReportRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Record how damage was resolved (admin only)."""
    report = await MaintenanceService(db).update_damage_report(report_id, request, performed_by=admin.username)
    return success_response(
        message="Damage report updated successfully",
        report=DamageReport.model_validate(report)
    )

