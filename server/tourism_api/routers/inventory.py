"""Inventory router for stock adjustments and reporting."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import require_admin
from ..core.exceptions import ProblemDetailsException
from ..core.responses import success_response
from ..models.user import User
from ..schemas.inventory import AuditLog, BatchUpdateRequest, InventoryStats
from ..services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_admin)


@router.post("/batch-update")
async def batch_update(
    request: BatchUpdateRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """
    Apply several stock changes at once (admin only).

    Each row is reported separately; the request fails with 400 only when
    no row could be applied.
    """
    try:
        results = await InventoryService(db).batch_update(request, performed_by=admin.username)
        applied = sum(1 for r in results if r.success)
        return success_response(
            message=f"Updated {applied} of {len(results)} items",
            results=results
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in batch stock update",
            extra={"rows": len(request.items), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/stats")
async def get_inventory_stats(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Inventory report with totals, per-category summary and restock lists (admin only)."""
    stats = InventoryStats.model_validate(await InventoryService(db).get_stats())
    return success_response(stats=stats)


@router.get("/audit-logs")
async def list_audit_logs(
    equipment_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Stock change history, newest first (admin only)."""
    logs = await InventoryService(db).list_audit_logs(equipment_id=equipment_id, limit=limit)
    return success_response(count=len(logs), logs=[AuditLog.model_validate(entry) for entry in logs])
