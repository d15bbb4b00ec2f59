"""Supplier and reorder configuration routers."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import require_admin
from ..core.exceptions import ProblemDetailsException
from ..core.responses import success_response
from ..models.user import User
from ..schemas.supplier import (
    CreateSupplierRequest,
    ReorderConfig,
    SetReorderConfigRequest,
    Supplier,
    UpdateSupplierRequest,
)
from ..services.supplier_service import ReorderConfigService, SupplierService, config_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])
reorder_router = APIRouter(prefix="/api/reorder-config", tags=["reorder-config"])

DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_admin)


@router.get("")
async def list_suppliers(
    active_only: bool = Query(False),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List suppliers by name (admin only)."""
    suppliers = await SupplierService(db).list_suppliers(active_only=active_only)
    return success_response(count=len(suppliers), suppliers=[Supplier.model_validate(s) for s in suppliers])


@router.get("/{supplier_id}")
async def get_supplier(
    supplier_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    supplier = await SupplierService(db).get_supplier_by_id_or_raise(supplier_id)
    return success_response(supplier=Supplier.model_validate(supplier))


@router.post("", status_code=201)
async def create_supplier(
    request: CreateSupplierRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Add a supplier (admin only); emails are unique."""
    try:
        supplier = await SupplierService(db).create_supplier(request, created_by=admin.username)
        return success_response(
            201,
            message="Supplier added successfully",
            supplier=Supplier.model_validate(supplier)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in supplier creation",
            extra={"supplier_name": request.name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: UUID,
    request: UpdateSupplierRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    supplier = await SupplierService(db).update_supplier(supplier_id, request)
    return success_response(message="Supplier updated successfully", supplier=Supplier.model_validate(supplier))


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete a supplier that has no stock orders (admin only)."""
    await SupplierService(db).delete_supplier(supplier_id)
    return success_response(message="Supplier deleted successfully")


def _config_schema(view: dict) -> ReorderConfig:
    return ReorderConfig.model_validate(view, from_attributes=True)


@reorder_router.get("")
async def list_reorder_configs(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    configs = await ReorderConfigService(db).list_configs()
    return success_response(count=len(configs), configs=[_config_schema(config_view(c)) for c in configs])


@reorder_router.get("/{equipment_id}")
async def get_reorder_config(
    equipment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """An item's reorder rule, or the defaults while it has none (admin only)."""
    view = await ReorderConfigService(db).get_config_or_default(equipment_id)
    return success_response(config=_config_schema(view))


@reorder_router.api_route("/{equipment_id}", methods=["POST", "PUT"])
async def set_reorder_config(
    equipment_id: UUID,
    request: SetReorderConfigRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Create or replace an item's reorder rule (admin only)."""
    config = await ReorderConfigService(db).set_config(equipment_id, request, updated_by=admin.username)
    return success_response(
        message="Reorder configuration saved successfully",
        config=_config_schema(config_view(config))
    )


@reorder_router.delete("/{equipment_id}")
async def delete_reorder_config(
    equipment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    await ReorderConfigService(db).delete_config(equipment_id)
    return success_response(message="Reorder configuration deleted successfully")
