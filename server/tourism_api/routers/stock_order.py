"""Stock order router for purchase orders placed with suppliers."""

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
from ..models.stock_order import StockOrder as StockOrderModel
from ..models.user import User
from ..schemas.stock_order import (
    CancelStockOrderRequest,
    CreateStockOrderRequest,
    StockOrder,
    StockOrderStatus,
    UpdateStockOrderStatusRequest,
)
from ..services.stock_order_service import StockOrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stock-orders", tags=["stock-orders"])

DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_admin)


def _convert_order_to_schema(order: StockOrderModel) -> StockOrder:
    return StockOrder.model_validate(order)


@router.post("", status_code=201)
async def create_stock_order(
    request: CreateStockOrderRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Place an order with a supplier (admin only)."""
    try:
        order = await StockOrderService(db).create_order(request, created_by=admin.username)
        return success_response(
            201,
            message="Stock order created successfully",
            order=_convert_order_to_schema(order)
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in stock order creation",
            extra={"supplier_id": str(request.supplier_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("")
async def list_stock_orders(
    status: Optional[StockOrderStatus] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List stock orders, newest first (admin only)."""
    orders = await StockOrderService(db).list_orders(status=status, supplier_id=supplier_id)
    return success_response(count=len(orders), orders=[_convert_order_to_schema(o) for o in orders])


@router.get("/{order_id}")
async def get_stock_order(
    order_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    order = await StockOrderService(db).get_order_by_id_or_raise(order_id)
    return success_response(order=_convert_order_to_schema(order))


@router.put("/{order_id}/status")
async def update_stock_order_status(
    order_id: UUID,
    request: UpdateStockOrderStatusRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """
    Move an order through its lifecycle (admin only).

    Delivering an order adds its lines to stock.
    """
    try:
        order = await StockOrderService(db).update_status(order_id, request, performed_by=admin.username)
        return success_response(message="Stock order updated successfully", order=_convert_order_to_schema(order))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in stock order update",
            extra={"order_id": str(order_id), "status": request.status.value, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{order_id}/cancel")
async def cancel_stock_order(
    order_id: UUID,
    request: Optional[CancelStockOrderRequest] = None,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Cancel a pending or confirmed order (admin only)."""
    reason = request.reason if request else None
    order = await StockOrderService(db).cancel_order(order_id, reason=reason, performed_by=admin.username)
    return success_response(message="Stock order cancelled successfully", order=_convert_order_to_schema(order))
