"""Cart router. Every operation is limited to the caller's own cart."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user
from ..core.exceptions import ProblemDetailsException
from ..core.observability import metrics_collector
from ..core.responses import success_payload
from ..models.cart import Cart as CartModel
from ..models.user import User
from ..schemas.cart import AddToCartRequest, CartItem, CartResponse, UpdateCartItemRequest
from ..schemas.equipment import EquipmentSummary
from ..services.cart_service import CartService
from ..services.pricing import cart_totals, item_total

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)


def _convert_cart_to_schema(user_id: UUID, cart: Optional[CartModel]) -> CartResponse:
    """Convert a cart (or no cart) to the response schema with computed totals."""
    if cart is None:
        return CartResponse(user_id=user_id)

    items = [
        CartItem(
            id=item.id,
            equipment_id=item.equipment_id,
            quantity=item.quantity,
            price=item.price,
            is_rental=item.is_rental,
            start_date=item.start_date,
            end_date=item.end_date,
            line_total=round(item_total(item), 2),
            equipment=EquipmentSummary.model_validate(item.equipment) if item.equipment else None,
        )
        for item in cart.items
    ]
    return CartResponse(cart_id=cart.id, user_id=user_id, cart_items=items, **cart_totals(cart.items))


def _cart_response(user_id: UUID, cart: Optional[CartModel], message: Optional[str] = None) -> JSONResponse:
    content = _convert_cart_to_schema(user_id, cart).model_dump(mode="json")
    if message:
        content["message"] = message
    return JSONResponse(status_code=200, content=content)


@router.get("/user/{user_id}", response_model=CartResponse)
async def get_cart(
    user_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Get the caller's cart with line totals, subtotals and the total price."""
    cart = await CartService(db).get_cart_for_user(user_id, current_user)
    return _cart_response(user_id, cart, None if cart and cart.items else "Cart is empty")


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Add equipment to the caller's cart for purchase or rental."""
    try:
        cart = await CartService(db).add_item(request, current_user)
        metrics_collector.record_cart_item_added(request.is_rental)
        return _cart_response(current_user.id, cart, "Item added to cart successfully")

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error adding to cart",
            extra={
                "user_id": str(current_user.id),
                "equipment_id": str(request.equipment_id),
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/update/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: UUID,
    request: UpdateCartItemRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    cart = await CartService(db).update_item_quantity(item_id, request.quantity, current_user)
    return _cart_response(current_user.id, cart, "Cart item updated")


@router.delete("/remove/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    cart = await CartService(db).remove_item(item_id, current_user)
    return _cart_response(current_user.id, cart, "Item removed from cart")


@router.delete("/clear/{user_id}")
async def clear_cart(
    user_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Remove every item from the caller's cart."""
    await CartService(db).clear_cart(user_id, current_user)
    return JSONResponse(status_code=200, content=success_payload(message="Cart cleared successfully"))
