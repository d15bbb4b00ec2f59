"""Cart service for purchase and rental lines."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import to_naive_utc
from ..core.exceptions import AuthorizationError, InsufficientStockError, NotFoundError, ValidationError
from ..models.cart import Cart, CartItem
from ..models.user import User
from ..schemas.cart import AddToCartRequest
from .equipment_service import EquipmentService

logger = logging.getLogger(__name__)


def _ensure_owner(user_id: UUID, requester: User) -> None:
    if user_id != requester.id:
        logger.warning(
            "Cart access denied",
            extra={"user_id": str(user_id), "requester_id": str(requester.id)}
        )
        raise AuthorizationError(detail="You can only access your own cart")


class CartService:
    """Service for cart operations. A user may only touch their own cart."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.equipment_service = EquipmentService(db)

    async def get_cart(self, user_id: UUID) -> Optional[Cart]:
        stmt = (
            select(Cart)
            .options(selectinload(Cart.items).selectinload(CartItem.equipment))
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_cart_for_user(self, user_id: UUID, requester: User) -> Optional[Cart]:
        """
        Get a user's cart, or None if they never added anything.

        Raises:
            AuthorizationError: If the requester is not the cart owner
        """
        _ensure_owner(user_id, requester)
        return await self.get_cart(user_id)

    async def add_item(self, request: AddToCartRequest, requester: User) -> Cart:
        """
        Add equipment to the requester's cart.

        A line with the same equipment, rental flag and rental dates is
        merged by increasing its quantity.

        Args:
            request: Item to add
            requester: Authenticated user

        Returns:
            Updated cart with items loaded

        Raises:
            AuthorizationError: If ``request.user_id`` is not the requester
            NotFoundError: If the equipment does not exist
            ValidationError: If the equipment is not available
            InsufficientStockError: If stock does not cover the resulting quantity
        """
        _ensure_owner(request.user_id, requester)

        equipment = await self.equipment_service.get_equipment_by_id_or_raise(request.equipment_id)
        if not equipment.is_available:
            raise ValidationError(detail="Equipment not available")

        start_date = to_naive_utc(request.start_date) if request.is_rental and request.start_date else None
        end_date = to_naive_utc(request.end_date) if request.is_rental and request.end_date else None

        cart = await self.get_cart(requester.id)
        if cart is None:
            cart = Cart(user_id=requester.id)
            self.db.add(cart)
            await self.db.flush()
            cart = await self.get_cart(requester.id)

        existing = next(
            (
                item for item in cart.items
                if item.equipment_id == equipment.id
                and item.is_rental == request.is_rental
                and item.start_date == start_date
                and item.end_date == end_date
            ),
            None,
        )
        new_quantity = request.quantity + (existing.quantity if existing else 0)
        if equipment.quantity < new_quantity:
            raise InsufficientStockError(
                requested_quantity=new_quantity,
                available_quantity=equipment.quantity,
                equipment_id=str(equipment.id),
            )

        if existing is not None:
            existing.quantity = new_quantity
        else:
            cart.items.append(CartItem(
                equipment_id=equipment.id,
                quantity=request.quantity,
                price=request.price or equipment.price,
                is_rental=request.is_rental,
                start_date=start_date,
                end_date=end_date,
            ))

        await self.db.commit()

        logger.info(
            "Item added to cart",
            extra={
                "user_id": str(requester.id),
                "equipment_id": str(equipment.id),
                "quantity": request.quantity,
                "is_rental": request.is_rental,
                "merged": existing is not None,
            }
        )
        return await self.get_cart(requester.id)

    async def _get_owned_item(self, item_id: UUID, requester: User) -> CartItem:
        stmt = (
            select(CartItem)
            .options(selectinload(CartItem.cart), selectinload(CartItem.equipment))
            .where(CartItem.id == item_id)
        )
        item = (await self.db.execute(stmt)).scalar_one_or_none()
        if item is None:
            raise NotFoundError(resource_type="cart item", resource_id=str(item_id))
        if item.cart.user_id != requester.id:
            raise AuthorizationError(detail="You can only modify your own cart")
        return item

    async def update_item_quantity(self, item_id: UUID, quantity: int, requester: User) -> Cart:
        """
        Set the quantity of a cart line.

        Raises:
            ValidationError: If quantity is not positive
            NotFoundError: If the line does not exist
            AuthorizationError: If the line belongs to another user
            InsufficientStockError: If stock does not cover the quantity
        """
        if quantity <= 0:
            raise ValidationError(detail="Quantity must be greater than zero")

        item = await self._get_owned_item(item_id, requester)
        if item.equipment.quantity < quantity:
            raise InsufficientStockError(
                requested_quantity=quantity,
                available_quantity=item.equipment.quantity,
                equipment_id=str(item.equipment_id),
            )

        item.quantity = quantity
        await self.db.commit()

        logger.info("Cart item updated", extra={"item_id": str(item_id), "quantity": quantity})
        return await self.get_cart(requester.id)

    async def remove_item(self, item_id: UUID, requester: User) -> Cart:
        """
        Remove a line from the requester's cart.

        Raises:
            NotFoundError: If the line does not exist
            AuthorizationError: If the line belongs to another user
        """
        item = await self._get_owned_item(item_id, requester)
        await self.db.delete(item)
        await self.db.commit()

        logger.info("Cart item removed", extra={"item_id": str(item_id)})
        return await self.get_cart(requester.id)

    async def clear_cart(self, user_id: UUID, requester: User) -> None:
        """
        Remove every line from a cart.

        Raises:
            AuthorizationError: If the requester is not the cart owner
            NotFoundError: If the user has no cart
        """
        _ensure_owner(user_id, requester)
        cart = await self.get_cart(user_id)
        if cart is None:
            raise NotFoundError(resource_type="cart", detail="Cart not found")

        await self.db.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
        await self.db.commit()
        logger.info("Cart cleared", extra={"user_id": str(user_id)})
