"""Notification service for in-app stock alerts."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.equipment import CampingEquipment
from ..models.notification import Notification, NotificationType
from ..models.user import User, UserRole
from .inventory_service import stock_threshold

logger = logging.getLogger(__name__)

STOCK_ALERT_TYPES = (NotificationType.LOW_STOCK.value, NotificationType.OUT_OF_STOCK.value)


def stock_message(equipment: CampingEquipment, notification_type: NotificationType) -> str:
    if notification_type == NotificationType.OUT_OF_STOCK:
        return f"{equipment.name} is out of stock"
    return (
        f"{equipment.name} is running low: {equipment.quantity} left "
        f"(threshold {stock_threshold(equipment)})"
    )


class NotificationService:
    """Service for notification operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: UUID, unread_only: bool = False) -> list[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        )
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """
        Mark one of the user's notifications as read.

        Raises:
            NotFoundError: If no such notification belongs to the user
        """
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        notification = (await self.db.execute(stmt)).scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource_type="notification", resource_id=str(notification_id))

        notification.is_read = True
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def notify_admins_of_stock(
        self,
        low_stock: list[CampingEquipment],
        out_of_stock: list[CampingEquipment],
    ) -> int:
        """
        Create stock alerts for every admin.

        An admin who still has an unread alert of the same type for the same
        item is not alerted again.

        Returns:
            Number of notifications created
        """
        admins = (await self.db.execute(select(User).where(User.role == UserRole.ADMIN.value))).scalars().all()
        if not admins:
            return 0

        unread = await self.db.execute(
            select(Notification.user_id, Notification.equipment_id, Notification.type).where(
                Notification.is_read.is_(False),
                Notification.type.in_(STOCK_ALERT_TYPES),
            )
        )
        already_alerted = {(row.user_id, row.equipment_id, row.type) for row in unread}

        created = 0
        batches = (
            (NotificationType.LOW_STOCK, low_stock),
            (NotificationType.OUT_OF_STOCK, out_of_stock),
        )
        for notification_type, items in batches:
            for equipment in items:
                for admin in admins:
                    if (admin.id, equipment.id, notification_type.value) in already_alerted:
                        continue
                    self.db.add(Notification(
                        user_id=admin.id,
                        type=notification_type.value,
                        message=stock_message(equipment, notification_type),
                        equipment_id=equipment.id,
                        quantity=equipment.quantity,
                        threshold=stock_threshold(equipment),
                    ))
                    created += 1

        if created:
            await self.db.commit()
            logger.info(
                "Stock notifications created",
                extra={
                    "created_count": created,
                    "low_stock_items": len(low_stock),
                    "out_of_stock_items": len(out_of_stock),
                }
            )
        return created

    async def notify_admins(self, notification_type: NotificationType, message: str) -> int:
        """
        Send the same notification to every admin without committing.

        Returns:
            Number of notifications added
        """
        admins = (await self.db.execute(select(User).where(User.role == UserRole.ADMIN.value))).scalars().all()
        for admin in admins:
            self.db.add(Notification(user_id=admin.id, type=notification_type.value, message=message))
        return len(admins)
