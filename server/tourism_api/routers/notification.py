"""Notification router."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user
from ..core.responses import success_response
from ..models.user import User
from ..schemas.notification import Notification
from ..services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])

DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """List the caller's notifications, newest first."""
    notifications = await NotificationService(db).list_for_user(current_user.id, unread_only=unread_only)
    return success_response(
        count=len(notifications),
        notifications=[Notification.model_validate(n) for n in notifications]
    )


@router.put("/{notification_id}/read")
async def mark_notification_read(
    notification_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    notification = await NotificationService(db).mark_read(notification_id, current_user.id)
    return success_response(notification=Notification.model_validate(notification))
