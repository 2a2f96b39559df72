from fastapi import APIRouter, Depends, Query

from social_app.services.notification_service import NotificationService
from social_app.utils.dependencies import get_current_user, get_notification_service


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100), unread_only: bool = False, current_user: dict = Depends(get_current_user), service: NotificationService = Depends(get_notification_service)):
    items, pagination = await service.list_notifications(current_user["_id"], page=page, limit=limit, unread_only=unread_only)
    return {"items": items, "pagination": pagination}


@router.get("/unread-count")
async def unread_count(current_user: dict = Depends(get_current_user), service: NotificationService = Depends(get_notification_service)):
    return {"unread_count": await service.get_unread_count(current_user["_id"])}


@router.put("/read-all")
async def mark_all_read(current_user: dict = Depends(get_current_user), service: NotificationService = Depends(get_notification_service)):
    updated = await service.mark_all_read(current_user["_id"])
    return {"updated": updated}


@router.put("/{notification_id}/read")
async def mark_read(notification_id: str, current_user: dict = Depends(get_current_user), service: NotificationService = Depends(get_notification_service)):
    await service.mark_read(notification_id, current_user["_id"])
    return {"msg": "Notification marked as read"}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, current_user: dict = Depends(get_current_user), service: NotificationService = Depends(get_notification_service)):
    await service.delete(notification_id, current_user["_id"])
    return {"msg": "Notification deleted"}
