import logging
from typing import Any, Dict, List, Optional, Tuple

from social_app.repositories.notification_repository import NotificationRepository
from social_app.utils.errors import NotFoundError
from social_app.utils.ids import to_object_id
from social_app.utils.pagination import build_pagination, page_offset
from social_app.utils.realtime_bus import EventDispatcher
from social_app.utils.serializers import notification_event, serialize_notification, user_summary


logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, notification_repo: NotificationRepository, dispatcher: Optional[EventDispatcher] = None) -> None:
        self._notification_repo = notification_repo
        self._dispatcher = dispatcher

    async def notify(
        self,
        user_id: str,
        type: str,
        from_user: Dict[str, Any],
        content: str,
        item_id: Optional[str] = None,
        item_type: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Persist a notification for ``user_id`` and push it if they are online.

        ``from_user`` is the acting user's document; acting on your own
        content notifies nobody.
        """
        from_user_id = str(from_user["_id"])
        if from_user_id == user_id:
            return None
        saved = await self._notification_repo.create(
            user_id=user_id,
            type=type,
            from_user_id=from_user_id,
            from_username=from_user.get("username", ""),
            content=content,
            item_id=item_id,
            item_type=item_type,
        )
        logger.debug("Notification %s (%s) stored for %s", saved["_id"], type, user_id)
        if self._dispatcher is not None:
            await self._dispatcher.emit_notification(
                user_id,
                notification_event(type, user_summary(from_user), content, item_id, item_type),
            )
        return serialize_notification(saved)

    async def list_notifications(
        self, user_id: str, page: int = 1, limit: int = 20, unread_only: bool = False
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        items, total = await self._notification_repo.list_for_user(
            user_id, skip=page_offset(page, limit), limit=limit, unread_only=unread_only
        )
        return [serialize_notification(item) for item in items], build_pagination(page, limit, total)

    async def get_unread_count(self, user_id: str) -> int:
        return await self._notification_repo.count_unread(user_id)

    async def mark_read(self, notification_id: str, user_id: str) -> None:
        oid = to_object_id(notification_id)
        if oid is None or not await self._notification_repo.mark_read(oid, user_id):
            raise NotFoundError("Notification not found")

    async def mark_all_read(self, user_id: str) -> int:
        return await self._notification_repo.mark_all_read(user_id)

    async def delete(self, notification_id: str, user_id: str) -> None:
        oid = to_object_id(notification_id)
        if oid is None or not await self._notification_repo.delete(oid, user_id):
            raise NotFoundError("Notification not found")
