import logging
from enum import Enum
from typing import Any, Dict

from fastapi import WebSocketDisconnect

from social_app.utils.websocket_manager import PresenceRegistry


logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    NOTIFICATION = "notification"
    NEW_MESSAGE = "newMessage"
    USER_TYPING = "userTyping"
    USER_STOP_TYPING = "userStopTyping"


class EventDispatcher:
    """Best-effort push of events to a single online user.

    Delivery is at most once: an offline recipient is skipped and a
    dead socket is dropped from the registry. Callers are never told
    either way, the persisted records remain the source of truth.
    """

    def __init__(self, registry: PresenceRegistry) -> None:
        self._registry = registry

    async def emit(self, user_id: str, event: EventKind, payload: Any) -> bool:
        connection = self._registry.lookup(user_id)
        if connection is None:
            logger.debug("Skipping %s for offline user %s", event.value, user_id)
            return False
        try:
            await connection.send(event.value, payload)
        except (WebSocketDisconnect, RuntimeError, OSError):
            logger.warning("Dropping %s for user %s: connection is gone", event.value, user_id, exc_info=True)
            self._registry.disconnect(connection)
            return False
        return True

    async def emit_notification(self, user_id: str, notification: Dict[str, Any]) -> bool:
        return await self.emit(user_id, EventKind.NOTIFICATION, notification)

    async def emit_new_message(self, user_id: str, message: Dict[str, Any]) -> bool:
        return await self.emit(user_id, EventKind.NEW_MESSAGE, message)
