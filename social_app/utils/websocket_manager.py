import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder


logger = logging.getLogger(__name__)


class Connection:
    """One open realtime socket. ``user_id`` is set when the user joins."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self.user_id: Optional[str] = None

    async def send(self, event: str, data: Any = None) -> None:
        await self._websocket.send_json({"event": event, "data": jsonable_encoder(data)})


class PresenceRegistry:
    """Process-local map of online users to their active connection.

    One connection per user; a reconnect replaces the previous handle.
    Nothing here suspends, so calls from different handlers on the same
    event loop never interleave.
    """

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}

    def connect(self, user_id: str, connection: Connection) -> None:
        if connection.user_id and connection.user_id != user_id:
            # the same socket re-joined under another identity
            self.disconnect(connection)
        previous = self._connections.get(user_id)
        connection.user_id = user_id
        self._connections[user_id] = connection
        if previous is not None and previous is not connection:
            logger.debug("User %s reconnected, replacing previous connection", user_id)
        else:
            logger.debug("User %s is online", user_id)

    def disconnect(self, connection: Connection) -> Optional[str]:
        user_id = connection.user_id
        if user_id is None:
            return None
        # a stale socket closing late must not evict the user's newer one
        if self._connections.get(user_id) is connection:
            del self._connections[user_id]
            logger.debug("User %s went offline", user_id)
        return user_id

    def lookup(self, user_id: str) -> Optional[Connection]:
        return self._connections.get(user_id)

    def is_online(self, user_id: str) -> bool:
        return user_id in self._connections

    def online_user_ids(self) -> List[str]:
        return list(self._connections)

    def __len__(self) -> int:
        return len(self._connections)
