import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from social_app.database.connection import mongo_db_dependency
from social_app.utils.dependencies import resolve_user_from_token
from social_app.utils.errors import UnauthorizedError
from social_app.utils.realtime_bus import EventDispatcher, EventKind
from social_app.utils.websocket_manager import Connection, PresenceRegistry


logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _send_error(connection: Connection, code: str, message: str) -> None:
    await connection.send("error", {"code": code, "message": message})


def _receiver_of(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        receiver_id = data.get("receiverId")
        if isinstance(receiver_id, str) and receiver_id:
            return receiver_id
    return None


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, db = Depends(mongo_db_dependency)):
    # JWT via query string: /ws?token=...
    try:
        user = await resolve_user_from_token(websocket.query_params.get("token"), db)
    except UnauthorizedError:
        await websocket.close(code=4401)
        return

    user_id = user["_id"]
    username = user.get("username")
    registry: PresenceRegistry = websocket.app.state.presence
    dispatcher: EventDispatcher = websocket.app.state.dispatcher

    await websocket.accept()
    connection = Connection(websocket)
    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except (ValueError, KeyError):
                # KeyError: a binary frame has no text payload
                await _send_error(connection, "VALIDATION_ERROR", "Frames must be JSON text")
                continue
            if not isinstance(frame, dict):
                await _send_error(connection, "VALIDATION_ERROR", "Frames must be objects with an event name")
                continue

            event = frame.get("event")
            data = frame.get("data")

            if event == "join":
                if data is not None and data != user_id:
                    await _send_error(connection, "FORBIDDEN", "Cannot join as another user")
                    continue
                registry.connect(user_id, connection)
                await connection.send("joined", {"userId": user_id})
                continue

            if event in ("typing", "stopTyping"):
                receiver_id = _receiver_of(data)
                if receiver_id is None:
                    await _send_error(connection, "VALIDATION_ERROR", "receiverId is required")
                    continue
                # sender identity comes from the token, not from the frame
                if event == "typing":
                    await dispatcher.emit(receiver_id, EventKind.USER_TYPING, {"userId": user_id, "username": username})
                else:
                    await dispatcher.emit(receiver_id, EventKind.USER_STOP_TYPING, {"userId": user_id})
                continue

            if event == "ping":
                await connection.send("pong")
                continue

            await _send_error(connection, "VALIDATION_ERROR", f"Unknown event: {event}")
    except WebSocketDisconnect:
        logger.debug("Socket for user %s closed", user_id)
    finally:
        registry.disconnect(connection)
