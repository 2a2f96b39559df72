from fastapi import APIRouter, Depends

from social_app.utils.dependencies import get_current_user, get_presence_registry
from social_app.utils.websocket_manager import PresenceRegistry


router = APIRouter(prefix="/presence", tags=["chat"])


@router.get("/{user_id}")
async def presence(user_id: str, current_user: dict = Depends(get_current_user), registry: PresenceRegistry = Depends(get_presence_registry)):
    """Whether ``user_id`` currently holds an open realtime connection on this process."""
    return {"user_id": user_id, "online": registry.is_online(user_id)}
