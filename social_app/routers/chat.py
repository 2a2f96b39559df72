from typing import Optional

from fastapi import APIRouter, Depends

from social_app.services.chat_service import ChatService
from social_app.utils.dependencies import get_chat_service, get_current_user


router = APIRouter(prefix="/messages", tags=["chat"])


@router.get("/unread-count")
async def get_unread_count(from_user_id: Optional[str] = None, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    count = await service.get_unread_count(current_user["_id"], from_user_id)
    return {"unread_count": count}


@router.put("/{message_id}/read")
async def mark_message_read(message_id: str, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    await service.mark_message_read(message_id, current_user["_id"])
    return {"msg": "Message marked as read"}
