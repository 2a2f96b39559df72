from fastapi import APIRouter, Depends, Query, status

from social_app.schemas.chat import SendMessageRequest, StartConversationRequest
from social_app.services.chat_service import ChatService
from social_app.utils.dependencies import get_chat_service, get_current_user


router = APIRouter(prefix="/conversations", tags=["chat"])


@router.get("")
async def list_conversations(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100), current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    items, pagination = await service.list_conversations(current_user["_id"], page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_conversation(body: StartConversationRequest, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    conversation = await service.start_conversation(current_user["_id"], body.receiver_id, body.content)
    return {"conversation": conversation}


@router.get("/{conversation_id}/messages")
async def list_messages(conversation_id: str, page: int = Query(1, ge=1), limit: int = Query(50, ge=1, le=200), current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    messages, pagination = await service.list_messages(conversation_id, current_user["_id"], page=page, limit=limit)
    return {"items": messages, "pagination": pagination}


@router.post("/{conversation_id}/messages", status_code=status.HTTP_201_CREATED)
async def send_message(conversation_id: str, body: SendMessageRequest, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    message = await service.append_message(conversation_id, current_user["_id"], body.content)
    return {"message": message}
