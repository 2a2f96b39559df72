"""FastAPI dependency utilities."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from social_app.database.connection import mongo_db_dependency
from social_app.repositories.conversation_repository import ConversationRepository
from social_app.repositories.follow_repository import FollowRepository
from social_app.repositories.message_repository import MessageRepository
from social_app.repositories.notification_repository import NotificationRepository
from social_app.repositories.post_repository import PostRepository
from social_app.repositories.user_repository import UserRepository
from social_app.services.chat_service import ChatService
from social_app.services.notification_service import NotificationService
from social_app.services.post_service import PostService
from social_app.services.user_service import UserService
from social_app.utils.errors import UnauthorizedError
from social_app.utils.realtime_bus import EventDispatcher
from social_app.utils.security import decode_access_token
from social_app.utils.websocket_manager import PresenceRegistry


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


async def resolve_user_from_token(token: Optional[str], db: AsyncIOMotorDatabase) -> dict:
    """Return the user document the bearer ``token`` belongs to."""
    if not token:
        raise UnauthorizedError("Access token is required")
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid or expired token")
    user = await UserRepository(db).get_user_by_id(user_id)
    if not user:
        raise UnauthorizedError("Invalid token - user not found")
    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
) -> dict:
    return await resolve_user_from_token(token, db)


def get_presence_registry(request: Request) -> PresenceRegistry:
    return request.app.state.presence


def get_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


def get_notification_service(
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
) -> NotificationService:
    return NotificationService(NotificationRepository(db), dispatcher)


def get_chat_service(
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
) -> ChatService:
    msg_repo = MessageRepository(db)
    convo_repo = ConversationRepository(db)
    return ChatService(msg_repo, convo_repo, UserRepository(db), dispatcher)


def get_user_service(
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
    notifications: NotificationService = Depends(get_notification_service),
) -> UserService:
    return UserService(UserRepository(db), FollowRepository(db), notifications)


def get_post_service(
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
    notifications: NotificationService = Depends(get_notification_service),
) -> PostService:
    return PostService(PostRepository(db), UserRepository(db), notifications)
