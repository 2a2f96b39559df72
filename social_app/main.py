import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient

from social_app.config import get_settings
from social_app.database.connection import close_mongo_connection, connect_to_mongo, get_database
from social_app.logging_config import configure_logging
from social_app.repositories.conversation_repository import ConversationRepository
from social_app.repositories.follow_repository import FollowRepository
from social_app.repositories.message_repository import MessageRepository
from social_app.repositories.notification_repository import NotificationRepository
from social_app.repositories.post_repository import PostRepository
from social_app.repositories.user_repository import UserRepository
from social_app.routers.auth import router as auth_router
from social_app.routers.chat import router as chat_router
from social_app.routers.conversations import router as conversations_router
from social_app.routers.notifications import router as notifications_router
from social_app.routers.posts import router as posts_router
from social_app.routers.presence import router as presence_router
from social_app.routers.realtime import router as realtime_router
from social_app.routers.users import router as users_router
from social_app.utils.errors import AppError
from social_app.utils.realtime_bus import EventDispatcher
from social_app.utils.websocket_manager import PresenceRegistry


logger = logging.getLogger(__name__)


async def ensure_indexes(db) -> None:
    for repository in (
        UserRepository(db),
        ConversationRepository(db),
        MessageRepository(db),
        NotificationRepository(db),
        PostRepository(db),
        FollowRepository(db),
    ):
        await repository.ensure_indexes()


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": {"code": "VALIDATION_ERROR", "message": "Invalid request", "details": details}},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"}},
        )


def create_app(mongo_client: Optional[AsyncIOMotorClient] = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):

        db = await connect_to_mongo(mongo_client)
        await ensure_indexes(db)
        try:
            yield
        finally:
            await close_mongo_connection()

    app = FastAPI(title="Social community API", lifespan=lifespan)

    # process-local presence; rebuilt as clients reconnect
    app.state.presence = PresenceRegistry()
    app.state.dispatcher = EventDispatcher(app.state.presence)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(conversations_router)
    app.include_router(chat_router)
    app.include_router(presence_router)
    app.include_router(notifications_router)
    app.include_router(posts_router)
    app.include_router(realtime_router)

    @app.get("/")
    async def root():

        db = get_database()
        collections = await db.list_collection_names()
        return {"message": "Connected to MongoDB!", "collections": collections}

    return app


app = create_app()
