import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession, AsyncIOMotorDatabase

from social_app.config import get_settings


logger = logging.getLogger(__name__)

T = TypeVar("T")

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None
_owns_client = False


async def connect_to_mongo(client: Optional[AsyncIOMotorClient] = None) -> AsyncIOMotorDatabase:
    """Open the shared Motor client. A prebuilt ``client`` is used as-is."""
    global _client, _database, _owns_client
    settings = get_settings()
    _owns_client = client is None
    _client = client if client is not None else AsyncIOMotorClient(settings.mongo_url, tz_aware=True)
    _database = _client[settings.mongo_db_name]
    logger.info("Connected to MongoDB database %s", settings.mongo_db_name)
    return _database


async def close_mongo_connection() -> None:
    global _client, _database, _owns_client
    # injected clients belong to the caller
    if _client is not None and _owns_client:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    _database = None
    _owns_client = False


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("MongoDB client is not connected")
    return _client


def get_database() -> AsyncIOMotorDatabase:
    if _database is None:
        raise RuntimeError("MongoDB client is not connected")
    return _database


async def mongo_db_dependency() -> AsyncIOMotorDatabase:
    return get_database()


async def run_in_transaction(callback: Callable[[Optional[AsyncIOMotorClientSession]], Awaitable[T]]) -> T:
    """Run ``callback`` inside a multi-document transaction.

    With ``MONGO_TRANSACTIONS`` disabled (standalone servers) the callback
    runs without a session and each write commits on its own.
    """
    if not get_settings().mongo_transactions:
        return await callback(None)
    async with await get_client().start_session() as session:
        return await session.with_transaction(callback)


__all__ = [
    "connect_to_mongo",
    "close_mongo_connection",
    "get_client",
    "get_database",
    "mongo_db_dependency",
    "run_in_transaction",
]
