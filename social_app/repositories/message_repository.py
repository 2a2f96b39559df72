from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from social_app.models.message import MessageDocument


NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("conversation_id", ASCENDING), ("created_at", DESCENDING)])
        await self.collection.create_index([("receiver_id", ASCENDING), ("is_read", ASCENDING)])

    async def save_message(
        self,
        conversation_id: ObjectId,
        sender_id: str,
        receiver_id: str,
        content: str,
    ) -> MessageDocument:
        doc: MessageDocument = {
            "conversation_id": conversation_id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "content": content,
            "is_read": False,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def get_page(
        self,
        conversation_id: ObjectId,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[MessageDocument], int]:
        """Return one newest-first page of the conversation and its total size."""
        query = {"conversation_id": conversation_id}
        cursor = self.collection.find(query).sort(NEWEST_FIRST).skip(skip).limit(limit)
        items = await cursor.to_list(length=limit)
        total = await self.collection.count_documents(query)
        return items, total

    async def get_latest(self, conversation_id: ObjectId) -> Optional[MessageDocument]:
        return await self.collection.find_one({"conversation_id": conversation_id}, sort=NEWEST_FIRST)

    async def count_unread(
        self,
        receiver_id: str,
        from_user_id: Optional[str] = None,
        conversation_id: Optional[ObjectId] = None,
    ) -> int:
        query: Dict[str, Any] = {"receiver_id": receiver_id, "is_read": False}
        if from_user_id:
            query["sender_id"] = from_user_id
        if conversation_id is not None:
            query["conversation_id"] = conversation_id
        return await self.collection.count_documents(query)

    async def mark_read(self, receiver_id: str, conversation_id: ObjectId) -> int:
        result = await self.collection.update_many(
            {"conversation_id": conversation_id, "receiver_id": receiver_id, "is_read": False},
            {"$set": {"is_read": True}},
        )
        return result.modified_count or 0

    async def mark_message_read(self, message_id: ObjectId, receiver_id: str) -> bool:
        """Flip one message to read. False when the receiver does not match."""
        result = await self.collection.update_one(
            {"_id": message_id, "receiver_id": receiver_id},
            {"$set": {"is_read": True}},
        )
        return bool(result.matched_count)
