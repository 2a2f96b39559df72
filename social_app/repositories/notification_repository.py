from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from social_app.models.notification import NotificationDocument


class NotificationRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["notifications"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])

    async def create(
        self,
        user_id: str,
        type: str,
        from_user_id: str,
        from_username: str,
        content: str,
        item_id: Optional[str] = None,
        item_type: Optional[str] = None,
    ) -> NotificationDocument:
        doc: NotificationDocument = {
            "user_id": user_id,
            "type": type,
            "from_user_id": from_user_id,
            "from_username": from_username,
            "content": content,
            "item_id": item_id,
            "item_type": item_type,
            "is_read": False,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def list_for_user(
        self, user_id: str, skip: int = 0, limit: int = 20, unread_only: bool = False
    ) -> Tuple[List[NotificationDocument], int]:
        query: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            query["is_read"] = False
        cursor = self.collection.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).skip(skip).limit(limit)
        items = await cursor.to_list(length=limit)
        total = await self.collection.count_documents(query)
        return items, total

    async def count_unread(self, user_id: str) -> int:
        return await self.collection.count_documents({"user_id": user_id, "is_read": False})

    async def mark_read(self, notification_id: ObjectId, user_id: str) -> bool:
        result = await self.collection.update_one(
            {"_id": notification_id, "user_id": user_id},
            {"$set": {"is_read": True}},
        )
        return bool(result.matched_count)

    async def mark_all_read(self, user_id: str) -> int:
        result = await self.collection.update_many(
            {"user_id": user_id, "is_read": False},
            {"$set": {"is_read": True}},
        )
        return result.modified_count or 0

    async def delete(self, notification_id: ObjectId, user_id: str) -> bool:
        result = await self.collection.delete_one({"_id": notification_id, "user_id": user_id})
        return result.deleted_count > 0
