from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from social_app.models.follow import FollowDocument


class FollowRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("follows")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(
            [("follower_id", ASCENDING), ("following_id", ASCENDING)], unique=True
        )
        await self._collection.create_index([("following_id", ASCENDING)])

    async def get_follow(self, follower_id: str, following_id: str) -> Optional[FollowDocument]:
        return await self._collection.find_one({"follower_id": follower_id, "following_id": following_id})

    async def create_follow(self, follower_id: str, following_id: str) -> str:
        doc: FollowDocument = {
            "follower_id": follower_id,
            "following_id": following_id,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._collection.insert_one(doc)
        return str(result.inserted_id)

    async def delete_follow(self, follower_id: str, following_id: str) -> bool:
        result = await self._collection.delete_one({"follower_id": follower_id, "following_id": following_id})
        return result.deleted_count > 0

    async def count_followers(self, user_id: str) -> int:
        return await self._collection.count_documents({"following_id": user_id})

    async def count_following(self, user_id: str) -> int:
        return await self._collection.count_documents({"follower_id": user_id})
