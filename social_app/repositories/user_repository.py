from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from social_app.models.user import UserDocument
from social_app.utils.ids import to_object_id


SUMMARY_PROJECTION = {"username": 1, "profile_picture": 1}


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("users")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("email", ASCENDING)], unique=True)
        await self._collection.create_index([("username", ASCENDING)], unique=True)

    async def create_user(self, username: str, email: str, hashed_password: str) -> str:

        doc: UserDocument = {
            "username": username,
            "email": email,
            "hashed_password": hashed_password,
            "profile_picture": None,
            "bio": None,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._collection.insert_one(doc)
        return str(result.inserted_id)

    async def get_user_by_email(self, email: str) -> Optional[UserDocument]:

        user = await self._collection.find_one({"email": email})
        if user:
            user["_id"] = str(user["_id"])  # normalize to string for API layer
        return user

    async def get_user_by_username(self, username: str) -> Optional[UserDocument]:
        user = await self._collection.find_one({"username": username})
        if user:
            user["_id"] = str(user["_id"])
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[UserDocument]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        user = await self._collection.find_one({"_id": oid})
        if user:
            user["_id"] = str(user["_id"])
        return user

    async def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Map user id -> ``{id, username, profile_picture}`` for the known ids."""
        oids = [oid for oid in (to_object_id(uid) for uid in set(user_ids)) if oid is not None]
        if not oids:
            return {}
        cursor = self._collection.find({"_id": {"$in": oids}}, SUMMARY_PROJECTION)
        summaries: Dict[str, Dict[str, Any]] = {}
        async for doc in cursor:
            uid = str(doc["_id"])
            summaries[uid] = {
                "id": uid,
                "username": doc.get("username"),
                "profile_picture": doc.get("profile_picture"),
            }
        return summaries
