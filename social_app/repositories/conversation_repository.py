import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from social_app.models.conversation import ConversationDocument


logger = logging.getLogger(__name__)


def normalize_pair(user_a: str, user_b: str) -> Tuple[str, str]:
    first, second = sorted((user_a, user_b))
    return first, second


def participant_filter(user_id: str) -> Dict[str, Any]:
    return {"$or": [{"participant1_id": user_id}, {"participant2_id": user_id}]}


class ConversationRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["conversations"]

    async def ensure_indexes(self) -> None:
        # one conversation per unordered pair
        await self.collection.create_index(
            [("participant1_id", ASCENDING), ("participant2_id", ASCENDING)], unique=True
        )
        await self.collection.create_index([("participant2_id", ASCENDING)])
        await self.collection.create_index([("updated_at", DESCENDING)])

    async def find_by_pair(self, user_a: str, user_b: str) -> Optional[ConversationDocument]:
        first, second = normalize_pair(user_a, user_b)
        return await self.collection.find_one({"participant1_id": first, "participant2_id": second})

    async def get_or_create_one_to_one(self, user_a: str, user_b: str) -> ConversationDocument:
        existing = await self.find_by_pair(user_a, user_b)
        if existing:
            return existing
        first, second = normalize_pair(user_a, user_b)
        now = datetime.now(timezone.utc)
        doc: ConversationDocument = {
            "participant1_id": first,
            "participant2_id": second,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost the race against a concurrent first message
            logger.debug("Conversation %s/%s created concurrently, reusing it", first, second)
            winner = await self.find_by_pair(first, second)
            if winner is None:
                raise
            return winner
        doc["_id"] = result.inserted_id
        return doc

    async def get_for_participant(self, conversation_id: ObjectId, user_id: str) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"_id": conversation_id, **participant_filter(user_id)})

    async def touch(self, conversation_id: ObjectId, at: Optional[datetime] = None) -> None:
        # $max keeps updated_at monotonic when appends finish out of order
        await self.collection.update_one(
            {"_id": conversation_id},
            {"$max": {"updated_at": at or datetime.now(timezone.utc)}},
        )

    async def list_for_user(self, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[ConversationDocument], int]:
        query = participant_filter(user_id)
        sort = [("updated_at", DESCENDING), ("_id", DESCENDING)]
        cursor = self.collection.find(query).sort(sort).skip(skip).limit(limit)
        items = await cursor.to_list(length=limit)
        total = await self.collection.count_documents(query)
        return items, total
