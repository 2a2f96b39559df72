from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from social_app.models.post import (
    BookmarkDocument,
    CommentDocument,
    CommentLikeDocument,
    LikeDocument,
    PostDocument,
)


POST_ITEM_TYPE = "POST"


class PostRepository:
    """Posts together with the likes, bookmarks and comments hanging off them."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._posts = db.get_collection("posts")
        self._likes = db.get_collection("likes")
        self._bookmarks = db.get_collection("bookmarks")
        self._comments = db.get_collection("comments")
        self._comment_likes = db.get_collection("comment_likes")

    async def ensure_indexes(self) -> None:
        await self._posts.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await self._likes.create_index([("user_id", ASCENDING), ("post_id", ASCENDING)], unique=True)
        await self._bookmarks.create_index(
            [("user_id", ASCENDING), ("item_id", ASCENDING), ("type", ASCENDING)], unique=True
        )
        await self._comments.create_index([("post_id", ASCENDING), ("created_at", ASCENDING)])
        await self._comment_likes.create_index(
            [("user_id", ASCENDING), ("comment_id", ASCENDING)], unique=True
        )
        await self._comment_likes.create_index([("post_id", ASCENDING)])

    async def create_post(self, user_id: str, caption: str, image_url: Optional[str]) -> PostDocument:
        now = datetime.now(timezone.utc)
        doc: PostDocument = {
            "user_id": user_id,
            "caption": caption,
            "image_url": image_url,
            "created_at": now,
            "updated_at": now,
        }
        result = await self._posts.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def get_post(self, post_id: ObjectId) -> Optional[PostDocument]:
        return await self._posts.find_one({"_id": post_id})

    async def get_counts(self, post_id: str) -> Dict[str, int]:
        return {
            "likes": await self._likes.count_documents({"post_id": post_id}),
            "comments": await self._comments.count_documents({"post_id": post_id}),
        }

    async def delete_post_cascade(
        self, post_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> None:
        """Delete the post and everything referencing it.

        Dependents go first so an interrupted run without a session never
        leaves orphans behind a vanished post.
        """
        key = str(post_id)
        await self._comment_likes.delete_many({"post_id": key}, session=session)
        await self._likes.delete_many({"post_id": key}, session=session)
        await self._bookmarks.delete_many({"item_id": key, "type": POST_ITEM_TYPE}, session=session)
        await self._comments.delete_many({"post_id": key}, session=session)
        await self._posts.delete_one({"_id": post_id}, session=session)

    async def find_like(self, user_id: str, post_id: str) -> Optional[LikeDocument]:
        return await self._likes.find_one({"user_id": user_id, "post_id": post_id})

    async def add_like(self, user_id: str, post_id: str) -> None:
        await self._likes.insert_one(
            {"user_id": user_id, "post_id": post_id, "created_at": datetime.now(timezone.utc)}
        )

    async def remove_like(self, like_id: ObjectId) -> None:
        await self._likes.delete_one({"_id": like_id})

    async def find_bookmark(self, user_id: str, item_id: str) -> Optional[BookmarkDocument]:
        return await self._bookmarks.find_one({"user_id": user_id, "item_id": item_id, "type": POST_ITEM_TYPE})

    async def add_bookmark(self, user_id: str, item_id: str) -> None:
        await self._bookmarks.insert_one(
            {
                "user_id": user_id,
                "item_id": item_id,
                "type": POST_ITEM_TYPE,
                "created_at": datetime.now(timezone.utc),
            }
        )

    async def remove_bookmark(self, bookmark_id: ObjectId) -> None:
        await self._bookmarks.delete_one({"_id": bookmark_id})

    async def add_comment(self, user_id: str, post_id: str, content: str) -> CommentDocument:
        doc: CommentDocument = {
            "user_id": user_id,
            "post_id": post_id,
            "content": content,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._comments.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def list_comments(self, post_id: str, limit: int = 100) -> List[CommentDocument]:
        cursor = self._comments.find({"post_id": post_id}).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
        return await cursor.to_list(length=limit)

    async def get_comment(self, comment_id: ObjectId, post_id: str) -> Optional[CommentDocument]:
        return await self._comments.find_one({"_id": comment_id, "post_id": post_id})

    async def find_comment_like(self, user_id: str, comment_id: str) -> Optional[CommentLikeDocument]:
        return await self._comment_likes.find_one({"user_id": user_id, "comment_id": comment_id})

    async def add_comment_like(self, user_id: str, comment_id: str, post_id: str) -> None:
        doc: CommentLikeDocument = {
            "user_id": user_id,
            "comment_id": comment_id,
            "post_id": post_id,
            "created_at": datetime.now(timezone.utc),
        }
        await self._comment_likes.insert_one(doc)

    async def remove_comment_like(self, like_id: ObjectId) -> None:
        await self._comment_likes.delete_one({"_id": like_id})
