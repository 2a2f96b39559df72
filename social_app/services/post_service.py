import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from social_app.database.connection import run_in_transaction
from social_app.models.notification import ItemType, NotificationType
from social_app.repositories.post_repository import PostRepository
from social_app.repositories.user_repository import UserRepository
from social_app.services.notification_service import NotificationService
from social_app.utils.errors import ForbiddenError, NotFoundError, ValidationError
from social_app.utils.ids import to_object_id
from social_app.utils.serializers import serialize_comment, serialize_post, user_summary


logger = logging.getLogger(__name__)


class PostService:

    def __init__(
        self,
        post_repo: PostRepository,
        user_repo: UserRepository,
        notification_service: NotificationService,
    ) -> None:
        self._post_repo = post_repo
        self._user_repo = user_repo
        self._notifications = notification_service

    async def _get_post(self, post_id: str) -> Dict[str, Any]:
        oid = to_object_id(post_id)
        post = await self._post_repo.get_post(oid) if oid is not None else None
        if not post:
            raise NotFoundError("Post not found")
        return post

    async def create_post(self, user_id: str, caption: Optional[str], image_url: Optional[str] = None) -> Dict[str, Any]:
        text = (caption or "").strip()
        if not text:
            raise ValidationError("Caption is required")
        post = await self._post_repo.create_post(user_id, text, image_url)
        return serialize_post(post)

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        post = await self._get_post(post_id)
        counts = await self._post_repo.get_counts(str(post["_id"]))
        return serialize_post(post, counts)

    async def delete_post(self, post_id: str, user_id: str) -> None:
        post = await self._get_post(post_id)
        if post["user_id"] != user_id:
            raise ForbiddenError("Not authorized to delete this post")

        async def _cascade(session) -> None:
            await self._post_repo.delete_post_cascade(post["_id"], session=session)

        await run_in_transaction(_cascade)
        logger.info("Post %s deleted with its likes, bookmarks and comments", post["_id"])

    async def toggle_like(self, post_id: str, user: Dict[str, Any]) -> bool:
        post = await self._get_post(post_id)
        key = str(post["_id"])
        existing = await self._post_repo.find_like(user["_id"], key)
        if existing:
            await self._post_repo.remove_like(existing["_id"])
            return False
        try:
            await self._post_repo.add_like(user["_id"], key)
        except DuplicateKeyError:
            return True
        await self._notifications.notify(
            post["user_id"],
            NotificationType.LIKE.value,
            user,
            f"{user.get('username')} liked your post",
            item_id=key,
            item_type=ItemType.POST.value,
        )
        return True

    async def toggle_bookmark(self, post_id: str, user_id: str) -> bool:
        post = await self._get_post(post_id)
        key = str(post["_id"])
        existing = await self._post_repo.find_bookmark(user_id, key)
        if existing:
            await self._post_repo.remove_bookmark(existing["_id"])
            return False
        try:
            await self._post_repo.add_bookmark(user_id, key)
        except DuplicateKeyError:
            pass
        return True

    async def add_comment(self, post_id: str, user: Dict[str, Any], content: Optional[str]) -> Dict[str, Any]:
        text = (content or "").strip()
        if not text:
            raise ValidationError("Comment content is required")
        post = await self._get_post(post_id)
        key = str(post["_id"])
        comment = await self._post_repo.add_comment(user["_id"], key, text)
        await self._notifications.notify(
            post["user_id"],
            NotificationType.COMMENT.value,
            user,
            f"{user.get('username')} commented on your post",
            item_id=key,
            item_type=ItemType.POST.value,
        )
        return serialize_comment(comment, user_summary(user))

    async def toggle_comment_like(self, post_id: str, comment_id: str, user: Dict[str, Any]) -> bool:
        post = await self._get_post(post_id)
        oid = to_object_id(comment_id)
        comment = await self._post_repo.get_comment(oid, str(post["_id"])) if oid is not None else None
        if not comment:
            raise NotFoundError("Comment not found")
        key = str(comment["_id"])
        existing = await self._post_repo.find_comment_like(user["_id"], key)
        if existing:
            await self._post_repo.remove_comment_like(existing["_id"])
            return False
        try:
            await self._post_repo.add_comment_like(user["_id"], key, str(post["_id"]))
        except DuplicateKeyError:
            return True
        await self._notifications.notify(
            comment["user_id"],
            NotificationType.LIKE.value,
            user,
            f"{user.get('username')} liked your comment",
            item_id=key,
            item_type=ItemType.COMMENT.value,
        )
        return True

    async def list_comments(self, post_id: str) -> List[Dict[str, Any]]:
        post = await self._get_post(post_id)
        comments = await self._post_repo.list_comments(str(post["_id"]))
        authors = await self._user_repo.get_summaries(c["user_id"] for c in comments)
        return [serialize_comment(c, authors.get(c["user_id"])) for c in comments]
