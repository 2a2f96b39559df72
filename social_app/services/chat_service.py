import logging
from typing import Any, Dict, List, Optional, Tuple

from social_app.repositories.conversation_repository import ConversationRepository
from social_app.repositories.message_repository import MessageRepository
from social_app.repositories.user_repository import UserRepository
from social_app.utils.errors import NotFoundError, ValidationError
from social_app.utils.ids import to_object_id
from social_app.utils.pagination import build_pagination, page_offset
from social_app.utils.realtime_bus import EventDispatcher
from social_app.utils.serializers import serialize_message


logger = logging.getLogger(__name__)


def other_participant(conversation: Dict[str, Any], user_id: str) -> str:
    if conversation["participant1_id"] == user_id:
        return conversation["participant2_id"]
    return conversation["participant1_id"]


def clean_content(content: Optional[str]) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Message content is required")
    return text


class ChatService:
    """Two-party conversations, message ordering and read state."""

    def __init__(
        self,
        message_repo: MessageRepository,
        conversation_repo: ConversationRepository,
        user_repo: UserRepository,
        dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self._message_repo = message_repo
        self._conversation_repo = conversation_repo
        self._user_repo = user_repo
        self._dispatcher = dispatcher

    async def find_or_create_conversation(self, user_a: str, user_b: str) -> Dict[str, Any]:
        if user_a == user_b:
            raise ValidationError("Cannot start conversation with yourself")
        return await self._conversation_repo.get_or_create_one_to_one(user_a, user_b)

    async def start_conversation(self, sender_id: str, receiver_id: Optional[str], content: Optional[str]) -> Dict[str, Any]:
        if not receiver_id or not content:
            raise ValidationError("Receiver ID and message content are required")
        if receiver_id == sender_id:
            raise ValidationError("Cannot start conversation with yourself")
        text = clean_content(content)
        receiver = await self._user_repo.get_user_by_id(receiver_id)
        if not receiver:
            raise NotFoundError("Receiver not found")
        # participants are always stored in the canonical hex form
        conversation = await self.find_or_create_conversation(sender_id, receiver["_id"])
        message = await self._append(conversation, sender_id, text)
        return {"id": str(conversation["_id"]), "message": message}

    async def append_message(self, conversation_id: str, sender_id: str, content: Optional[str]) -> Dict[str, Any]:
        text = clean_content(content)
        conversation = await self._get_conversation(conversation_id, sender_id)
        return await self._append(conversation, sender_id, text)

    async def _append(self, conversation: Dict[str, Any], sender_id: str, content: str) -> Dict[str, Any]:
        receiver_id = other_participant(conversation, sender_id)
        saved = await self._message_repo.save_message(
            conversation_id=conversation["_id"],
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
        )
        await self._conversation_repo.touch(conversation["_id"], saved["created_at"])
        users = await self._user_repo.get_summaries([sender_id, receiver_id])
        message = serialize_message(saved, users)
        if self._dispatcher is not None:
            await self._dispatcher.emit_new_message(receiver_id, message)
        return message

    async def _get_conversation(self, conversation_id: str, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(conversation_id)
        conversation = None
        if oid is not None:
            conversation = await self._conversation_repo.get_for_participant(oid, user_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    async def list_messages(
        self, conversation_id: str, requester_id: str, page: int = 1, limit: int = 50
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Return one page oldest-first and mark the requester's incoming messages read.

        Pages are cut on newest-first order, so ordering only holds within
        a page, not across pages.
        """
        conversation = await self._get_conversation(conversation_id, requester_id)
        marked = await self._message_repo.mark_read(requester_id, conversation["_id"])
        if marked:
            logger.debug("Marked %d messages read for %s in %s", marked, requester_id, conversation["_id"])
        items, total = await self._message_repo.get_page(
            conversation["_id"], skip=page_offset(page, limit), limit=limit
        )
        users = await self._user_repo.get_summaries(
            [conversation["participant1_id"], conversation["participant2_id"]]
        )
        messages = [serialize_message(item, users) for item in reversed(items)]
        return messages, build_pagination(page, limit, total)

    async def mark_message_read(self, message_id: str, requester_id: str) -> None:
        oid = to_object_id(message_id)
        if oid is None or not await self._message_repo.mark_message_read(oid, requester_id):
            raise NotFoundError("Message not found")

    async def get_unread_count(self, user_id: str, from_user_id: Optional[str] = None) -> int:
        if from_user_id:
            oid = to_object_id(from_user_id)
            from_user_id = str(oid) if oid is not None else from_user_id
        return await self._message_repo.count_unread(user_id, from_user_id=from_user_id)

    async def list_conversations(
        self, user_id: str, page: int = 1, limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        conversations, total = await self._conversation_repo.list_for_user(
            user_id, skip=page_offset(page, limit), limit=limit
        )
        latest = {c["_id"]: await self._message_repo.get_latest(c["_id"]) for c in conversations}
        user_ids = {user_id}
        for conversation in conversations:
            user_ids.add(other_participant(conversation, user_id))
        for message in latest.values():
            if message:
                user_ids.update((message["sender_id"], message["receiver_id"]))
        users = await self._user_repo.get_summaries(user_ids)

        items = []
        for conversation in conversations:
            other_id = other_participant(conversation, user_id)
            last_message = latest[conversation["_id"]]
            items.append(
                {
                    "id": str(conversation["_id"]),
                    "other_participant": users.get(other_id) or {"id": other_id, "username": None, "profile_picture": None},
                    "last_message": serialize_message(last_message, users) if last_message else None,
                    "updated_at": conversation.get("updated_at"),
                    "unread_count": await self._message_repo.count_unread(
                        user_id, conversation_id=conversation["_id"]
                    ),
                }
            )
        return items, build_pagination(page, limit, total)
