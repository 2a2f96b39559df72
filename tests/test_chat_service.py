from datetime import datetime, timedelta, timezone

import pytest

from social_app.repositories.conversation_repository import ConversationRepository
from social_app.repositories.message_repository import MessageRepository
from social_app.repositories.user_repository import UserRepository
from social_app.services.chat_service import ChatService
from social_app.utils.errors import NotFoundError, ValidationError
from social_app.utils.realtime_bus import EventDispatcher
from social_app.utils.websocket_manager import PresenceRegistry


pytestmark = pytest.mark.anyio


@pytest.fixture
def registry():
    return PresenceRegistry()


@pytest.fixture
def service(db, registry):
    return ChatService(MessageRepository(db), ConversationRepository(db), UserRepository(db), EventDispatcher(registry))


@pytest.fixture
async def users(db):
    repo = UserRepository(db)
    ids = {}
    for name in ("alice", "bob", "carol"):
        ids[name] = await repo.create_user(name, f"{name}@example.com", "x")
    return ids


async def test_find_or_create_is_idempotent_for_unordered_pair(service, users):
    first = await service.find_or_create_conversation(users["alice"], users["bob"])
    again = await service.find_or_create_conversation(users["alice"], users["bob"])
    reversed_pair = await service.find_or_create_conversation(users["bob"], users["alice"])

    assert first["_id"] == again["_id"] == reversed_pair["_id"]


async def test_cannot_converse_with_self(service, users):
    with pytest.raises(ValidationError):
        await service.find_or_create_conversation(users["alice"], users["alice"])


async def test_concurrent_creation_falls_back_to_existing(db, users, monkeypatch):
    repo = ConversationRepository(db)
    existing = await repo.get_or_create_one_to_one(users["alice"], users["bob"])

    original = repo.find_by_pair
    calls = []

    async def miss_first_lookup(user_a, user_b):
        calls.append((user_a, user_b))
        if len(calls) == 1:
            return None
        return await original(user_a, user_b)

    monkeypatch.setattr(repo, "find_by_pair", miss_first_lookup)

    conversation = await repo.get_or_create_one_to_one(users["bob"], users["alice"])

    assert conversation["_id"] == existing["_id"]
    assert await db["conversations"].count_documents({}) == 1


async def test_whitespace_content_is_rejected_and_not_stored(db, service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])

    with pytest.raises(ValidationError):
        await service.append_message(str(conversation["_id"]), users["alice"], "   \n\t")

    assert await db["messages"].count_documents({}) == 0


async def test_append_resolves_receiver_and_touches_conversation(db, service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])
    before = (await db["conversations"].find_one({"_id": conversation["_id"]}))["updated_at"]

    message = await service.append_message(str(conversation["_id"]), users["bob"], "  hello alice  ")

    after = (await db["conversations"].find_one({"_id": conversation["_id"]}))["updated_at"]
    assert after >= before
    assert message["sender_id"] == users["bob"]
    assert message["receiver_id"] == users["alice"]
    assert message["content"] == "hello alice"
    assert message["is_read"] is False
    assert message["sender"]["username"] == "bob"


async def test_outsider_cannot_append(service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])

    with pytest.raises(NotFoundError):
        await service.append_message(str(conversation["_id"]), users["carol"], "let me in")


async def test_malformed_conversation_id_is_not_found(service, users):
    with pytest.raises(NotFoundError):
        await service.append_message("not-an-id", users["alice"], "hi")


async def test_listing_marks_only_requesters_incoming_messages(db, service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])
    convo_id = str(conversation["_id"])
    to_bob = await service.append_message(convo_id, users["alice"], "hi bob")
    to_alice = await service.append_message(convo_id, users["bob"], "hi alice")

    # alice reads: only the message addressed to her flips
    await service.list_messages(convo_id, users["alice"])
    stored = {str(m["_id"]): m["is_read"] async for m in db["messages"].find({})}
    assert stored[to_alice["id"]] is True
    assert stored[to_bob["id"]] is False

    messages, _ = await service.list_messages(convo_id, users["bob"])
    assert [m["is_read"] for m in messages] == [True, True]


async def test_outsider_listing_is_not_found(service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])

    with pytest.raises(NotFoundError):
        await service.list_messages(str(conversation["_id"]), users["carol"])


async def test_pages_are_cut_newest_first_and_flipped(service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])
    convo_id = str(conversation["_id"])
    for text in ("one", "two", "three"):
        await service.append_message(convo_id, users["alice"], text)

    first_page, pagination = await service.list_messages(convo_id, users["bob"], page=1, limit=2)
    second_page, _ = await service.list_messages(convo_id, users["bob"], page=2, limit=2)

    assert [m["content"] for m in first_page] == ["two", "three"]
    assert [m["content"] for m in second_page] == ["one"]
    assert pagination == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "total_pages": 2,
        "has_next": True,
        "has_prev": False,
    }


async def test_mark_message_read_requires_receiver(db, service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])
    message = await service.append_message(str(conversation["_id"]), users["alice"], "ping")

    with pytest.raises(NotFoundError):
        await service.mark_message_read(message["id"], users["alice"])
    with pytest.raises(NotFoundError):
        await service.mark_message_read(message["id"], users["carol"])
    assert (await db["messages"].find_one({}))["is_read"] is False

    await service.mark_message_read(message["id"], users["bob"])
    assert (await db["messages"].find_one({}))["is_read"] is True


async def test_unread_count_by_sender(service, users):
    with_alice = await service.find_or_create_conversation(users["alice"], users["bob"])
    with_carol = await service.find_or_create_conversation(users["carol"], users["bob"])
    await service.append_message(str(with_alice["_id"]), users["alice"], "a1")
    await service.append_message(str(with_alice["_id"]), users["alice"], "a2")
    await service.append_message(str(with_carol["_id"]), users["carol"], "c1")

    assert await service.get_unread_count(users["bob"]) == 3
    assert await service.get_unread_count(users["bob"], from_user_id=users["alice"]) == 2
    assert await service.get_unread_count(users["alice"]) == 0


async def test_conversations_ordered_by_last_activity(db, service, users):
    with_bob = await service.find_or_create_conversation(users["alice"], users["bob"])
    with_carol = await service.find_or_create_conversation(users["alice"], users["carol"])
    await service.append_message(str(with_bob["_id"]), users["bob"], "older")
    await service.append_message(str(with_carol["_id"]), users["carol"], "newer")

    repo = ConversationRepository(db)
    base = datetime.now(timezone.utc) + timedelta(days=1)
    await repo.touch(with_carol["_id"], base)
    await repo.touch(with_bob["_id"], base + timedelta(minutes=5))

    items, pagination = await service.list_conversations(users["alice"])

    assert [item["other_participant"]["username"] for item in items] == ["bob", "carol"]
    assert items[0]["last_message"]["content"] == "older"
    assert items[0]["unread_count"] == 1
    assert pagination["total"] == 2

    items, _ = await service.list_conversations(users["bob"])
    assert [item["other_participant"]["id"] for item in items] == [users["alice"]]


async def test_conversation_without_messages_has_no_last_message(service, users):
    await service.find_or_create_conversation(users["alice"], users["bob"])

    items, _ = await service.list_conversations(users["alice"])

    assert items[0]["last_message"] is None
    assert items[0]["unread_count"] == 0


async def test_new_message_is_pushed_to_online_receiver(registry, service, users, make_connection):
    connection, websocket = make_connection()
    registry.connect(users["bob"], connection)
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])

    message = await service.append_message(str(conversation["_id"]), users["alice"], "you there?")

    assert len(websocket.sent) == 1
    assert websocket.sent[0]["event"] == "newMessage"
    assert websocket.sent[0]["data"]["id"] == message["id"]


async def test_start_conversation_requires_existing_receiver(service, users):
    with pytest.raises(NotFoundError):
        await service.start_conversation(users["alice"], "64b7f0c2a1b2c3d4e5f60718", "hi")
    with pytest.raises(ValidationError):
        await service.start_conversation(users["alice"], None, "hi")
    with pytest.raises(ValidationError):
        await service.start_conversation(users["alice"], users["alice"], "hi")


async def test_touch_never_moves_updated_at_backwards(db, service, users):
    conversation = await service.find_or_create_conversation(users["alice"], users["bob"])
    repo = ConversationRepository(db)
    later = datetime.now(timezone.utc) + timedelta(hours=1)
    await repo.touch(conversation["_id"], later)
    stamped = (await db["conversations"].find_one({"_id": conversation["_id"]}))["updated_at"]

    # an append that started earlier finishes last
    await repo.touch(conversation["_id"], later - timedelta(minutes=30))

    assert (await db["conversations"].find_one({"_id": conversation["_id"]}))["updated_at"] == stamped
