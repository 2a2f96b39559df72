"""Turn stored documents into the JSON shapes used by REST and realtime."""

from typing import Any, Dict, Mapping, Optional


def _unknown_user(user_id: str) -> Dict[str, Any]:
    return {"id": user_id, "username": None, "profile_picture": None}


def user_summary(user: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(user["_id"]),
        "username": user.get("username"),
        "profile_picture": user.get("profile_picture"),
    }


def serialize_message(
    message: Mapping[str, Any], users: Optional[Mapping[str, Dict[str, Any]]] = None
) -> Dict[str, Any]:
    users = users or {}
    sender_id = message["sender_id"]
    receiver_id = message["receiver_id"]
    return {
        "id": str(message["_id"]),
        "conversation_id": str(message["conversation_id"]),
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": message["content"],
        "is_read": bool(message.get("is_read", False)),
        "created_at": message.get("created_at"),
        "sender": users.get(sender_id) or _unknown_user(sender_id),
        "receiver": users.get(receiver_id) or _unknown_user(receiver_id),
    }


def serialize_notification(notification: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(notification["_id"]),
        "user_id": notification["user_id"],
        "type": notification["type"],
        "from_user_id": notification.get("from_user_id"),
        "from_username": notification.get("from_username"),
        "content": notification.get("content"),
        "item_id": notification.get("item_id"),
        "item_type": notification.get("item_type"),
        "is_read": bool(notification.get("is_read", False)),
        "created_at": notification.get("created_at"),
    }


def notification_event(
    type: str,
    from_user: Mapping[str, Any],
    content: str,
    item_id: Optional[str] = None,
    item_type: Optional[str] = None,
) -> Dict[str, Any]:
    """Transient realtime payload; camelCase like the rest of the socket protocol."""
    return {
        "type": type,
        "fromUser": {
            "id": from_user.get("id"),
            "username": from_user.get("username"),
            "profilePicture": from_user.get("profile_picture"),
        },
        "content": content,
        "itemId": item_id,
        "itemType": item_type,
    }


def serialize_post(post: Mapping[str, Any], counts: Optional[Mapping[str, int]] = None) -> Dict[str, Any]:
    counts = counts or {}
    return {
        "id": str(post["_id"]),
        "user_id": post["user_id"],
        "caption": post.get("caption"),
        "image_url": post.get("image_url"),
        "created_at": post.get("created_at"),
        "updated_at": post.get("updated_at"),
        "likes_count": counts.get("likes", 0),
        "comments_count": counts.get("comments", 0),
    }


def serialize_comment(comment: Mapping[str, Any], author: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "id": str(comment["_id"]),
        "post_id": comment["post_id"],
        "user_id": comment["user_id"],
        "content": comment["content"],
        "created_at": comment.get("created_at"),
        "user": author or _unknown_user(comment["user_id"]),
    }
