from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict

from bson import ObjectId


class NotificationType(str, Enum):
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    FOLLOW = "FOLLOW"
    MESSAGE = "MESSAGE"


class ItemType(str, Enum):
    POST = "POST"
    COMMENT = "COMMENT"


class NotificationDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    type: str
    from_user_id: str
    from_username: str
    content: str
    item_id: Optional[str]
    item_type: Optional[str]
    is_read: bool
    created_at: datetime
