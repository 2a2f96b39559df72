from datetime import datetime
from typing import TypedDict

from bson import ObjectId


class MessageDocument(TypedDict, total=False):
    _id: ObjectId
    conversation_id: ObjectId
    sender_id: str
    receiver_id: str
    content: str
    # unread -> read only
    is_read: bool
    created_at: datetime
