from datetime import datetime
from typing import TypedDict

from bson import ObjectId


class ConversationDocument(TypedDict, total=False):
    _id: ObjectId
    # normalized unordered pair: participant1_id < participant2_id
    participant1_id: str
    participant2_id: str
    created_at: datetime
    updated_at: datetime
