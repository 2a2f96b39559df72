from datetime import datetime
from typing import TypedDict

from bson import ObjectId


class FollowDocument(TypedDict, total=False):
    _id: ObjectId
    follower_id: str
    following_id: str
    created_at: datetime
