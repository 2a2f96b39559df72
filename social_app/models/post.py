from datetime import datetime
from typing import Optional, TypedDict

from bson import ObjectId


class PostDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    caption: str
    image_url: Optional[str]
    created_at: datetime
    updated_at: datetime


class LikeDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    post_id: str
    created_at: datetime


class BookmarkDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    item_id: str
    type: str
    created_at: datetime


class CommentDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    post_id: str
    content: str
    created_at: datetime


class CommentLikeDocument(TypedDict, total=False):
    _id: ObjectId
    user_id: str
    comment_id: str
    # owning post, for the delete cascade
    post_id: str
    created_at: datetime
