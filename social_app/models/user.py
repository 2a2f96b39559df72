from datetime import datetime
from typing import Optional, TypedDict


class UserDocument(TypedDict, total=False):

    _id: str
    username: str
    email: str
    hashed_password: str
    profile_picture: Optional[str]
    bio: Optional[str]
    created_at: datetime
