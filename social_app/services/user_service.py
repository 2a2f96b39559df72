from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from social_app.models.notification import NotificationType
from social_app.repositories.follow_repository import FollowRepository
from social_app.repositories.user_repository import UserRepository
from social_app.schemas.user import UserPublic
from social_app.services.notification_service import NotificationService
from social_app.utils.errors import NotFoundError, ValidationError
from social_app.utils.security import hash_password, verify_password


class UserService:
    """Registration, login and the follow graph."""

    def __init__(
        self,
        user_repository: UserRepository,
        follow_repository: Optional[FollowRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.user_repository = user_repository
        self.follow_repository = follow_repository
        self.notification_service = notification_service

    async def register_user(self, username: str, email: str, password: str) -> UserPublic:
        """
        Register a new user
        - Reject an email or username that is already taken
        - Hash the password
        - Create the user document
        """
        if await self.user_repository.get_user_by_email(email):
            raise ValidationError("Email already registered")
        if await self.user_repository.get_user_by_username(username):
            raise ValidationError("Username already taken")

        hashed_password = hash_password(password)
        try:
            new_id = await self.user_repository.create_user(
                username=username,
                email=email,
                hashed_password=hashed_password,
            )
        except DuplicateKeyError as exc:
            raise ValidationError("Email or username already registered") from exc

        return UserPublic(id=new_id, username=username, email=email)

    async def authenticate_user(self, email: str, password: str) -> Optional[dict]:
        """
        Check login credentials
        - Look the user up by email
        - Verify the password
        - Return the user document when both match
        """
        user = await self.user_repository.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.get("hashed_password", "")):
            return None

        return user

    async def toggle_follow(self, follower: Dict[str, Any], following_id: str) -> bool:
        """Follow ``following_id`` or undo an existing follow. Returns the new state."""
        follower_id = follower["_id"]
        target = await self.user_repository.get_user_by_id(following_id)
        if not target:
            raise NotFoundError("User not found")
        following_id = target["_id"]
        if follower_id == following_id:
            raise ValidationError("Cannot follow yourself")

        if await self.follow_repository.get_follow(follower_id, following_id):
            await self.follow_repository.delete_follow(follower_id, following_id)
            return False

        try:
            await self.follow_repository.create_follow(follower_id, following_id)
        except DuplicateKeyError:
            # a concurrent request already created it
            return True
        if self.notification_service is not None:
            await self.notification_service.notify(
                following_id,
                NotificationType.FOLLOW.value,
                follower,
                f"{follower.get('username')} started following you",
            )
        return True

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = await self.user_repository.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return {
            "id": user["_id"],
            "username": user.get("username"),
            "profile_picture": user.get("profile_picture"),
            "bio": user.get("bio"),
            "followers_count": await self.follow_repository.count_followers(user["_id"]),
            "following_count": await self.follow_repository.count_following(user["_id"]),
        }
