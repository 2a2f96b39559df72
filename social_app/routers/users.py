from fastapi import APIRouter, Depends

from social_app.services.user_service import UserService
from social_app.utils.dependencies import get_current_user, get_user_service


router = APIRouter(prefix="/users", tags=["community"])


@router.get("/{user_id}")
async def get_profile(user_id: str, current_user: dict = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return {"user": await service.get_profile(user_id)}


@router.post("/{user_id}/follow")
async def follow_user(user_id: str, current_user: dict = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    following = await service.toggle_follow(current_user, user_id)
    return {"following": following}
