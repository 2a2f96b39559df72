from fastapi import APIRouter, Depends, status

from social_app.schemas.user import Token, UserCreate, UserLogin, UserPublic
from social_app.services.user_service import UserService
from social_app.utils.dependencies import get_current_user, get_user_service
from social_app.utils.errors import UnauthorizedError
from social_app.utils.security import create_access_token


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, service: UserService = Depends(get_user_service)):
    return await service.register_user(payload.username, payload.email, payload.password)


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, service: UserService = Depends(get_user_service)):
    user = await service.authenticate_user(payload.email, payload.password)
    if not user:
        raise UnauthorizedError("Invalid email or password")
    return Token(access_token=create_access_token(user["_id"]))


@router.get("/me", response_model=UserPublic)
async def me(current_user: dict = Depends(get_current_user)):
    return UserPublic(
        id=current_user["_id"],
        username=current_user["username"],
        email=current_user["email"],
        profile_picture=current_user.get("profile_picture"),
        bio=current_user.get("bio"),
    )
