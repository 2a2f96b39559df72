from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):

    email: EmailStr


class UserCreate(UserBase):

    username: str = Field(min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(min_length=8)


class UserLogin(UserBase):

    password: str


class UserPublic(UserBase):

    id: str
    username: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None


class Token(BaseModel):

    access_token: str
    token_type: str = "bearer"
