from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):

    model_config = ConfigDict(populate_by_name=True)

    caption: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class CommentCreate(BaseModel):

    content: Optional[str] = None
