from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StartConversationRequest(BaseModel):

    model_config = ConfigDict(populate_by_name=True)

    receiver_id: Optional[str] = Field(default=None, alias="receiverId")
    content: Optional[str] = None


class SendMessageRequest(BaseModel):

    content: Optional[str] = None
