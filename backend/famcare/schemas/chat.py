from datetime import datetime

from pydantic import BaseModel, Field

from famcare.models.chat_message import MAX_MESSAGE_LENGTH


class SendMessageRequest(BaseModel):
    text: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class EditMessageRequest(BaseModel):
    text: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class ChatMessageResponse(BaseModel):
    id: str
    family_id: str
    author_user_id: str
    text: str
    sent_at: datetime
    edited_at: datetime | None = None
