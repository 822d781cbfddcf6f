from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index
from sqlmodel import Field, SQLModel

from famcare.models._time import utc_now_naive

MAX_MESSAGE_LENGTH = 4000


class ChatMessage(SQLModel, table=True):
    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_family_sent_at", "family_id", "sent_at"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False)
    author_user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    text: str = Field(nullable=False, max_length=MAX_MESSAGE_LENGTH)
    sent_at: datetime = Field(default_factory=utc_now_naive, sa_type=DateTime, nullable=False)
    edited_at: datetime | None = Field(default=None, sa_type=DateTime)
    is_deleted: bool = Field(default=False, nullable=False)
