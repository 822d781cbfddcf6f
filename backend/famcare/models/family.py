from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from famcare.models._time import utc_now_naive


class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=200, nullable=False)
    invite_code: str = Field(index=True, unique=True, nullable=False, max_length=12)
    created_at: datetime = Field(default_factory=utc_now_naive, sa_type=DateTime, nullable=False)
