from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from famcare.models._time import utc_now_naive


class RefreshToken(SQLModel, table=True):
    """Opaque refresh credential. Only the SHA-256 of the value is stored."""

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    token_hash: str = Field(unique=True, index=True, nullable=False, max_length=64)
    created_at: datetime = Field(default_factory=utc_now_naive, sa_type=DateTime, nullable=False)
    expires_at: datetime = Field(sa_type=DateTime, nullable=False)
    revoked_at: datetime | None = Field(default=None, sa_type=DateTime)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_valid(self, now: datetime) -> bool:
        return not self.is_revoked and self.expires_at > now
