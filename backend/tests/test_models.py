import pytest
from sqlalchemy import Date, DateTime

from famcare.models.chat_message import ChatMessage
from famcare.models.family import Family
from famcare.models.refresh_token import RefreshToken
from famcare.models.user import User


@pytest.mark.parametrize(
    "column",
    [
        User.__table__.c.created_at,
        Family.__table__.c.created_at,
        RefreshToken.__table__.c.created_at,
        RefreshToken.__table__.c.expires_at,
        RefreshToken.__table__.c.revoked_at,
        ChatMessage.__table__.c.sent_at,
        ChatMessage.__table__.c.edited_at,
    ],
    ids=lambda column: f"{column.table.name}.{column.name}",
)
def test_timestamps_are_stored_as_naive_utc(column) -> None:
    assert type(column.type) is DateTime
    assert column.type.timezone is False


def test_birth_date_is_a_plain_date_column() -> None:
    assert type(User.__table__.c.date_of_birth.type) is Date


@pytest.mark.asyncio
async def test_naive_timestamps_round_trip(session) -> None:
    family = Family(name="Round Trip", invite_code="ROUNDTRIP234")
    session.add(family)
    await session.commit()

    stored = await session.get(Family, family.id, populate_existing=True)
    assert stored.created_at.tzinfo is None
    assert stored.created_at == family.created_at
