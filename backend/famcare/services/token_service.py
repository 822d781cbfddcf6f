from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from famcare.core import security
from famcare.core.config import get_settings
from famcare.models._time import utc_now_naive
from famcare.models.refresh_token import RefreshToken
from famcare.models.user import User
from famcare.services.errors import InvalidRefreshTokenError

log = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime


def create_access_token(user: User) -> tuple[str, datetime]:
    return security.create_access_token(
        str(user.id),
        {
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
        },
    )


def _stage_refresh_token(session: AsyncSession, user: User) -> tuple[str, datetime]:
    raw = security.new_refresh_token_value()
    expires_at = utc_now_naive() + timedelta(days=settings.refresh_token_expire_days)
    session.add(
        RefreshToken(
            user_id=user.id,
            token_hash=security.hash_refresh_token(raw),
            expires_at=expires_at,
        )
    )
    return raw, expires_at.replace(tzinfo=UTC)


async def issue_refresh_token(session: AsyncSession, user: User) -> tuple[str, datetime]:
    raw, expires_at = _stage_refresh_token(session, user)
    await session.commit()
    return raw, expires_at


def stage_token_pair(session: AsyncSession, user: User) -> TokenPair:
    access_token, access_expires_at = create_access_token(user)
    refresh_token, refresh_expires_at = _stage_refresh_token(session, user)
    return TokenPair(
        access_token=access_token,
        access_token_expires_at=access_expires_at,
        refresh_token=refresh_token,
        refresh_token_expires_at=refresh_expires_at,
    )


async def issue_token_pair(session: AsyncSession, user: User) -> TokenPair:
    pair = stage_token_pair(session, user)
    await session.commit()
    return pair


async def invalidate_refresh_token(
    session: AsyncSession,
    token: str,
    *,
    user_id: UUID | None = None,
) -> None:
    """Revoke one refresh token. Unknown tokens are ignored silently."""
    stmt = select(RefreshToken).where(
        RefreshToken.token_hash == security.hash_refresh_token(token),
        RefreshToken.revoked_at.is_(None),
    )
    if user_id is not None:
        stmt = stmt.where(RefreshToken.user_id == user_id)
    result = await session.execute(stmt)
    refresh_token = result.scalar_one_or_none()
    if refresh_token is None:
        return
    refresh_token.revoked_at = utc_now_naive()
    session.add(refresh_token)
    await session.commit()


async def invalidate_all_user_refresh_tokens(session: AsyncSession, user_id: UUID) -> int:
    now = utc_now_naive()
    result = await session.execute(
        select(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.revoked_at.is_(None),
            RefreshToken.expires_at > now,
        )
    )
    tokens = result.scalars().all()
    for refresh_token in tokens:
        refresh_token.revoked_at = now
        session.add(refresh_token)
    await session.commit()
    log.info("revoked %s refresh tokens", len(tokens), extra={"user_id": str(user_id)})
    return len(tokens)


async def rotate_refresh_token(session: AsyncSession, token: str) -> tuple[User, TokenPair]:
    """Exchange a refresh token for a new pair; the presented token is spent.

    Missing, revoked and expired tokens all fail the same way. The
    conditional UPDATE only matches a still-valid row, so two concurrent
    rotations of one token cannot both succeed.
    """
    now = utc_now_naive()
    token_hash = security.hash_refresh_token(token)

    lookup = await session.execute(
        select(RefreshToken.user_id).where(RefreshToken.token_hash == token_hash)
    )
    user_id = lookup.scalar_one_or_none()
    if user_id is None:
        raise InvalidRefreshTokenError()

    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        raise InvalidRefreshTokenError()

    revoked = await session.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked_at.is_(None),
            RefreshToken.expires_at > now,
        )
        .values(revoked_at=now)
        .execution_options(synchronize_session=False)
    )
    if revoked.rowcount != 1:
        await session.rollback()
        raise InvalidRefreshTokenError()

    pair = stage_token_pair(session, user)
    await session.commit()
    log.info("refresh token rotated", extra={"user_id": str(user.id)})
    return user, pair
