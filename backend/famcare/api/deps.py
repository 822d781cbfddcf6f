from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from famcare.core.db import get_session
from famcare.core.security import decode_access_token
from famcare.models.user import User
from famcare.services.login_throttle import LoginThrottle, get_login_throttle

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/Auth/Login")


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from the access token, no database round trip."""

    user_id: UUID
    email: str | None
    first_name: str | None
    last_name: str | None
    expires_at: datetime


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> Identity:
    try:
        payload = decode_access_token(token)
        user_id = UUID(str(payload.get("sub")))
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
    except (ValueError, TypeError, KeyError):
        raise _unauthorized()

    return Identity(
        user_id=user_id,
        email=payload.get("email"),
        first_name=payload.get("first_name"),
        last_name=payload.get("last_name"),
        expires_at=expires_at,
    )


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await session.get(User, identity.user_id)
    if not user or not user.is_active:
        raise _unauthorized()
    return user


def get_throttle() -> LoginThrottle:
    return get_login_throttle()
