from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from famcare.core.security import burn_password_check, hash_password, verify_password
from famcare.models.user import User, parse_family_role
from famcare.schemas.auth import RegisterRequest
from famcare.services.errors import ConflictError, InvalidCredentialsError, NotFoundError
from famcare.services.login_throttle import LoginThrottle
from famcare.services.token_service import TokenPair, stage_token_pair

log = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email is already registered"


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id, "User not found")
    return user


async def register_user(session: AsyncSession, payload: RegisterRequest) -> tuple[User, TokenPair]:
    email = normalize_email(payload.email)
    if await get_user_by_email(session, email) is not None:
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        last_name=payload.last_name,
        first_name=payload.first_name,
        middle_name=payload.middle_name,
        phone=payload.phone,
        date_of_birth=payload.birth_date,
        role=parse_family_role(payload.role),
    )
    session.add(user)
    try:
        # The unique index on email decides concurrent registrations.
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc

    pair = stage_token_pair(session, user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
    log.info("user registered", extra={"user_id": str(user.id)})
    return user, pair


async def authenticate(
    session: AsyncSession,
    throttle: LoginThrottle,
    email: str,
    password: str,
) -> User:
    key = throttle.key_for(email)
    # The attempt is reserved up front; locked keys never reach the hasher.
    remaining = await throttle.acquire(key)

    user = await get_user_by_email(session, email)
    if user is None:
        burn_password_check(password)
        verified = False
    else:
        verified = verify_password(password, user.hashed_password) and user.is_active

    if not verified:
        if remaining == 0:
            log.warning("login locked for %ss", throttle.window_seconds)
        else:
            log.info("login failed, %s attempts remaining", remaining)
        raise InvalidCredentialsError(attempts_remaining=remaining)

    await throttle.reset(key)
    return user


async def login(
    session: AsyncSession,
    throttle: LoginThrottle,
    email: str,
    password: str,
) -> tuple[User, TokenPair]:
    user = await authenticate(session, throttle, email, password)
    pair = stage_token_pair(session, user)
    await session.commit()
    log.info("user logged in", extra={"user_id": str(user.id)})
    return user, pair


async def update_profile(
    session: AsyncSession,
    user_id: UUID,
    *,
    role: str | None = None,
    date_of_birth: date | None = None,
) -> User:
    user = await get_user(session, user_id)
    if role is not None:
        user.role = parse_family_role(role)
    if date_of_birth is not None:
        user.date_of_birth = date_of_birth
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user
