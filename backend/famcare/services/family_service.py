"""Family groups, invite codes and membership changes.

A user belongs to at most one family: membership lives on ``User``
(``family_id``, ``role_in_family``, ``is_family_admin``) instead of a join
table. Leaving or being removed clears those fields; the user row stays.
"""

from __future__ import annotations

import logging
import secrets
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from famcare.core.config import get_settings
from famcare.models.family import Family
from famcare.models.user import ADMIN_ROLE_IN_FAMILY, DEFAULT_ROLE_IN_FAMILY, User
from famcare.services.errors import (
    ConflictError,
    ForbiddenError,
    InviteCodeExhaustedError,
    NotFoundError,
    ValidationFailed,
)

log = logging.getLogger(__name__)
settings = get_settings()

# No 0/O or 1/I/L: codes are typed in by hand.
INVITE_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
MAX_FAMILY_NAME_LENGTH = 200


def generate_invite_code(length: int | None = None) -> str:
    size = length or settings.invite_code_length
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(size))


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()


def clean_family_name(name: str) -> str:
    cleaned = " ".join(str(name or "").split())
    if not cleaned:
        raise ValidationFailed("Family name is required", {"name": ["Family name is required"]})
    if len(cleaned) > MAX_FAMILY_NAME_LENGTH:
        raise ValidationFailed(
            "Family name is too long",
            {"name": [f"Family name must be at most {MAX_FAMILY_NAME_LENGTH} characters"]},
        )
    return cleaned


async def get_family(session: AsyncSession, family_id: UUID) -> Family:
    family = await session.get(Family, family_id)
    if family is None:
        raise NotFoundError("Family", family_id, "Family not found")
    return family


async def _get_user(session: AsyncSession, user_id: UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id, "User not found")
    return user


async def invite_code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(select(Family.id).where(Family.invite_code == code))
    return result.scalar_one_or_none() is not None


async def is_family_admin(session: AsyncSession, family_id: UUID, user_id: UUID | None) -> bool:
    if user_id is None:
        return False
    result = await session.execute(
        select(User.id).where(
            User.id == user_id,
            User.family_id == family_id,
            User.is_family_admin.is_(True),
        )
    )
    return result.scalar_one_or_none() is not None


async def is_family_member(session: AsyncSession, family_id: UUID, user_id: UUID) -> bool:
    result = await session.execute(
        select(User.id).where(User.id == user_id, User.family_id == family_id)
    )
    return result.scalar_one_or_none() is not None


async def require_membership(session: AsyncSession, family_id: UUID, user_id: UUID) -> Family:
    family = await get_family(session, family_id)
    if not await is_family_member(session, family_id, user_id):
        raise ForbiddenError("You are not a member of this family")
    return family


async def _require_admin(session: AsyncSession, family_id: UUID, actor_id: UUID) -> None:
    await get_family(session, family_id)
    if not await is_family_admin(session, family_id, actor_id):
        raise ForbiddenError("Only a family admin can perform this action")


async def _get_member(session: AsyncSession, family_id: UUID, member_id: UUID) -> User:
    result = await session.execute(
        select(User).where(User.id == member_id, User.family_id == family_id)
    )
    member = result.scalar_one_or_none()
    if member is None:
        raise NotFoundError("Member", member_id, "Member not found in this family")
    return member


async def create_family(session: AsyncSession, actor_id: UUID, name: str) -> Family:
    """Create a family with a fresh invite code and make the actor its admin."""
    cleaned_name = clean_family_name(name)
    user = await _get_user(session, actor_id)
    if user.family_id is not None:
        raise ConflictError("User already belongs to a family")

    for attempt in range(1, settings.invite_code_max_attempts + 1):
        code = generate_invite_code()
        if await invite_code_exists(session, code):
            log.warning("invite code collision on attempt %s", attempt)
            continue

        family = Family(name=cleaned_name, invite_code=code)
        session.add(family)
        try:
            await session.flush()
        except IntegrityError:
            # Another request took the same code between check and insert.
            await session.rollback()
            log.warning("invite code collision on insert, attempt %s", attempt)
            user = await _get_user(session, actor_id)
            continue

        user.family_id = family.id
        user.role_in_family = ADMIN_ROLE_IN_FAMILY
        user.is_family_admin = True
        session.add(user)
        await session.commit()
        log.info(
            "family created",
            extra={"family_id": str(family.id), "user_id": str(actor_id)},
        )
        return family

    raise InviteCodeExhaustedError()


async def join_by_code(
    session: AsyncSession,
    actor_id: UUID,
    invite_code: str,
    *,
    user_id: UUID | None = None,
    role_in_family: str | None = None,
    is_admin: bool = False,
) -> tuple[Family, User]:
    """Admit ``user_id`` (the actor by default) into the family owning the code.

    Enrolling another user or granting admin rights needs the actor to be an
    admin of that family.
    """
    code = normalize_invite_code(invite_code)
    if not code:
        raise ValidationFailed("Invite code is required", {"invite_code": ["Invite code is required"]})

    result = await session.execute(select(Family).where(Family.invite_code == code))
    family = result.scalar_one_or_none()
    if family is None:
        raise NotFoundError("Family", code, "No family matches this invite code")

    target_id = user_id or actor_id
    user = await _get_user(session, target_id)
    if user.family_id is not None:
        raise ConflictError("User already belongs to a family")

    if (target_id != actor_id or is_admin) and not await is_family_admin(
        session, family.id, actor_id
    ):
        raise ForbiddenError("Only a family admin can enroll other users or grant admin rights")

    role = (role_in_family or "").strip()
    user.family_id = family.id
    user.role_in_family = role or DEFAULT_ROLE_IN_FAMILY
    user.is_family_admin = is_admin
    session.add(user)
    await session.commit()
    log.info("user joined family", extra={"family_id": str(family.id), "user_id": str(user.id)})
    return family, user


async def list_members(session: AsyncSession, actor_id: UUID, family_id: UUID) -> list[User]:
    await require_membership(session, family_id, actor_id)
    result = await session.execute(
        select(User)
        .where(User.family_id == family_id)
        .order_by(User.is_family_admin.desc(), User.last_name.asc(), User.first_name.asc())
    )
    return list(result.scalars().all())


async def update_member(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    member_id: UUID,
    *,
    role_in_family: str | None = None,
    is_admin: bool | None = None,
) -> User:
    await _require_admin(session, family_id, actor_id)
    member = await _get_member(session, family_id, member_id)

    if role_in_family is not None and role_in_family.strip():
        member.role_in_family = role_in_family.strip()
    if is_admin is not None:
        member.is_family_admin = is_admin
    session.add(member)
    await session.commit()
    return member


def _clear_membership(user: User) -> None:
    user.family_id = None
    user.role_in_family = DEFAULT_ROLE_IN_FAMILY
    user.is_family_admin = False


async def remove_member(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    member_id: UUID,
) -> None:
    await _require_admin(session, family_id, actor_id)
    member = await _get_member(session, family_id, member_id)
    _clear_membership(member)
    session.add(member)
    await session.commit()
    log.info(
        "member removed by admin",
        extra={"family_id": str(family_id), "user_id": str(member_id)},
    )


async def leave_family(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    user_id: UUID | None = None,
) -> None:
    target_id = user_id or actor_id
    await get_family(session, family_id)
    member = await _get_member(session, family_id, target_id)
    if target_id != actor_id and not await is_family_admin(session, family_id, actor_id):
        raise ForbiddenError("Only a family admin can remove other members")

    _clear_membership(member)
    session.add(member)
    await session.commit()
    log.info("member left family", extra={"family_id": str(family_id), "user_id": str(target_id)})
