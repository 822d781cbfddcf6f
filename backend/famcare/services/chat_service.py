from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from famcare.models._time import utc_now_naive
from famcare.models.chat_message import MAX_MESSAGE_LENGTH, ChatMessage
from famcare.services.errors import ForbiddenError, NotFoundError, ValidationFailed
from famcare.services.family_service import require_membership

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def clamp_take(take: int | None) -> int:
    if take is None:
        return DEFAULT_PAGE_SIZE
    return min(max(take, 1), MAX_PAGE_SIZE)


def clean_message_text(text: str) -> str:
    cleaned = str(text or "").strip()
    if not cleaned:
        raise ValidationFailed("Message text is required", {"text": ["Message text is required"]})
    if len(cleaned) > MAX_MESSAGE_LENGTH:
        raise ValidationFailed(
            "Message text is too long",
            {"text": [f"Message text must be at most {MAX_MESSAGE_LENGTH} characters"]},
        )
    return cleaned


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


async def list_messages(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    *,
    before: datetime | None = None,
    take: int | None = None,
) -> list[ChatMessage]:
    """Return one page of messages sent strictly before ``before``, oldest first."""
    await require_membership(session, family_id, actor_id)

    stmt = select(ChatMessage).where(
        ChatMessage.family_id == family_id,
        ChatMessage.is_deleted.is_(False),
    )
    if before is not None:
        stmt = stmt.where(ChatMessage.sent_at < _as_naive_utc(before))
    stmt = stmt.order_by(ChatMessage.sent_at.desc()).limit(clamp_take(take))

    result = await session.execute(stmt)
    messages = list(result.scalars().all())
    messages.reverse()
    return messages


async def send_message(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    text: str,
) -> ChatMessage:
    cleaned = clean_message_text(text)
    await require_membership(session, family_id, actor_id)

    message = ChatMessage(family_id=family_id, author_user_id=actor_id, text=cleaned)
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def _get_authored_message(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    message_id: UUID,
) -> ChatMessage:
    result = await session.execute(
        select(ChatMessage).where(
            ChatMessage.id == message_id,
            ChatMessage.family_id == family_id,
            ChatMessage.is_deleted.is_(False),
        )
    )
    message = result.scalar_one_or_none()
    if message is None:
        raise NotFoundError("Message", message_id, "Message not found")
    if message.author_user_id != actor_id:
        raise ForbiddenError("Only the author can change this message")
    return message


async def edit_message(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    message_id: UUID,
    text: str,
) -> ChatMessage:
    cleaned = clean_message_text(text)
    message = await _get_authored_message(session, actor_id, family_id, message_id)
    message.text = cleaned
    message.edited_at = utc_now_naive()
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def delete_message(
    session: AsyncSession,
    actor_id: UUID,
    family_id: UUID,
    message_id: UUID,
) -> None:
    message = await _get_authored_message(session, actor_id, family_id, message_id)
    message.is_deleted = True
    message.edited_at = utc_now_naive()
    session.add(message)
    await session.commit()
    log.info("message deleted", extra={"family_id": str(family_id), "user_id": str(actor_id)})
