from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from famcare.api.deps import Identity, get_current_identity
from famcare.core.db import get_session
from famcare.models.chat_message import ChatMessage
from famcare.models.family import Family
from famcare.models.user import User
from famcare.schemas.chat import ChatMessageResponse, EditMessageRequest, SendMessageRequest
from famcare.schemas.family import (
    CreateFamilyRequest,
    FamilyMemberResponse,
    FamilyResponse,
    JoinByCodeRequest,
    JoinByCodeResponse,
    LeaveFamilyRequest,
    UpdateMemberRequest,
)
from famcare.services import chat_service, family_service

router = APIRouter(prefix="/families", tags=["families"])


def _to_family_response(family: Family) -> FamilyResponse:
    return FamilyResponse(
        id=str(family.id),
        name=family.name,
        invite_code=family.invite_code,
        created_at=family.created_at,
    )


def _to_member_response(family_id: UUID, user: User) -> FamilyMemberResponse:
    return FamilyMemberResponse(
        id=str(user.id),
        family_id=str(family_id),
        user_id=str(user.id),
        full_name=user.full_name,
        role_in_family=user.role_in_family,
        is_admin=user.is_family_admin,
    )


def _to_message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=str(message.id),
        family_id=str(message.family_id),
        author_user_id=str(message.author_user_id),
        text=message.text,
        sent_at=message.sent_at,
        edited_at=message.edited_at,
    )


@router.post("", response_model=FamilyResponse, status_code=status.HTTP_201_CREATED)
async def create_family(
    payload: CreateFamilyRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> FamilyResponse:
    family = await family_service.create_family(session, identity.user_id, payload.name)
    return _to_family_response(family)


@router.post("/join-by-code", response_model=JoinByCodeResponse)
async def join_by_code(
    payload: JoinByCodeRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> JoinByCodeResponse:
    family, user = await family_service.join_by_code(
        session,
        identity.user_id,
        payload.invite_code,
        user_id=payload.user_id,
        role_in_family=payload.role_in_family,
        is_admin=payload.is_admin,
    )
    return JoinByCodeResponse(
        family_id=str(family.id),
        family_name=family.name,
        user_id=str(user.id),
        role_in_family=user.role_in_family,
        is_admin=user.is_family_admin,
    )


@router.get("/{family_id}/members", response_model=list[FamilyMemberResponse])
async def list_members(
    family_id: UUID,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> list[FamilyMemberResponse]:
    members = await family_service.list_members(session, identity.user_id, family_id)
    return [_to_member_response(family_id, member) for member in members]


@router.patch("/{family_id}/members/{member_id}", response_model=FamilyMemberResponse)
async def update_member(
    family_id: UUID,
    member_id: UUID,
    payload: UpdateMemberRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> FamilyMemberResponse:
    member = await family_service.update_member(
        session,
        identity.user_id,
        family_id,
        member_id,
        role_in_family=payload.role_in_family,
        is_admin=payload.is_admin,
    )
    return _to_member_response(family_id, member)


@router.delete("/{family_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    family_id: UUID,
    member_id: UUID,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await family_service.remove_member(session, identity.user_id, family_id, member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{family_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_family(
    family_id: UUID,
    payload: LeaveFamilyRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await family_service.leave_family(
        session,
        identity.user_id,
        family_id,
        payload.user_id if payload else None,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{family_id}/messages", response_model=list[ChatMessageResponse])
async def list_messages(
    family_id: UUID,
    before: datetime | None = Query(default=None),
    take: int | None = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> list[ChatMessageResponse]:
    messages = await chat_service.list_messages(
        session,
        identity.user_id,
        family_id,
        before=before,
        take=take,
    )
    return [_to_message_response(message) for message in messages]


@router.post(
    "/{family_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    family_id: UUID,
    payload: SendMessageRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> ChatMessageResponse:
    message = await chat_service.send_message(session, identity.user_id, family_id, payload.text)
    return _to_message_response(message)


@router.patch("/{family_id}/messages/{message_id}", response_model=ChatMessageResponse)
async def edit_message(
    family_id: UUID,
    message_id: UUID,
    payload: EditMessageRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> ChatMessageResponse:
    message = await chat_service.edit_message(
        session,
        identity.user_id,
        family_id,
        message_id,
        payload.text,
    )
    return _to_message_response(message)


@router.delete("/{family_id}/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    family_id: UUID,
    message_id: UUID,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await chat_service.delete_message(session, identity.user_id, family_id, message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
