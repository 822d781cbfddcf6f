from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from famcare.api.deps import Identity, get_current_identity, get_throttle
from famcare.core.db import get_session
from famcare.models.user import User, family_role_label
from famcare.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UserSummary,
    ValidateResponse,
)
from famcare.services import auth_service, token_service
from famcare.services.login_throttle import LoginThrottle
from famcare.services.token_service import TokenPair

router = APIRouter(prefix="/Auth", tags=["auth"])


def to_user_summary(user: User) -> UserSummary:
    return UserSummary(
        id=str(user.id),
        email=user.email,
        last_name=user.last_name,
        first_name=user.first_name,
        middle_name=user.middle_name,
        role=user.role.value if user.role else None,
        role_label=family_role_label(user.role),
        family_id=str(user.family_id) if user.family_id else None,
        is_verified=user.is_verified,
    )


def to_token_response(pair: TokenPair) -> TokenPairResponse:
    return TokenPairResponse(
        access_token=pair.access_token,
        access_token_expires_at=pair.access_token_expires_at,
        refresh_token=pair.refresh_token,
        refresh_token_expires_at=pair.refresh_token_expires_at,
    )


@router.post("/Registration", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user, pair = await auth_service.register_user(session, payload)
    return AuthResponse(token=to_token_response(pair), user=to_user_summary(user))


@router.post("/Login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
    throttle: LoginThrottle = Depends(get_throttle),
) -> AuthResponse:
    user, pair = await auth_service.login(session, throttle, payload.email, payload.password)
    return AuthResponse(token=to_token_response(pair), user=to_user_summary(user))


@router.post("/Refresh", response_model=TokenPairResponse)
async def refresh(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPairResponse:
    _, pair = await token_service.rotate_refresh_token(session, payload.refresh_token)
    return to_token_response(pair)


@router.get("/Validate", response_model=ValidateResponse)
async def validate(identity: Identity = Depends(get_current_identity)) -> ValidateResponse:
    return ValidateResponse(
        user_id=str(identity.user_id),
        email=identity.email,
        first_name=identity.first_name,
        last_name=identity.last_name,
        expires_at=identity.expires_at,
    )


@router.post("/Logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    payload: LogoutRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> Response:
    if payload is not None and payload.refresh_token:
        await token_service.invalidate_refresh_token(
            session,
            payload.refresh_token,
            user_id=identity.user_id,
        )
    else:
        await token_service.invalidate_all_user_refresh_tokens(session, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
