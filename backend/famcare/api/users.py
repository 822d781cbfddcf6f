from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from famcare.api.deps import Identity, get_current_identity
from famcare.core.db import get_session
from famcare.core.logger import current_request_id
from famcare.models.user import FAMILY_ROLE_LABELS, family_role_label
from famcare.schemas.user import (
    ProfileResponse,
    RoleItem,
    RolesResponse,
    UpdateProfileRequest,
)
from famcare.services import auth_service

router = APIRouter(prefix="/Users", tags=["users"])


@router.get("/Roles", response_model=RolesResponse)
async def list_roles() -> RolesResponse:
    return RolesResponse(
        role_list=[RoleItem(key=role.value, name=label) for role, label in FAMILY_ROLE_LABELS.items()],
        request_id=current_request_id(),
    )


@router.post("/Info", response_model=ProfileResponse)
async def update_info(
    payload: UpdateProfileRequest,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    user = await auth_service.update_profile(
        session,
        identity.user_id,
        role=payload.role,
        date_of_birth=payload.date_of_birth,
    )
    return ProfileResponse(
        id=str(user.id),
        email=user.email,
        role=user.role.value if user.role else None,
        role_label=family_role_label(user.role),
        date_of_birth=user.date_of_birth,
        message="Profile updated",
    )
