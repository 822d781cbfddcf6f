from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CreateFamilyRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class FamilyResponse(BaseModel):
    id: str
    name: str
    invite_code: str
    created_at: datetime


class JoinByCodeRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=32)
    user_id: UUID | None = None
    role_in_family: str | None = Field(default=None, max_length=50)
    is_admin: bool = False


class JoinByCodeResponse(BaseModel):
    family_id: str
    family_name: str
    user_id: str
    role_in_family: str
    is_admin: bool


class FamilyMemberResponse(BaseModel):
    id: str
    family_id: str
    user_id: str
    full_name: str
    role_in_family: str
    is_admin: bool


class UpdateMemberRequest(BaseModel):
    role_in_family: str | None = Field(default=None, max_length=50)
    is_admin: bool | None = None


class LeaveFamilyRequest(BaseModel):
    user_id: UUID | None = None
