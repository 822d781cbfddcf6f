from datetime import date

from pydantic import BaseModel, field_validator

from famcare.schemas.auth import validate_birth_date, validate_role


class RoleItem(BaseModel):
    key: str
    name: str


class RolesResponse(BaseModel):
    role_list: list[RoleItem]
    code: int = 0
    description: str = "Family roles"
    request_id: str


class UpdateProfileRequest(BaseModel):
    role: str | None = None
    date_of_birth: date | None = None

    @field_validator("role")
    @classmethod
    def _check_role(cls, value: str | None) -> str | None:
        return validate_role(value)

    @field_validator("date_of_birth")
    @classmethod
    def _check_date_of_birth(cls, value: date | None) -> date | None:
        return validate_birth_date(value)


class ProfileResponse(BaseModel):
    id: str
    email: str
    role: str | None = None
    role_label: str | None = None
    date_of_birth: date | None = None
    message: str
