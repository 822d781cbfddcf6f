import re
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from famcare.models.user import parse_family_role

PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]{6,20}$")
MIN_BIRTH_DATE = date(1900, 1, 1)


def validate_birth_date(value: date | None) -> date | None:
    if value is None:
        return None
    if value > date.today():
        raise ValueError("Birth date cannot be in the future")
    if value < MIN_BIRTH_DATE:
        raise ValueError("Birth date cannot be before 1900-01-01")
    return value


def validate_role(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    if parse_family_role(value) is None:
        raise ValueError("Unknown family role")
    return value.strip()


class RegisterRequest(BaseModel):
    last_name: str = Field(min_length=1, max_length=100)
    first_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    phone: str | None = None
    birth_date: date | None = None
    role: str | None = None

    @field_validator("last_name", "first_name")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank")
        return value

    @field_validator("middle_name")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number has an invalid format")
        return value.strip()

    @field_validator("birth_date")
    @classmethod
    def _check_birth_date(cls, value: date | None) -> date | None:
        return validate_birth_date(value)

    @field_validator("role")
    @classmethod
    def _check_role(cls, value: str | None) -> str | None:
        return validate_role(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1, max_length=512)


class LogoutRequest(BaseModel):
    refresh_token: str | None = Field(default=None, max_length=512)


class UserSummary(BaseModel):
    id: str
    email: EmailStr
    last_name: str
    first_name: str
    middle_name: str | None = None
    role: str | None = None
    role_label: str | None = None
    family_id: str | None = None
    is_verified: bool


class TokenPairResponse(BaseModel):
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    token: TokenPairResponse
    user: UserSummary


class ValidateResponse(BaseModel):
    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    expires_at: datetime
