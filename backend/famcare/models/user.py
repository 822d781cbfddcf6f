from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import EmailStr
from sqlalchemy import Column, Date, DateTime, String
from sqlmodel import Field, SQLModel

from famcare.models._time import utc_now_naive

DEFAULT_ROLE_IN_FAMILY = "Member"
ADMIN_ROLE_IN_FAMILY = "Admin"


class FamilyRole(str, Enum):
    GRANDMA = "grandma"
    GRANDPA = "grandpa"
    MOM = "mom"
    DAD = "dad"
    DAUGHTER = "daughter"
    SON = "son"


# Stored values stay language neutral; clients are shown these labels.
FAMILY_ROLE_LABELS: dict[FamilyRole, str] = {
    FamilyRole.GRANDMA: "Бабушка",
    FamilyRole.GRANDPA: "Дедушка",
    FamilyRole.MOM: "Мама",
    FamilyRole.DAD: "Папа",
    FamilyRole.DAUGHTER: "Дочь",
    FamilyRole.SON: "Сын",
}

_ROLE_LOOKUP: dict[str, FamilyRole] = {
    **{role.value: role for role in FamilyRole},
    **{label.lower(): role for role, label in FAMILY_ROLE_LABELS.items()},
}


def parse_family_role(value: str | None) -> FamilyRole | None:
    """Resolve a role key or display label; ``None`` when it is not a known role."""
    if value is None:
        return None
    return _ROLE_LOOKUP.get(value.strip().lower())


def family_role_label(role: FamilyRole | None) -> str | None:
    return FAMILY_ROLE_LABELS.get(role) if role else None


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    email: EmailStr = Field(
        sa_column=Column(String(320), unique=True, index=True, nullable=False)
    )
    hashed_password: str = Field(nullable=False, max_length=255)
    last_name: str = Field(nullable=False, max_length=100)
    first_name: str = Field(nullable=False, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=32)
    date_of_birth: date | None = Field(default=None, sa_type=Date)
    role: FamilyRole | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    is_verified: bool = Field(default=False, nullable=False)
    is_premium: bool = Field(default=False, nullable=False)
    family_id: UUID | None = Field(default=None, foreign_key="families.id", index=True)
    role_in_family: str = Field(default=DEFAULT_ROLE_IN_FAMILY, nullable=False, max_length=50)
    is_family_admin: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, sa_type=DateTime, nullable=False)

    @property
    def full_name(self) -> str:
        parts = [self.last_name, self.first_name, self.middle_name]
        return " ".join(part for part in parts if part)
