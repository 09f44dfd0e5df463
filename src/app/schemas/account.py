from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.app.models.enums import AccountRole, AccountStatus


class AccountRead(BaseModel):
    """Public projection of an account. Secrets and lockout state are never exposed."""

    id: UUID
    email: EmailStr
    handle: str | None
    first_name: str
    last_name: str
    avatar_url: str | None
    bio: str | None
    role: AccountRole
    status: AccountStatus
    is_active: bool
    email_verified: bool
    referral_code: str
    registered_at: datetime
    last_login_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=2, max_length=50)
    last_name: str | None = Field(None, min_length=2, max_length=50)
    handle: str | None = Field(None, max_length=30)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=500, pattern=r"^https?://\S+$")

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        # Only runs for fields present in the body; names may be omitted, never cleared.
        if v is None:
            raise ValueError("Name cannot be null")
        return v

    @field_validator("handle")
    @classmethod
    def validate_handle(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)
    confirm_password: str = Field(min_length=1, max_length=128)


class AccountDeleteRequest(BaseModel):
    password: str = Field(min_length=1, max_length=128)


class RoleUpdateRequest(BaseModel):
    role: AccountRole


class StatusUpdateRequest(BaseModel):
    status: AccountStatus


class AccountStats(BaseModel):
    total: int
    by_role: dict[str, int]
    by_status: dict[str, int]


class MessageResponse(BaseModel):
    message: str
