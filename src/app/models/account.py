"""Account model - identity, credentials and login bookkeeping."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import AccountRole, AccountStatus


class Account(SQLModel, table=True):
    """A registered account.

    Emails are stored lowercased so uniqueness is case-insensitive. Accounts are
    never hard-deleted; deletion scrubs identifying fields and deactivates.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        # Several accounts may have no handle; present handles must be unique
        Index("ix_accounts_handle", "handle", unique=True),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    handle: str | None = Field(default=None, max_length=30)
    hashed_password: str = Field(max_length=255)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    avatar_url: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=500)
    role: str = Field(default=AccountRole.USER.value, max_length=20)
    is_active: bool = Field(default=True)
    status: str = Field(default=AccountStatus.ACTIVE.value, max_length=20)
    email_verified: bool = Field(default=False)
    email_verified_at: datetime | None = Field(default=None)

    failed_login_attempts: int = Field(default=0)
    lock_until: datetime | None = Field(default=None)
    last_login_at: datetime | None = Field(default=None)
    last_login_ip: str | None = Field(default=None, max_length=64)
    registered_at: datetime = Field(default_factory=utc_now)
    registration_ip: str | None = Field(default=None, max_length=64)

    referred_by_id: UUID | None = Field(default=None, foreign_key="accounts.id")
    referral_code: str = Field(max_length=16, unique=True, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_locked(self) -> bool:
        return self.lock_until is not None and self.lock_until > utc_now()

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN.value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
