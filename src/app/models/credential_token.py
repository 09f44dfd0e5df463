"""Credential token storage - verification, password reset and refresh tokens."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import TokenType


class CredentialToken(SQLModel, table=True):
    """A single-use or renewable secret bound to an account.

    Only the sha256 hash of the secret is stored. A token is consumable iff it is
    unused and unexpired; once used it is never valid again.
    """

    __tablename__ = "credential_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: UUID = Field(foreign_key="accounts.id", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    token_type: str = Field(default=TokenType.REFRESH.value, max_length=32, index=True)
    expires_at: datetime = Field(index=True)
    used: bool = Field(default=False)
    used_at: datetime | None = Field(default=None)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_valid(self) -> bool:
        return not self.used and self.expires_at > utc_now()
