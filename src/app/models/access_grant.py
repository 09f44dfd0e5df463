"""Access grant model - per-account approval for a protected subdomain resource."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import GrantStatus, ProtectedResource


class AccessGrant(SQLModel, table=True):
    """Request for, and decision on, access to one protected resource."""

    __tablename__ = "access_grants"
    __table_args__ = (
        # At most one pending request per (account, resource)
        Index(
            "uq_access_grants_pending",
            "account_id",
            "resource_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_access_grants_account_resource_status", "account_id", "resource_id", "status"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: UUID = Field(foreign_key="accounts.id", index=True)
    resource_id: str = Field(max_length=32)
    status: str = Field(default=GrantStatus.PENDING.value, max_length=20, index=True)
    request_reason: str | None = Field(default=None, max_length=500)
    admin_message: str | None = Field(default=None, max_length=500)
    reviewed_by_id: UUID | None = Field(default=None, foreign_key="accounts.id")
    reviewed_at: datetime | None = Field(default=None)
    expires_at: datetime | None = Field(default=None)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=500)
    request_source: str = Field(default="dashboard", max_length=32)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def resource(self) -> ProtectedResource:
        return ProtectedResource(self.resource_id)

    @property
    def resource_name(self) -> str:
        return self.resource.display_name

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= utc_now()

    @property
    def is_active_access(self) -> bool:
        """Approved and not past its expiry."""
        return self.status == GrantStatus.APPROVED.value and not self.is_expired
