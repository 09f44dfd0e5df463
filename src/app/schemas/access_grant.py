from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.app.models.enums import GrantStatus, ProtectedResource
from src.app.schemas.account import AccountRead


class AccessRequestCreate(BaseModel):
    resource_id: ProtectedResource
    reason: str | None = Field(None, max_length=500)


class AccessGrantRead(BaseModel):
    id: UUID
    account_id: UUID
    resource_id: ProtectedResource
    resource_name: str
    status: GrantStatus
    request_reason: str | None
    admin_message: str | None
    reviewed_by_id: UUID | None
    reviewed_at: datetime | None
    expires_at: datetime | None
    is_expired: bool
    is_active_access: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApproveRequest(BaseModel):
    admin_message: str | None = Field(None, max_length=500)
    expires_at: datetime | None = Field(
        None, description="Optional expiry; omit for access that never expires"
    )


class DenyRequest(BaseModel):
    admin_message: str | None = Field(None, max_length=500)


class ResourceAccessStatus(BaseModel):
    resource_id: ProtectedResource
    resource_name: str
    has_access: bool
    status: GrantStatus | None = None
    grant_id: UUID | None = None
    expires_at: datetime | None = None


class VerifyAccessResponse(BaseModel):
    """Answer to "may this account enter this resource", consumed by subdomain gates."""

    success: bool = True
    resource_id: ProtectedResource
    has_access: bool
    access_denial_reason: str | None = None
    user: AccountRead


class AccessGrantStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    denied: int = 0
    revoked: int = 0


class PurgeResponse(BaseModel):
    deleted: int
