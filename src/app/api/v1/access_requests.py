"""Access request endpoints - request, check and review access to protected subdomains."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status
from starlette.requests import Request

from src.app.api.dependencies import (
    AccessGrantServiceDep,
    AdminAccount,
    ClientInfoDep,
    CurrentAccount,
)
from src.app.core.rate_limit import limiter
from src.app.models.enums import GrantStatus, ProtectedResource
from src.app.schemas.access_grant import (
    AccessGrantRead,
    AccessGrantStats,
    AccessRequestCreate,
    ApproveRequest,
    DenyRequest,
    PurgeResponse,
    ResourceAccessStatus,
    VerifyAccessResponse,
)
from src.app.schemas.account import AccountRead
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/access-requests", tags=["access-requests"])

_ADMIN_RESPONSES = {
    401: {"description": "Not authenticated"},
    403: {"description": "Not authorized (admin required)"},
}
_REVIEW_RESPONSES = {
    **_ADMIN_RESPONSES,
    404: {"description": "Access request not found"},
    409: {"description": "Request is not in a state that allows this transition"},
}


@router.post(
    "",
    response_model=AccessGrantRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {
            "description": "Pending access request created",
            "content": {
                "application/json": {
                    "example": {
                        "id": "6fa459ea-ee8a-3ca4-894e-db77e160355e",
                        "resource_id": "ai-trl",
                        "resource_name": "AI Training & Learning Platform",
                        "status": "pending",
                        "request_reason": "Joining the spring cohort",
                    }
                }
            },
        },
        400: {"description": "Unknown resource"},
        409: {"description": "Pending request or active access already exists"},
    },
)
@limiter.limit("10/minute")
async def submit_request(
    request: Request,
    data: AccessRequestCreate,
    account: CurrentAccount,
    service: AccessGrantServiceDep,
    client: ClientInfoDep,
) -> AccessGrantRead:
    """Request access to a protected resource. Admins are notified by email."""
    grant = await service.submit(account, data.resource_id, data.reason, client)
    return AccessGrantRead.model_validate(grant)


@router.get("/mine", response_model=list[AccessGrantRead])
async def my_requests(
    account: CurrentAccount, service: AccessGrantServiceDep
) -> list[AccessGrantRead]:
    """All access requests made by the authenticated account, newest first."""
    grants = await service.list_for_account(account)
    return [AccessGrantRead.model_validate(g) for g in grants]


@router.get("/status", response_model=list[ResourceAccessStatus])
async def access_status(
    account: CurrentAccount, service: AccessGrantServiceDep
) -> list[ResourceAccessStatus]:
    """Access status for every protected resource."""
    return await service.access_status(account)


@router.get("/status/{resource_id}", response_model=ResourceAccessStatus)
async def resource_access_status(
    resource_id: ProtectedResource,
    account: CurrentAccount,
    service: AccessGrantServiceDep,
) -> ResourceAccessStatus:
    statuses = await service.access_status(account, resource_id)
    return statuses[0]


@router.get(
    "/verify-access/{resource_id}",
    response_model=VerifyAccessResponse,
    responses={
        200: {
            "description": "Access decision for the authenticated account",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "resource_id": "ai-tutot",
                        "has_access": False,
                        "access_denial_reason": "Your access request is pending review",
                        "user": {"id": "550e8400-e29b-41d4-a716-446655440000"},
                    }
                }
            },
        },
        400: {"description": "Unknown resource"},
        401: {"description": "Not authenticated"},
    },
)
async def verify_access(
    resource_id: ProtectedResource,
    account: CurrentAccount,
    service: AccessGrantServiceDep,
) -> VerifyAccessResponse:
    """Decide whether the authenticated account may enter ``resource_id``.

    Called by subdomain gates after token validation.
    """
    has_access, reason = await service.check_access(account, resource_id)
    return VerifyAccessResponse(
        resource_id=resource_id,
        has_access=has_access,
        access_denial_reason=reason,
        user=AccountRead.model_validate(account),
    )


# Administration


@router.get(
    "/admin",
    response_model=PaginatedResponse[AccessGrantRead],
    summary="List access requests",
    responses=_ADMIN_RESPONSES,
)
async def list_requests(
    _admin: AdminAccount,
    service: AccessGrantServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of items per page")] = 20,
    status: Annotated[GrantStatus | None, Query(description="Filter by status")] = None,
    resource_id: Annotated[
        ProtectedResource | None, Query(description="Filter by resource")
    ] = None,
) -> PaginatedResponse[AccessGrantRead]:
    grants, next_cursor, has_more = await service.list_grants(
        cursor, limit, status=status, resource=resource_id
    )
    return PaginatedResponse(
        items=[AccessGrantRead.model_validate(g) for g in grants],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/admin/pending",
    response_model=PaginatedResponse[AccessGrantRead],
    summary="List pending access requests",
    responses=_ADMIN_RESPONSES,
)
async def list_pending_requests(
    _admin: AdminAccount,
    service: AccessGrantServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of items per page")] = 20,
) -> PaginatedResponse[AccessGrantRead]:
    grants, next_cursor, has_more = await service.list_grants(
        cursor, limit, status=GrantStatus.PENDING
    )
    return PaginatedResponse(
        items=[AccessGrantRead.model_validate(g) for g in grants],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get("/admin/stats", response_model=AccessGrantStats, responses=_ADMIN_RESPONSES)
async def request_stats(
    _admin: AdminAccount, service: AccessGrantServiceDep
) -> AccessGrantStats:
    return await service.stats()


@router.post(
    "/admin/{grant_id}/approve", response_model=AccessGrantRead, responses=_REVIEW_RESPONSES
)
async def approve_request(
    grant_id: UUID,
    admin: AdminAccount,
    service: AccessGrantServiceDep,
    data: ApproveRequest | None = None,
) -> AccessGrantRead:
    """Approve a pending request. Omit ``expires_at`` for access that never expires."""
    data = data or ApproveRequest()
    grant = await service.approve(admin, grant_id, data.admin_message, data.expires_at)
    return AccessGrantRead.model_validate(grant)


@router.post(
    "/admin/{grant_id}/deny", response_model=AccessGrantRead, responses=_REVIEW_RESPONSES
)
async def deny_request(
    grant_id: UUID,
    admin: AdminAccount,
    service: AccessGrantServiceDep,
    data: DenyRequest | None = None,
) -> AccessGrantRead:
    data = data or DenyRequest()
    grant = await service.deny(admin, grant_id, data.admin_message)
    return AccessGrantRead.model_validate(grant)


@router.post(
    "/admin/{grant_id}/revoke", response_model=AccessGrantRead, responses=_REVIEW_RESPONSES
)
async def revoke_access(
    grant_id: UUID,
    admin: AdminAccount,
    service: AccessGrantServiceDep,
    data: DenyRequest | None = None,
) -> AccessGrantRead:
    """Revoke an approved grant, effective on the next gate check."""
    grant = await service.revoke(admin, grant_id, data.admin_message if data else None)
    return AccessGrantRead.model_validate(grant)


@router.post(
    "/admin/{grant_id}/clear-expiration",
    response_model=AccessGrantRead,
    responses=_REVIEW_RESPONSES,
)
async def clear_expiration(
    grant_id: UUID, admin: AdminAccount, service: AccessGrantServiceDep
) -> AccessGrantRead:
    grant = await service.clear_expiration(admin, grant_id)
    return AccessGrantRead.model_validate(grant)


@router.delete("/admin", response_model=PurgeResponse, responses=_ADMIN_RESPONSES)
async def purge_requests(admin: AdminAccount, service: AccessGrantServiceDep) -> PurgeResponse:
    """Delete every access request. Irreversible."""
    return PurgeResponse(deleted=await service.purge(admin))
