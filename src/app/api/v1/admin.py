"""Admin account management endpoints (admin role only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from src.app.api.dependencies import AccountServiceDep, AdminAccount
from src.app.models.enums import AccountRole, AccountStatus
from src.app.schemas.account import (
    AccountRead,
    AccountStats,
    RoleUpdateRequest,
    StatusUpdateRequest,
)
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/admin/users", tags=["admin"])

_ADMIN_RESPONSES = {
    401: {"description": "Not authenticated"},
    403: {"description": "Not authorized (admin required)"},
}


@router.get(
    "",
    response_model=PaginatedResponse[AccountRead],
    summary="List accounts",
    description="List accounts with optional role, status and text filters.",
    responses={
        200: {
            "description": "Paginated list of accounts",
            "content": {
                "application/json": {
                    "example": {
                        "items": [
                            {
                                "id": "550e8400-e29b-41d4-a716-446655440000",
                                "email": "user@example.com",
                                "first_name": "John",
                                "last_name": "Doe",
                                "role": "user",
                                "status": "active",
                            }
                        ],
                        "next_cursor": "MjAyNC0wMS0yMFQxNDo0NTowMC4wMDAwMDA=",
                        "has_more": True,
                    }
                }
            },
        },
        **_ADMIN_RESPONSES,
    },
)
async def list_accounts(
    _admin: AdminAccount,
    service: AccountServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of items per page")] = 20,
    role: Annotated[AccountRole | None, Query(description="Filter by role")] = None,
    status: Annotated[AccountStatus | None, Query(description="Filter by status")] = None,
    search: Annotated[
        str | None,
        Query(max_length=100, description="Match email, username or name"),
    ] = None,
) -> PaginatedResponse[AccountRead]:
    accounts, next_cursor, has_more = await service.list_accounts(
        cursor, limit, role=role, status=status, search=search
    )
    return PaginatedResponse(
        items=[AccountRead.model_validate(a) for a in accounts],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get("/stats", response_model=AccountStats, responses=_ADMIN_RESPONSES)
async def account_stats(_admin: AdminAccount, service: AccountServiceDep) -> AccountStats:
    """Account counts by role and by status."""
    return await service.stats()


@router.get(
    "/{account_id}",
    response_model=AccountRead,
    responses={**_ADMIN_RESPONSES, 404: {"description": "Account not found"}},
)
async def get_account(
    account_id: UUID, _admin: AdminAccount, service: AccountServiceDep
) -> AccountRead:
    return AccountRead.model_validate(await service.get_by_id(account_id))


@router.patch(
    "/{account_id}/role",
    response_model=AccountRead,
    responses={
        **_ADMIN_RESPONSES,
        400: {"description": "Role unchanged"},
        404: {"description": "Account not found"},
    },
)
async def update_role(
    account_id: UUID,
    data: RoleUpdateRequest,
    admin: AdminAccount,
    service: AccountServiceDep,
) -> AccountRead:
    """Change an account's role. Admins cannot change their own role."""
    account = await service.update_role(admin, account_id, data.role)
    return AccountRead.model_validate(account)


@router.patch(
    "/{account_id}/status",
    response_model=AccountRead,
    responses={
        **_ADMIN_RESPONSES,
        400: {"description": "Status unchanged"},
        404: {"description": "Account not found"},
    },
)
async def update_status(
    account_id: UUID,
    data: StatusUpdateRequest,
    admin: AdminAccount,
    service: AccountServiceDep,
) -> AccountRead:
    """Change an account's status.

    Moving away from ``active`` deactivates the account and revokes its
    refresh tokens.
    """
    account = await service.update_status(admin, account_id, data.status)
    return AccountRead.model_validate(account)
