"""Contact form endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status
from starlette.requests import Request

from src.app.api.dependencies import AdminAccount, ClientInfoDep, ContactServiceDep
from src.app.core.rate_limit import limiter
from src.app.models.enums import ContactStatus
from src.app.schemas.account import MessageResponse
from src.app.schemas.contact import (
    ContactCreate,
    ContactRead,
    ContactStatusUpdate,
    ContactSubmitResponse,
)
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.post(
    "",
    response_model=ContactSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid contact form"}},
)
@limiter.limit("3/minute")
async def submit_contact(
    request: Request,
    data: ContactCreate,
    service: ContactServiceDep,
    client: ClientInfoDep,
) -> ContactSubmitResponse:
    """Send a message to the site administrators. No account required."""
    contact = await service.submit(data, client)
    return ContactSubmitResponse(id=contact.id)


@router.get("", response_model=PaginatedResponse[ContactRead])
async def list_contacts(
    _admin: AdminAccount,
    service: ContactServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of items per page")] = 20,
    status: Annotated[ContactStatus | None, Query(description="Filter by status")] = None,
) -> PaginatedResponse[ContactRead]:
    messages, next_cursor, has_more = await service.list_messages(cursor, limit, status=status)
    return PaginatedResponse(
        items=[ContactRead.model_validate(m) for m in messages],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.patch("/{contact_id}", response_model=ContactRead)
async def update_contact_status(
    contact_id: UUID,
    data: ContactStatusUpdate,
    _admin: AdminAccount,
    service: ContactServiceDep,
) -> ContactRead:
    return ContactRead.model_validate(await service.update_status(contact_id, data.status))


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: UUID, _admin: AdminAccount, service: ContactServiceDep
) -> MessageResponse:
    await service.delete(contact_id)
    return MessageResponse(message="Contact message deleted")
