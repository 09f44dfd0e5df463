"""Account self-service endpoints."""

from fastapi import APIRouter, Response

from src.app.api.cookies import clear_auth_cookies
from src.app.api.dependencies import AccountServiceDep, CurrentAccount, SettingsDep
from src.app.schemas.account import (
    AccountDeleteRequest,
    AccountRead,
    MessageResponse,
    PasswordChangeRequest,
    ProfileUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])

_PROFILE_EXAMPLE = {
    "id": "550e8400-e29b-41d4-a716-446655440000",
    "email": "user@example.com",
    "handle": "jdoe",
    "first_name": "John",
    "last_name": "Doe",
    "role": "user",
    "status": "active",
    "is_active": True,
    "email_verified": True,
    "referral_code": "9F2C4A1B7E3D5C60",
}


@router.get(
    "/me/profile",
    response_model=AccountRead,
    responses={
        200: {
            "description": "Current account profile",
            "content": {"application/json": {"example": _PROFILE_EXAMPLE}},
        },
        401: {"description": "Not authenticated"},
    },
)
async def get_profile(account: CurrentAccount) -> AccountRead:
    """Get the authenticated account's profile."""
    return AccountRead.model_validate(account)


@router.patch(
    "/me/profile",
    response_model=AccountRead,
    responses={
        400: {"description": "Invalid profile field"},
        401: {"description": "Not authenticated"},
        409: {"description": "Username already taken"},
    },
)
async def update_profile(
    data: ProfileUpdate,
    account: CurrentAccount,
    service: AccountServiceDep,
) -> AccountRead:
    """Update names, username, bio or avatar. Omitted fields are left unchanged."""
    updated = await service.update_profile(account, data)
    return AccountRead.model_validate(updated)


@router.post(
    "/me/password",
    response_model=MessageResponse,
    responses={
        400: {"description": "Mismatch, weak or reused password"},
        401: {"description": "Current password is incorrect"},
    },
)
async def change_password(
    data: PasswordChangeRequest,
    account: CurrentAccount,
    service: AccountServiceDep,
) -> MessageResponse:
    await service.change_password(account, data)
    return MessageResponse(message="Password changed successfully")


@router.delete(
    "/me",
    response_model=MessageResponse,
    responses={401: {"description": "Not authenticated or password incorrect"}},
)
async def delete_account(
    data: AccountDeleteRequest,
    account: CurrentAccount,
    response: Response,
    service: AccountServiceDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Deactivate the account and scrub its identifying fields.

    Requires the current password. All sessions are signed out.
    """
    await service.delete_account(account, data.password)
    clear_auth_cookies(response, settings)
    return MessageResponse(message="Account deleted successfully")
