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
from src.app.schemas.account import (
    AccountDeleteRequest,
    AccountRead,
    AccountStats,
    MessageResponse,
    PasswordChangeRequest,
    ProfileUpdate,
    RoleUpdateRequest,
    StatusUpdateRequest,
)
from src.app.schemas.analytics import TrackEventRequest, TrackEventResponse
from src.app.schemas.auth import (
    AuthResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    RefreshRequest,
    ResendVerificationRequest,
    SignInRequest,
    SignUpRequest,
    TokenValidation,
    ValidateTokenResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from src.app.schemas.contact import (
    ContactCreate,
    ContactRead,
    ContactStatusUpdate,
    ContactSubmitResponse,
)
from src.app.schemas.pagination import PaginatedResponse

__all__ = [
    # Access grants
    "AccessGrantRead",
    "AccessGrantStats",
    "AccessRequestCreate",
    "ApproveRequest",
    "DenyRequest",
    "PurgeResponse",
    "ResourceAccessStatus",
    "VerifyAccessResponse",
    # Accounts
    "AccountDeleteRequest",
    "AccountRead",
    "AccountStats",
    "MessageResponse",
    "PasswordChangeRequest",
    "ProfileUpdate",
    "RoleUpdateRequest",
    "StatusUpdateRequest",
    # Analytics
    "TrackEventRequest",
    "TrackEventResponse",
    # Auth
    "AuthResponse",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "PasswordResetRequestResponse",
    "RefreshRequest",
    "ResendVerificationRequest",
    "SignInRequest",
    "SignUpRequest",
    "TokenValidation",
    "ValidateTokenResponse",
    "VerifyEmailRequest",
    "VerifyEmailResponse",
    # Contacts
    "ContactCreate",
    "ContactRead",
    "ContactStatusUpdate",
    "ContactSubmitResponse",
    # Pagination
    "PaginatedResponse",
]
