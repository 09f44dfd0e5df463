"""Model exports - Lobby Pattern.

Import from here: `from src.app.models import Account, AccessGrant`
"""

from src.app.models.access_grant import AccessGrant
from src.app.models.account import Account
from src.app.models.analytics import AnalyticsEvent
from src.app.models.contact import ContactMessage
from src.app.models.enums import (
    AccountRole,
    AccountStatus,
    ContactStatus,
    GrantStatus,
    HttpMethod,
    ProtectedResource,
    TokenType,
)
from src.app.models.credential_token import CredentialToken

__all__ = [
    # Enums
    "AccountRole",
    "AccountStatus",
    "ContactStatus",
    "GrantStatus",
    "HttpMethod",
    "ProtectedResource",
    "TokenType",
    # Models
    "AccessGrant",
    "Account",
    "AnalyticsEvent",
    "ContactMessage",
    "CredentialToken",
]
