"""Repository layer - data access abstraction."""

from src.app.repositories.access_grant import AccessGrantRepository
from src.app.repositories.account import AccountRepository
from src.app.repositories.analytics import AnalyticsEventRepository
from src.app.repositories.base import BaseRepository
from src.app.repositories.contact import ContactMessageRepository
from src.app.repositories.credential_token import CredentialTokenRepository

__all__ = [
    "AccessGrantRepository",
    "AccountRepository",
    "AnalyticsEventRepository",
    "BaseRepository",
    "ContactMessageRepository",
    "CredentialTokenRepository",
]
