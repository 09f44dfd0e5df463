from src.app.services.access_grant_service import AccessGrantService
from src.app.services.account_service import AccountService
from src.app.services.analytics_service import AnalyticsService
from src.app.services.auth_service import AuthResult, AuthService, ClientInfo, SessionTokens
from src.app.services.contact_service import ContactService

__all__ = [
    "AccessGrantService",
    "AccountService",
    "AnalyticsService",
    "AuthResult",
    "AuthService",
    "ClientInfo",
    "ContactService",
    "SessionTokens",
]
