"""FastAPI dependency injection definitions.

Re-exports all dependencies for convenience.
"""

from src.app.api.dependencies.auth import (
    AdminAccount,
    ClientInfoDep,
    CurrentAccount,
    OptionalAccountId,
    extract_access_token,
    get_client_info,
    get_current_account,
    get_optional_account_id,
    require_admin,
    resolve_account_id,
)
from src.app.api.dependencies.db import (
    DBSession,
    SessionFactoryDep,
    get_db_session,
    get_session_factory,
)
from src.app.api.dependencies.repositories import (
    AccessGrantRepo,
    AccountRepo,
    AnalyticsRepo,
    ContactRepo,
    TokenRepo,
    get_access_grant_repository,
    get_account_repository,
    get_analytics_repository,
    get_contact_repository,
    get_token_repository,
)
from src.app.api.dependencies.services import (
    AccessGrantServiceDep,
    AccountServiceDep,
    AnalyticsServiceDep,
    AuthPrimitivesDep,
    AuthServiceDep,
    ContactServiceDep,
    EmailServiceDep,
    NotificationQueueDep,
    SettingsDep,
    get_access_grant_service,
    get_account_service,
    get_analytics_service,
    get_auth_primitives,
    get_auth_service,
    get_contact_service,
    get_email_service,
)

__all__ = [
    # Database
    "DBSession",
    "SessionFactoryDep",
    "get_db_session",
    "get_session_factory",
    # Auth
    "AdminAccount",
    "ClientInfoDep",
    "CurrentAccount",
    "OptionalAccountId",
    "extract_access_token",
    "get_client_info",
    "get_current_account",
    "get_optional_account_id",
    "require_admin",
    "resolve_account_id",
    # Repositories
    "AccessGrantRepo",
    "AccountRepo",
    "AnalyticsRepo",
    "ContactRepo",
    "TokenRepo",
    "get_access_grant_repository",
    "get_account_repository",
    "get_analytics_repository",
    "get_contact_repository",
    "get_token_repository",
    # Services
    "AccessGrantServiceDep",
    "AccountServiceDep",
    "AnalyticsServiceDep",
    "AuthPrimitivesDep",
    "AuthServiceDep",
    "ContactServiceDep",
    "EmailServiceDep",
    "NotificationQueueDep",
    "SettingsDep",
    "get_access_grant_service",
    "get_account_service",
    "get_analytics_service",
    "get_auth_primitives",
    "get_auth_service",
    "get_contact_service",
    "get_email_service",
]
