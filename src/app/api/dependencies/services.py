"""Service factory dependencies.

Shared collaborators (auth primitives, email service, notification queue) are
built once from settings; tests swap them via ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession, SessionFactoryDep
from src.app.api.dependencies.repositories import (
    AccessGrantRepo,
    AccountRepo,
    AnalyticsRepo,
    ContactRepo,
    TokenRepo,
)
from src.app.core.config import Settings, get_settings
from src.app.core.notifications import EmailService, NotificationQueue, get_notification_queue
from src.app.core.security import AuthPrimitives
from src.app.services import (
    AccessGrantService,
    AccountService,
    AnalyticsService,
    AuthService,
    ContactService,
)


@lru_cache
def get_auth_primitives() -> AuthPrimitives:
    return AuthPrimitives.from_settings(get_settings())


@lru_cache
def get_email_service() -> EmailService:
    return EmailService.from_settings(get_settings())


SettingsDep = Annotated[Settings, Depends(get_settings)]
AuthPrimitivesDep = Annotated[AuthPrimitives, Depends(get_auth_primitives)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
NotificationQueueDep = Annotated[NotificationQueue, Depends(get_notification_queue)]


def get_auth_service(
    account_repo: AccountRepo,
    token_repo: TokenRepo,
    session: DBSession,
    primitives: AuthPrimitivesDep,
    email_service: EmailServiceDep,
    notifications: NotificationQueueDep,
    settings: SettingsDep,
) -> AuthService:
    return AuthService(
        account_repo,
        token_repo,
        session,
        primitives,
        email_service,
        notifications,
        settings,
    )


def get_account_service(
    account_repo: AccountRepo,
    token_repo: TokenRepo,
    session: DBSession,
    primitives: AuthPrimitivesDep,
) -> AccountService:
    return AccountService(account_repo, token_repo, session, primitives)


def get_access_grant_service(
    grant_repo: AccessGrantRepo,
    account_repo: AccountRepo,
    session: DBSession,
    email_service: EmailServiceDep,
    notifications: NotificationQueueDep,
) -> AccessGrantService:
    return AccessGrantService(grant_repo, account_repo, session, email_service, notifications)


def get_contact_service(
    contact_repo: ContactRepo,
    session: DBSession,
    email_service: EmailServiceDep,
    notifications: NotificationQueueDep,
    session_factory: SessionFactoryDep,
) -> ContactService:
    return ContactService(contact_repo, session, email_service, notifications, session_factory)


def get_analytics_service(analytics_repo: AnalyticsRepo, session: DBSession) -> AnalyticsService:
    return AnalyticsService(analytics_repo, session)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
AccessGrantServiceDep = Annotated[AccessGrantService, Depends(get_access_grant_service)]
ContactServiceDep = Annotated[ContactService, Depends(get_contact_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
