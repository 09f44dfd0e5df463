"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession
from src.app.repositories import (
    AccessGrantRepository,
    AccountRepository,
    AnalyticsEventRepository,
    ContactMessageRepository,
    CredentialTokenRepository,
)


def get_account_repository(session: DBSession) -> AccountRepository:
    return AccountRepository(session)


def get_token_repository(session: DBSession) -> CredentialTokenRepository:
    return CredentialTokenRepository(session)


def get_access_grant_repository(session: DBSession) -> AccessGrantRepository:
    return AccessGrantRepository(session)


def get_analytics_repository(session: DBSession) -> AnalyticsEventRepository:
    return AnalyticsEventRepository(session)


def get_contact_repository(session: DBSession) -> ContactMessageRepository:
    return ContactMessageRepository(session)


AccountRepo = Annotated[AccountRepository, Depends(get_account_repository)]
TokenRepo = Annotated[CredentialTokenRepository, Depends(get_token_repository)]
AccessGrantRepo = Annotated[AccessGrantRepository, Depends(get_access_grant_repository)]
AnalyticsRepo = Annotated[AnalyticsEventRepository, Depends(get_analytics_repository)]
ContactRepo = Annotated[ContactMessageRepository, Depends(get_contact_repository)]
