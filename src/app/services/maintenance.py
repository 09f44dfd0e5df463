"""Background maintenance - token and analytics garbage collection, initial admin bootstrap."""

import asyncio
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.core.config import Settings
from src.app.core.db import get_session
from src.app.core.logging import get_logger
from src.app.core.security import AuthPrimitives
from src.app.models.base import utc_now
from src.app.repositories import (
    AccountRepository,
    AnalyticsEventRepository,
    CredentialTokenRepository,
)
from src.app.services.account_service import AccountService
from src.app.services.analytics_service import AnalyticsService

logger = get_logger(__name__)


async def cleanup_credential_tokens(
    used_retention_hours: int, engine: AsyncEngine | None = None
) -> int:
    """Delete expired tokens and used tokens past the retention window.

    Idempotent: a second run finds nothing to delete.

    Returns:
        Number of tokens deleted
    """
    async with get_session(engine) as session:
        repo = CredentialTokenRepository(session)
        try:
            count = await repo.cleanup(used_retention_hours)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    logger.info("Credential tokens cleaned up", deleted=count)
    return count


async def cleanup_analytics_events(retention_days: int, engine: AsyncEngine | None = None) -> int:
    """Delete analytics events older than ``retention_days``. 0 keeps everything.

    Returns:
        Number of events deleted
    """
    if retention_days <= 0:
        return 0

    async with get_session(engine) as session:
        service = AnalyticsService(AnalyticsEventRepository(session), session)
        count = await service.purge_before(utc_now() - timedelta(days=retention_days))

    logger.info("Analytics events cleaned up", deleted=count, retention_days=retention_days)
    return count


async def run_cleanup_loop(
    interval_minutes: int, used_retention_hours: int, analytics_retention_days: int
) -> None:
    """Run token and analytics cleanup every ``interval_minutes`` until cancelled."""
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            await cleanup_credential_tokens(used_retention_hours)
            await cleanup_analytics_events(analytics_retention_days)
        except Exception as e:
            # Keep the loop alive; the next tick retries
            logger.error("Scheduled cleanup failed", error=str(e))


async def bootstrap_initial_admin(settings: Settings, engine: AsyncEngine | None = None) -> None:
    """Create the configured initial admin account if it does not exist yet."""
    if not settings.initial_admin_email or not settings.initial_admin_password:
        return

    async with get_session(engine) as session:
        service = AccountService(
            AccountRepository(session),
            CredentialTokenRepository(session),
            session,
            AuthPrimitives.from_settings(settings),
        )
        created = await service.ensure_initial_admin(
            settings.initial_admin_email, settings.initial_admin_password
        )

    if created is None:
        logger.info("Initial admin already exists")
