"""Analytics service - records API requests and client-reported page views.

Reporting and aggregation over the stored events live outside this service.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.logging import get_logger
from src.app.models import AnalyticsEvent
from src.app.models.base import utc_now
from src.app.repositories import AnalyticsEventRepository
from src.app.schemas.analytics import TrackEventRequest
from src.app.services.auth_service import ClientInfo

logger = get_logger(__name__)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def build_event(
    *,
    path: str,
    method: str,
    session_id: str,
    status_code: int,
    client: ClientInfo,
    account_id: UUID | None = None,
    referer: str | None = None,
    response_time_ms: float = 0.0,
    client_tracked: bool = False,
    occurred_at: datetime | None = None,
) -> AnalyticsEvent:
    """Build an event with its day and hour buckets filled in."""
    occurred_at = _naive_utc(occurred_at) if occurred_at else utc_now()
    return AnalyticsEvent(
        path=path[:500],
        method=method.upper(),
        account_id=account_id,
        session_id=session_id,
        ip_address=client.ip_address,
        user_agent=(client.user_agent or "Unknown")[:500],
        referer=referer[:500] if referer else None,
        status_code=status_code,
        response_time_ms=round(response_time_ms, 1),
        client_tracked=client_tracked,
        occurred_at=occurred_at,
        date_bucket=occurred_at.strftime("%Y-%m-%d"),
        hour_bucket=occurred_at.strftime("%Y-%m-%d-%H"),
    )


class AnalyticsService:
    def __init__(self, analytics_repo: AnalyticsEventRepository, session: AsyncSession):
        self.analytics_repo = analytics_repo
        self.session = session

    async def record(self, event: AnalyticsEvent) -> AnalyticsEvent | None:
        """Persist a request event.

        Fire-and-forget: a storage failure is logged and the session rolled
        back, so tracking never changes the response being served.

        Returns:
            The stored event, or None if recording failed
        """
        try:
            self.analytics_repo.add(event)
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to record analytics event",
                path=event.path,
                method=event.method,
                error=str(e),
            )
            await self.session.rollback()
            return None
        return event

    async def track_client_event(
        self, data: TrackEventRequest, account_id: UUID | None, client: ClientInfo
    ) -> AnalyticsEvent:
        """Store a page view reported by the single-page frontend.

        Client-reported views carry no server status or timing; they are stored
        as successful with zero response time.
        """
        event = build_event(
            path=data.path,
            method=data.method.value,
            session_id=data.session_id,
            status_code=200,
            client=ClientInfo(
                ip_address=client.ip_address,
                user_agent=data.user_agent or client.user_agent,
            ),
            account_id=account_id,
            referer=data.referer,
            client_tracked=True,
            occurred_at=data.occurred_at,
        )
        try:
            self.analytics_repo.add(event)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.debug("Client event tracked", path=event.path, session_id=event.session_id)
        return event

    async def purge_before(self, cutoff: datetime) -> int:
        """Delete events older than ``cutoff``. Returns the number deleted."""
        try:
            count = await self.analytics_repo.delete_before(cutoff)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return count
