"""Repository for AnalyticsEvent entity."""

from datetime import datetime

from sqlalchemy import delete
from sqlmodel import col, select

from src.app.models import AnalyticsEvent
from src.app.repositories.base import BaseRepository


class AnalyticsEventRepository(BaseRepository[AnalyticsEvent]):
    model = AnalyticsEvent

    async def list_for_session(self, session_id: str) -> list[AnalyticsEvent]:
        result = await self.session.execute(
            select(AnalyticsEvent)
            .where(AnalyticsEvent.session_id == session_id)
            .order_by(col(AnalyticsEvent.occurred_at))
        )
        return list(result.scalars().all())

    async def delete_before(self, cutoff: datetime) -> int:
        """Delete events that occurred before ``cutoff``. Returns the row count."""
        result = await self.session.execute(
            delete(AnalyticsEvent).where(col(AnalyticsEvent.occurred_at) < cutoff)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
