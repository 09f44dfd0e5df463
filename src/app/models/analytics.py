"""Analytics event model - one row per tracked API request or client page view."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class AnalyticsEvent(SQLModel, table=True):
    """A tracked request.

    ``date_bucket`` (YYYY-MM-DD) and ``hour_bucket`` (YYYY-MM-DD-HH) are
    derived from ``occurred_at`` in UTC when the event is built.
    """

    __tablename__ = "analytics_events"
    __table_args__ = (
        Index("ix_analytics_events_path_occurred", "path", "occurred_at"),
        Index("ix_analytics_events_session_occurred", "session_id", "occurred_at"),
        Index("ix_analytics_events_account_occurred", "account_id", "occurred_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    path: str = Field(max_length=500)
    method: str = Field(max_length=10)
    account_id: UUID | None = Field(default=None, foreign_key="accounts.id")
    session_id: str = Field(max_length=64)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=500)
    referer: str | None = Field(default=None, max_length=500)
    status_code: int
    response_time_ms: float = Field(default=0.0)
    client_tracked: bool = Field(default=False)
    occurred_at: datetime = Field(default_factory=utc_now, index=True)
    date_bucket: str = Field(max_length=10, index=True)
    hour_bucket: str = Field(max_length=13, index=True)

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300
