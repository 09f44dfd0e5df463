"""Analytics ingestion endpoints."""

from fastapi import APIRouter
from starlette.requests import Request

from src.app.api.dependencies import AnalyticsServiceDep, ClientInfoDep, OptionalAccountId
from src.app.core.rate_limit import limiter
from src.app.schemas.analytics import TrackEventRequest, TrackEventResponse

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post(
    "/track",
    response_model=TrackEventResponse,
    responses={400: {"description": "Missing path or session id"}},
)
@limiter.limit("120/minute")
async def track_event(
    request: Request,
    data: TrackEventRequest,
    service: AnalyticsServiceDep,
    client: ClientInfoDep,
    account_id: OptionalAccountId,
) -> TrackEventResponse:
    """Record a page view from the single-page frontend.

    No account required; a valid access token attributes the view to its account.
    """
    await service.track_client_event(data, account_id, client)
    return TrackEventResponse()
