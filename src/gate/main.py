"""Deployable gate for a protected subdomain.

Run with ``uvicorn src.gate.main:app``; every route except ``/health`` sits
behind SubdomainGateMiddleware.
"""

import httpx
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request

from src.app.core.logging import get_logger, setup_logging
from src.gate.config import GateSettings, get_gate_settings
from src.gate.middleware import SubdomainGateMiddleware
from src.gate.verifier import AccessVerifier

logger = get_logger(__name__)


def create_gate_app(
    settings: GateSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the gate app.

    Args:
        settings: Gate configuration; defaults to the environment.
        transport: Optional httpx transport for the verifier (used in tests).
    """
    settings = settings or get_gate_settings()
    setup_logging(settings.debug)

    app = FastAPI(title=settings.app_name, docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(
        SubdomainGateMiddleware,
        settings=settings,
        verifier=AccessVerifier.from_settings(settings, transport),
    )
    app.add_middleware(CorrelationIdMiddleware)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/")
    async def index(request: Request) -> dict[str, object]:
        """Protected landing route; reports who was admitted and how."""
        access = request.state.subdomain_access
        return {
            "resource_id": access.resource_id,
            "access_method": access.access_method.value,
            "verified_at": access.verified_at.isoformat(),
            "account": request.state.account,
        }

    return app


app = create_gate_app()
