"""Token and access-grant verification against the central accounts API."""

from dataclasses import dataclass
from typing import Any

import httpx

from src.app.core.exceptions import ServiceUnavailableError
from src.app.core.logging import get_logger
from src.gate.config import GateSettings

logger = get_logger(__name__)


class VerificationUnavailableError(ServiceUnavailableError):
    """The accounts API could not be reached or answered with an unexpected shape."""

    default_code = "VerificationUnavailable"
    default_message = "Authentication service unavailable"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a gate check.

    ``status_code`` is 200 when access is granted, otherwise the status the
    gate should answer with.
    """

    granted: bool
    status_code: int
    reason: str | None = None
    account: dict[str, Any] | None = None

    @classmethod
    def denied(cls, reason: str, status_code: int = 403) -> "VerificationResult":
        return cls(granted=False, status_code=status_code, reason=reason)


def _detail(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return fallback


class AccessVerifier:
    """Two-step check: the token must validate, then the account must hold an active grant.

    Fails closed: transport errors, timeouts and malformed answers raise
    VerificationUnavailableError rather than letting the request through.
    """

    def __init__(
        self,
        main_api_url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.main_api_url = main_api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @classmethod
    def from_settings(
        cls, settings: GateSettings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "AccessVerifier":
        return cls(settings.main_api_url, settings.verification_timeout_seconds, transport)

    async def _get(self, client: httpx.AsyncClient, path: str, token: str) -> httpx.Response:
        try:
            return await client.get(path, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as e:
            logger.error("Accounts API request failed", path=path, error=str(e))
            raise VerificationUnavailableError(details=str(e)) from e

    async def verify(self, token: str, resource_id: str) -> VerificationResult:
        async with httpx.AsyncClient(
            base_url=self.main_api_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
        ) as client:
            response = await self._get(client, "/api/v1/auth/validate-token", token)
            if response.is_server_error:
                raise VerificationUnavailableError(
                    details=f"validate-token answered {response.status_code}"
                )
            if not response.is_success:
                return VerificationResult.denied(_detail(response, "Invalid or expired session"))

            response = await self._get(
                client, f"/api/v1/access-requests/verify-access/{resource_id}", token
            )
            if response.is_server_error:
                raise VerificationUnavailableError(
                    details=f"verify-access answered {response.status_code}"
                )
            if not response.is_success:
                return VerificationResult.denied(_detail(response, "Access not granted"))

            try:
                body = response.json()
                has_access = body["has_access"]
            except (ValueError, KeyError, TypeError) as e:
                raise VerificationUnavailableError(
                    details="Unexpected verify-access response"
                ) from e
            if not isinstance(has_access, bool):
                raise VerificationUnavailableError(details="Unexpected verify-access response")

            if not has_access:
                return VerificationResult.denied(
                    body.get("access_denial_reason") or "Access not granted"
                )
            return VerificationResult(granted=True, status_code=200, account=body.get("user"))
