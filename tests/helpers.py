"""Test helpers shared by unit and integration tests."""

from typing import Any


class RecordingEmailService:
    """Stand-in for EmailService that records every send instead of calling Resend.

    Set ``fail_with`` to make every send raise that exception.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None

    async def _record(self, kind: str, **fields: Any) -> str | None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"kind": kind, **fields})
        return f"msg_{len(self.sent)}"

    def of_kind(self, kind: str) -> list[dict[str, Any]]:
        return [item for item in self.sent if item["kind"] == kind]

    async def send_verification_email(self, to: str, user_name: str, token: str) -> str | None:
        return await self._record("verification", to=to, token=token)

    async def send_welcome_email(self, to: str, user_name: str) -> str | None:
        return await self._record("welcome", to=to)

    async def send_password_reset_email(self, to: str, user_name: str, token: str) -> str | None:
        return await self._record("password_reset", to=to, token=token)

    async def send_password_reset_confirmation(self, to: str, user_name: str) -> str | None:
        return await self._record("password_reset_confirmation", to=to)

    async def send_access_request_notification(
        self, account_name: str, account_email: str, resource: Any, reason: str | None
    ) -> str | None:
        return await self._record("access_request", to=account_email, resource=resource)

    async def send_access_decision_email(
        self,
        to: str,
        user_name: str,
        resource: Any,
        approved: bool,
        admin_message: str | None = None,
        expires_at: Any = None,
    ) -> str | None:
        return await self._record("access_decision", to=to, approved=approved)

    async def send_contact_form_email(
        self, name: str, email: str, subject: str, message: str
    ) -> str | None:
        return await self._record("contact", to=email, subject=subject)


async def sign_in(client: Any, email: str, password: str) -> dict[str, Any]:
    """Sign in through the API and return the response body."""
    response = await client.post(
        "/api/v1/auth/signin", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()
