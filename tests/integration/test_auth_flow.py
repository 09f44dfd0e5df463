"""Integration tests for registration, sessions, token rotation and validation."""

from datetime import timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.config import get_settings
from src.app.core.notifications import NotificationQueue
from src.app.core.security import AuthPrimitives
from src.app.models.enums import AccountStatus
from tests.factories import DEFAULT_TEST_PASSWORD, AccountFactory
from tests.helpers import RecordingEmailService, sign_in

pytestmark = pytest.mark.integration

SIGNUP = {
    "email": "New.Person@Example.com",
    "password": "Correct.Horse42!",
    "first_name": "New",
    "last_name": "Person",
}


def _primitives() -> AuthPrimitives:
    return AuthPrimitives.from_settings(get_settings())


class TestRegistration:
    """Tests for POST /api/v1/auth/signup."""

    async def test_register_verify_and_sign_in(
        self,
        client: AsyncClient,
        email_service: RecordingEmailService,
        notifications: NotificationQueue,
    ):
        """Sign-up issues tokens, sign-in works before verifying, the emailed token verifies."""
        response = await client.post("/api/v1/auth/signup", json=SIGNUP)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "new.person@example.com"
        assert body["user"]["email_verified"] is False
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == 24 * 3600
        assert "auth_token" in response.cookies
        assert "hashed_password" not in body["user"]

        client.cookies.clear()
        unverified = await sign_in(client, "new.person@example.com", SIGNUP["password"])
        assert unverified["user"]["email_verified"] is False

        await notifications.drain(timeout=1)
        [verification] = email_service.of_kind("verification")
        assert len(email_service.of_kind("welcome")) == 1

        verified = await client.post(
            "/api/v1/auth/verify-email", json={"token": verification["token"]}
        )
        assert verified.status_code == 200
        assert verified.json()["verified"] is True
        assert verified.json()["user"]["email_verified"] is True

        again = await client.post(
            "/api/v1/auth/verify-email", json={"token": verification["token"]}
        )
        assert again.status_code == 400
        assert again.json()["error"] == "InvalidToken"

        client.cookies.clear()
        signed_in = await sign_in(client, "new.person@example.com", SIGNUP["password"])
        assert signed_in["user"]["email_verified"] is True

    async def test_duplicate_email_case_insensitive(self, client: AsyncClient, test_account):
        response = await client.post(
            "/api/v1/auth/signup", json={**SIGNUP, "email": test_account["email"].upper()}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "EmailTaken"

    async def test_weak_password_lists_every_rule(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/signup", json={**SIGNUP, "password": "short"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "WeakPassword"
        assert len(body["details"]["errors"]) == 4

    async def test_invalid_email_is_400(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/signup", json={**SIGNUP, "email": "nope"})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    async def test_duplicate_handle(self, client: AsyncClient, db_session: AsyncSession):
        db_session.add(AccountFactory.build(handle="taken_name"))
        await db_session.commit()

        response = await client.post(
            "/api/v1/auth/signup", json={**SIGNUP, "handle": "taken_name"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "HandleTaken"

    async def test_referral_code_links_referrer(
        self, client: AsyncClient, test_account, db_session: AsyncSession
    ):
        referrer = test_account["account"]

        response = await client.post(
            "/api/v1/auth/signup", json={**SIGNUP, "referral_code": referrer.referral_code}
        )

        assert response.status_code == 201
        assert response.json()["user"]["referral_code"] != referrer.referral_code

    async def test_resend_verification_is_silent_for_unknown_email(
        self,
        client: AsyncClient,
        email_service: RecordingEmailService,
        notifications: NotificationQueue,
    ):
        response = await client.post(
            "/api/v1/auth/resend-verification", json={"email": "nobody@example.com"}
        )
        await notifications.drain(timeout=1)

        assert response.status_code == 200
        assert email_service.sent == []

    async def test_resend_verification_replaces_previous_token(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        email_service: RecordingEmailService,
        notifications: NotificationQueue,
    ):
        account = AccountFactory.unverified()
        db_session.add(account)
        await db_session.commit()

        await client.post("/api/v1/auth/resend-verification", json={"email": account.email})
        await client.post("/api/v1/auth/resend-verification", json={"email": account.email})
        await notifications.drain(timeout=1)
        first, second = email_service.of_kind("verification")

        stale = await client.post("/api/v1/auth/verify-email", json={"token": first["token"]})
        fresh = await client.post("/api/v1/auth/verify-email", json={"token": second["token"]})

        assert stale.status_code == 400
        assert fresh.status_code == 200


class TestSignIn:
    async def test_unknown_email_and_wrong_password_look_the_same(
        self, client: AsyncClient, test_account
    ):
        unknown = await client.post(
            "/api/v1/auth/signin",
            json={"email": "nobody@example.com", "password": DEFAULT_TEST_PASSWORD},
        )
        wrong = await client.post(
            "/api/v1/auth/signin",
            json={"email": test_account["email"], "password": "Wrong.Horse42!"},
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["detail"] == wrong.json()["detail"] == "Invalid email or password"

    async def test_inactive_account_cannot_sign_in(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        account = AccountFactory.inactive()
        db_session.add(account)
        await db_session.commit()

        response = await client.post(
            "/api/v1/auth/signin",
            json={"email": account.email, "password": DEFAULT_TEST_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "AccountInactive"

    async def test_remember_me_extends_access_lifetime(self, client: AsyncClient, test_account):
        response = await client.post(
            "/api/v1/auth/signin",
            json={
                "email": test_account["email"],
                "password": DEFAULT_TEST_PASSWORD,
                "remember_me": True,
            },
        )

        assert response.json()["expires_in"] == 7 * 24 * 3600

    async def test_sign_in_sets_cookies_usable_for_me(self, client: AsyncClient, test_account):
        await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)

        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 200
        assert response.json()["id"] == test_account["id"]


class TestRefresh:
    """Tests for refresh token rotation."""

    async def test_rotation_consumes_the_old_token(self, client: AsyncClient, test_account):
        first = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
        client.cookies.clear()

        rotated = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]}
        )
        assert rotated.status_code == 200
        assert rotated.json()["refresh_token"] != first["refresh_token"]
        client.cookies.clear()

        reused = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]}
        )
        assert reused.status_code == 401
        assert reused.json()["error"] == "TokenRevoked"

        chained = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": rotated.json()["refresh_token"]}
        )
        assert chained.status_code == 200

    async def test_refresh_from_cookie(self, client: AsyncClient, test_account):
        await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)

        response = await client.post("/api/v1/auth/refresh")

        assert response.status_code == 200

    async def test_missing_refresh_token(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={})

        assert response.status_code == 401
        assert response.json()["error"] == "NoToken"

    async def test_access_token_is_not_a_refresh_token(self, client: AsyncClient, test_account):
        data = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
        client.cookies.clear()

        response = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": data["access_token"]}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "TokenMalformed"

    async def test_logout_revokes_refresh_tokens(self, client: AsyncClient, test_account):
        data = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
        client.cookies.clear()
        headers = {"Authorization": f"Bearer {data['access_token']}"}

        logout = await client.post("/api/v1/auth/logout", headers=headers)
        assert logout.status_code == 200
        assert "auth_token" in logout.headers.get("set-cookie", "")

        response = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": data["refresh_token"]}
        )
        assert response.status_code == 401


class TestValidateToken:
    """Tests for GET /api/v1/auth/validate-token, the contract used by gates."""

    async def test_valid_bearer_token(self, client: AsyncClient, auth_headers, test_account):
        response = await client.get("/api/v1/auth/validate-token", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["id"] == test_account["id"]
        assert body["validation"]["valid"] is True

    async def test_no_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/validate-token")

        assert response.status_code == 401
        assert response.json()["error"] == "NoToken"

    async def test_malformed_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/validate-token", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "TokenMalformed"

    async def test_expired_token(self, client: AsyncClient, test_account):
        expired = _primitives().issue_access_token(
            test_account["account"].id, timedelta(seconds=-5)
        )

        response = await client.get(
            "/api/v1/auth/validate-token", headers={"Authorization": f"Bearer {expired.token}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "TokenExpired"

    async def test_refresh_token_rejected(self, client: AsyncClient, test_account):
        data = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
        client.cookies.clear()

        response = await client.get(
            "/api/v1/auth/validate-token",
            headers={"Authorization": f"Bearer {data['refresh_token']}"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "TokenMalformed"

    async def test_unknown_account(self, client: AsyncClient):
        token = _primitives().issue_access_token(uuid4())

        response = await client.get(
            "/api/v1/auth/validate-token", headers={"Authorization": f"Bearer {token.token}"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "UserNotFound"

    async def test_suspended_account(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        account = test_account["account"]
        account.status = AccountStatus.SUSPENDED.value
        db_session.add(account)
        await db_session.commit()

        response = await client.get("/api/v1/auth/validate-token", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "AccountInactive"

    async def test_header_preferred_over_cookie(
        self, client: AsyncClient, test_account, db_session: AsyncSession
    ):
        other = AccountFactory.build()
        db_session.add(other)
        await db_session.commit()
        await sign_in(client, other.email, DEFAULT_TEST_PASSWORD)
        header_token = _primitives().issue_access_token(test_account["account"].id)

        response = await client.get(
            "/api/v1/auth/validate-token",
            headers={"Authorization": f"Bearer {header_token.token}"},
        )

        assert response.json()["user"]["id"] == test_account["id"]
