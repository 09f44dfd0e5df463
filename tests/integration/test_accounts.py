"""Integration tests for account self-service and admin account management."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.models.enums import AccountStatus
from tests.factories import DEFAULT_TEST_PASSWORD, AccountFactory
from tests.helpers import sign_in

pytestmark = pytest.mark.integration

NEW_PASSWORD = "Brand.New.Pass99!"


class TestProfile:
    """Tests for /api/v1/users/me."""

    async def test_get_profile(self, client: AsyncClient, auth_headers, test_account):
        response = await client.get("/api/v1/users/me/profile", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == test_account["id"]
        assert "hashed_password" not in body
        assert "failed_login_attempts" not in body

    async def test_partial_update(self, client: AsyncClient, auth_headers):
        response = await client.patch(
            "/api/v1/users/me/profile",
            json={"handle": "ada_l", "bio": "  <i>Analyst</i> "},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["handle"] == "ada_l"
        assert body["bio"] == "iAnalyst/i"
        assert body["first_name"] == "Test"

    async def test_handle_taken_by_someone_else(
        self, client: AsyncClient, auth_headers, db_session: AsyncSession
    ):
        db_session.add(AccountFactory.build(handle="taken_name"))
        await db_session.commit()

        response = await client.patch(
            "/api/v1/users/me/profile", json={"handle": "taken_name"}, headers=auth_headers
        )

        assert response.status_code == 409
        assert response.json()["error"] == "HandleTaken"

    async def test_keeping_own_handle_is_allowed(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        account = test_account["account"]
        account.handle = "mine"
        db_session.add(account)
        await db_session.commit()

        response = await client.patch(
            "/api/v1/users/me/profile", json={"handle": "mine"}, headers=auth_headers
        )

        assert response.status_code == 200

    async def test_invalid_handle(self, client: AsyncClient, auth_headers):
        response = await client.patch(
            "/api/v1/users/me/profile", json={"handle": "no spaces"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidHandle"

    @pytest.mark.parametrize("field", ["first_name", "last_name"])
    async def test_null_name_is_rejected(self, client: AsyncClient, auth_headers, field: str):
        response = await client.patch(
            "/api/v1/users/me/profile", json={field: None}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

        profile = await client.get("/api/v1/users/me/profile", headers=auth_headers)
        assert profile.json()[field]

    async def test_blank_handle_clears_it(self, client: AsyncClient, auth_headers):
        await client.patch(
            "/api/v1/users/me/profile", json={"handle": "grace_h"}, headers=auth_headers
        )

        response = await client.patch(
            "/api/v1/users/me/profile", json={"handle": "   "}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["handle"] is None

    async def test_blank_handle_never_conflicts(
        self, client: AsyncClient, auth_headers, db_session: AsyncSession
    ):
        db_session.add(AccountFactory.build(handle=None))
        await db_session.commit()

        response = await client.patch(
            "/api/v1/users/me/profile", json={"handle": ""}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["handle"] is None

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "NoToken"


class TestPasswordChange:
    async def test_change_password(self, client: AsyncClient, auth_headers, test_account):
        response = await client.post(
            "/api/v1/users/me/password",
            json={
                "current_password": DEFAULT_TEST_PASSWORD,
                "new_password": NEW_PASSWORD,
                "confirm_password": NEW_PASSWORD,
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        await sign_in(client, test_account["email"], NEW_PASSWORD)

    async def test_wrong_current_password(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/users/me/password",
            json={
                "current_password": "Wrong.Horse42!",
                "new_password": NEW_PASSWORD,
                "confirm_password": NEW_PASSWORD,
            },
            headers=auth_headers,
        )

        assert response.status_code == 401
        assert response.json()["error"] == "InvalidCredentials"

    async def test_reusing_current_password(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/users/me/password",
            json={
                "current_password": DEFAULT_TEST_PASSWORD,
                "new_password": DEFAULT_TEST_PASSWORD,
                "confirm_password": DEFAULT_TEST_PASSWORD,
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "PasswordReused"


class TestDeleteAccount:
    async def test_delete_scrubs_and_deactivates(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        response = await client.request(
            "DELETE",
            "/api/v1/users/me",
            json={"password": DEFAULT_TEST_PASSWORD},
            headers=auth_headers,
        )

        assert response.status_code == 200
        account = test_account["account"]
        await db_session.refresh(account)
        assert account.is_active is False
        assert account.status == AccountStatus.DEACTIVATED.value
        assert account.email.startswith("deleted_")
        assert account.email.endswith(f"_{account.id.hex[:8]}@deleted.com")

        # The original email can no longer sign in, and the old token no longer works
        signin = await client.post(
            "/api/v1/auth/signin",
            json={"email": test_account["email"], "password": DEFAULT_TEST_PASSWORD},
        )
        assert signin.status_code == 401
        me = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert me.status_code == 403

    async def test_delete_requires_password(self, client: AsyncClient, auth_headers):
        response = await client.request(
            "DELETE",
            "/api/v1/users/me",
            json={"password": "Wrong.Horse42!"},
            headers=auth_headers,
        )

        assert response.status_code == 401


class TestAdminAccounts:
    """Tests for /api/v1/admin/users."""

    async def test_regular_account_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/admin/users", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "AdminRequired"

    async def test_list_and_search(
        self, client: AsyncClient, admin_headers, db_session: AsyncSession
    ):
        db_session.add(AccountFactory.build(email="findme@example.com", last_name="Needle"))
        db_session.add(AccountFactory.inactive())
        await db_session.commit()

        searched = await client.get(
            "/api/v1/admin/users", params={"search": "needle"}, headers=admin_headers
        )
        deactivated = await client.get(
            "/api/v1/admin/users", params={"status": "deactivated"}, headers=admin_headers
        )

        assert [a["email"] for a in searched.json()["items"]] == ["findme@example.com"]
        assert len(deactivated.json()["items"]) == 1

    async def test_pagination(self, client: AsyncClient, admin_headers, db_session: AsyncSession):
        for _ in range(3):
            db_session.add(AccountFactory.build())
        await db_session.commit()

        first = await client.get(
            "/api/v1/admin/users", params={"limit": 2}, headers=admin_headers
        )
        assert first.json()["has_more"] is True

        second = await client.get(
            "/api/v1/admin/users",
            params={"limit": 2, "cursor": first.json()["next_cursor"]},
            headers=admin_headers,
        )
        assert second.json()["has_more"] is False

        ids = [a["id"] for a in first.json()["items"] + second.json()["items"]]
        assert len(ids) == len(set(ids)) == 4

    async def test_get_unknown_account(self, client: AsyncClient, admin_headers):
        response = await client.get(
            "/api/v1/admin/users/00000000-0000-4000-8000-000000000000", headers=admin_headers
        )

        assert response.status_code == 404

    async def test_promote_account(self, client: AsyncClient, admin_headers, test_account):
        response = await client.patch(
            f"/api/v1/admin/users/{test_account['id']}/role",
            json={"role": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    async def test_unchanged_role(self, client: AsyncClient, admin_headers, test_account):
        response = await client.patch(
            f"/api/v1/admin/users/{test_account['id']}/role",
            json={"role": "user"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "NoChange"

    async def test_admin_cannot_change_self(self, client: AsyncClient, admin_headers, test_admin):
        role = await client.patch(
            f"/api/v1/admin/users/{test_admin['id']}/role",
            json={"role": "user"},
            headers=admin_headers,
        )
        status = await client.patch(
            f"/api/v1/admin/users/{test_admin['id']}/status",
            json={"status": "suspended"},
            headers=admin_headers,
        )

        assert role.status_code == 403
        assert role.json()["error"] == "SelfRoleChange"
        assert status.status_code == 403
        assert status.json()["error"] == "SelfStatusChange"

    async def test_suspension_ends_sessions(
        self, client: AsyncClient, admin_headers, test_account
    ):
        session = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
        client.cookies.clear()

        response = await client.patch(
            f"/api/v1/admin/users/{test_account['id']}/status",
            json={"status": "suspended"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        refreshed = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]}
        )
        assert refreshed.status_code == 401

    async def test_stats(self, client: AsyncClient, admin_headers, test_account):
        response = await client.get("/api/v1/admin/users/stats", headers=admin_headers)

        body = response.json()
        assert body["total"] == 2
        assert body["by_role"] == {"admin": 1, "user": 1}
        assert body["by_status"] == {"active": 2}
