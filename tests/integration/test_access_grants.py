"""Integration tests for requesting, reviewing and verifying access grants."""

import asyncio
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.notifications import NotificationQueue
from src.app.models import AccessGrant
from src.app.models.base import utc_now
from src.app.repositories import AccessGrantRepository
from tests.factories import AccessGrantFactory
from tests.helpers import RecordingEmailService

pytestmark = pytest.mark.integration

BASE = "/api/v1/access-requests"


async def _submit(client: AsyncClient, headers, resource_id: str = "ai-trl", reason=None):
    return await client.post(
        BASE, json={"resource_id": resource_id, "reason": reason}, headers=headers
    )


async def _verify(client: AsyncClient, headers, resource_id: str = "ai-trl") -> dict:
    response = await client.get(f"{BASE}/verify-access/{resource_id}", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def _persist(session: AsyncSession, grant: AccessGrant) -> AccessGrant:
    session.add(grant)
    await session.commit()
    return grant


class TestAccessLifecycle:
    """Tests for the pending -> approved -> revoked lifecycle."""

    async def test_request_approve_revoke(
        self,
        client: AsyncClient,
        auth_headers,
        admin_headers,
        test_admin,
        email_service: RecordingEmailService,
        notifications: NotificationQueue,
    ):
        submitted = await _submit(client, auth_headers, reason="Joining the <b>spring</b> cohort")
        assert submitted.status_code == 201
        grant = submitted.json()
        assert grant["status"] == "pending"
        assert grant["resource_name"] == "AI Training & Learning Platform"
        assert grant["request_reason"] == "Joining the bspring/b cohort"

        await notifications.drain(timeout=1)
        assert len(email_service.of_kind("access_request")) == 1

        pending = await _verify(client, auth_headers)
        assert pending["has_access"] is False
        assert pending["access_denial_reason"] == "Your access request is pending review"

        approved = await client.post(
            f"{BASE}/admin/{grant['id']}/approve",
            json={"admin_message": "Welcome aboard"},
            headers=admin_headers,
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["reviewed_by_id"] == test_admin["id"]
        assert approved.json()["expires_at"] is None

        await notifications.drain(timeout=1)
        [decision] = email_service.of_kind("access_decision")
        assert decision["approved"] is True

        granted = await _verify(client, auth_headers)
        assert granted["has_access"] is True
        assert granted["access_denial_reason"] is None

        revoked = await client.post(f"{BASE}/admin/{grant['id']}/revoke", headers=admin_headers)
        assert revoked.status_code == 200
        assert revoked.json()["status"] == "revoked"
        assert revoked.json()["is_active_access"] is False

        after = await _verify(client, auth_headers)
        assert after["has_access"] is False
        assert after["access_denial_reason"] == "Your access has been revoked"

    async def test_duplicate_pending_request_conflicts(self, client: AsyncClient, auth_headers):
        assert (await _submit(client, auth_headers)).status_code == 201

        duplicate = await _submit(client, auth_headers)

        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "PendingRequestExists"

    async def test_pending_is_per_resource(self, client: AsyncClient, auth_headers):
        assert (await _submit(client, auth_headers, "ai-trl")).status_code == 201
        assert (await _submit(client, auth_headers, "ai-tutot")).status_code == 201

    async def test_concurrent_submits_leave_one_pending(self, client: AsyncClient, auth_headers):
        first, second = await asyncio.gather(
            _submit(client, auth_headers), _submit(client, auth_headers)
        )

        assert sorted([first.status_code, second.status_code]) == [201, 409]
        rejected = first if first.status_code == 409 else second
        assert rejected.json()["error"] == "PendingRequestExists"

        mine = await client.get(f"{BASE}/mine", headers=auth_headers)
        assert len(mine.json()) == 1

    async def test_unique_index_decides_a_lost_race(
        self,
        client: AsyncClient,
        auth_headers,
        test_account,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """A pending row committed after the pre-check still yields a conflict."""
        await _persist(db_session, AccessGrantFactory.build(account_id=test_account["account"].id))

        async def _not_seen(self, account_id, resource):
            return None

        monkeypatch.setattr(AccessGrantRepository, "get_pending", _not_seen)

        response = await _submit(client, auth_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "PendingRequestExists"
        mine = await client.get(f"{BASE}/mine", headers=auth_headers)
        assert [g["status"] for g in mine.json()] == ["pending"]

    async def test_request_with_active_access_conflicts(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        await _persist(
            db_session, AccessGrantFactory.approved(account_id=test_account["account"].id)
        )

        response = await _submit(client, auth_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "AccessAlreadyGranted"

    async def test_new_request_allowed_after_denial(
        self, client: AsyncClient, auth_headers, admin_headers
    ):
        grant = (await _submit(client, auth_headers)).json()
        denied = await client.post(
            f"{BASE}/admin/{grant['id']}/deny",
            json={"admin_message": "Cohort is full"},
            headers=admin_headers,
        )
        assert denied.status_code == 200
        assert denied.json()["admin_message"] == "Cohort is full"

        assert (await _verify(client, auth_headers))["access_denial_reason"] == (
            "Your access request was denied"
        )
        assert (await _submit(client, auth_headers)).status_code == 201

    async def test_unknown_resource_rejected(self, client: AsyncClient, auth_headers):
        submitted = await _submit(client, auth_headers, "not-a-resource")
        verified = await client.get(f"{BASE}/verify-access/not-a-resource", headers=auth_headers)

        assert submitted.status_code == 400
        assert verified.status_code == 400
        assert verified.json()["error"] == "ValidationError"

    async def test_no_request_reason(self, client: AsyncClient, auth_headers):
        body = await _verify(client, auth_headers, "ai-tutot")

        assert body["has_access"] is False
        assert body["access_denial_reason"] == "No access request found for this resource"
        assert body["resource_id"] == "ai-tutot"

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get(f"{BASE}/verify-access/ai-trl")

        assert response.status_code == 401


class TestExpiry:
    async def test_lapsed_grant_denies_access(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        await _persist(
            db_session, AccessGrantFactory.lapsed(account_id=test_account["account"].id)
        )

        body = await _verify(client, auth_headers)

        assert body["has_access"] is False
        assert body["access_denial_reason"] == "Your access has expired"

    async def test_approve_with_future_expiry(
        self, client: AsyncClient, auth_headers, admin_headers
    ):
        grant = (await _submit(client, auth_headers)).json()
        expires_at = (utc_now() + timedelta(days=30)).isoformat()

        approved = await client.post(
            f"{BASE}/admin/{grant['id']}/approve",
            json={"expires_at": expires_at},
            headers=admin_headers,
        )

        assert approved.status_code == 200
        assert approved.json()["expires_at"] is not None
        assert approved.json()["is_expired"] is False
        assert approved.json()["is_active_access"] is True
        assert (await _verify(client, auth_headers))["has_access"] is True

    async def test_approve_with_past_expiry_rejected(
        self, client: AsyncClient, auth_headers, admin_headers
    ):
        grant = (await _submit(client, auth_headers)).json()

        response = await client.post(
            f"{BASE}/admin/{grant['id']}/approve",
            json={"expires_at": "2000-01-01T00:00:00Z"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidExpiry"

    async def test_clear_expiration_restores_access(
        self,
        client: AsyncClient,
        auth_headers,
        admin_headers,
        test_account,
        db_session: AsyncSession,
    ):
        grant = await _persist(
            db_session, AccessGrantFactory.lapsed(account_id=test_account["account"].id)
        )

        response = await client.post(
            f"{BASE}/admin/{grant.id}/clear-expiration", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["expires_at"] is None
        assert (await _verify(client, auth_headers))["has_access"] is True


class TestAdminReview:
    """Tests for admin-only review endpoints."""

    async def test_regular_account_cannot_review(self, client: AsyncClient, auth_headers):
        grant = (await _submit(client, auth_headers)).json()

        response = await client.post(f"{BASE}/admin/{grant['id']}/approve", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "AdminRequired"

    async def test_only_pending_can_be_approved(
        self, client: AsyncClient, admin_headers, test_account, db_session: AsyncSession
    ):
        grant = await _persist(
            db_session, AccessGrantFactory.denied(account_id=test_account["account"].id)
        )

        response = await client.post(f"{BASE}/admin/{grant.id}/approve", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidTransition"

    async def test_only_approved_can_be_revoked(
        self, client: AsyncClient, auth_headers, admin_headers
    ):
        grant = (await _submit(client, auth_headers)).json()

        response = await client.post(f"{BASE}/admin/{grant['id']}/revoke", headers=admin_headers)

        assert response.status_code == 409

    async def test_unknown_grant(self, client: AsyncClient, admin_headers):
        response = await client.post(
            f"{BASE}/admin/00000000-0000-4000-8000-000000000000/deny", headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "AccessRequestNotFound"

    async def test_list_filters_and_stats(
        self, client: AsyncClient, admin_headers, test_account, db_session: AsyncSession
    ):
        account_id = test_account["account"].id
        db_session.add(AccessGrantFactory.build(account_id=account_id))
        db_session.add(AccessGrantFactory.approved(account_id=account_id, resource_id="ai-tutot"))
        db_session.add(AccessGrantFactory.denied(account_id=account_id))
        await db_session.commit()

        pending = await client.get(f"{BASE}/admin/pending", headers=admin_headers)
        tutot = await client.get(
            f"{BASE}/admin", params={"resource_id": "ai-tutot"}, headers=admin_headers
        )
        stats = await client.get(f"{BASE}/admin/stats", headers=admin_headers)

        assert [g["status"] for g in pending.json()["items"]] == ["pending"]
        assert [g["resource_id"] for g in tutot.json()["items"]] == ["ai-tutot"]
        assert stats.json() == {"total": 3, "pending": 1, "approved": 1, "denied": 1, "revoked": 0}

    async def test_purge_deletes_everything(
        self, client: AsyncClient, auth_headers, admin_headers
    ):
        await _submit(client, auth_headers, "ai-trl")
        await _submit(client, auth_headers, "ai-tutot")

        purged = await client.delete(f"{BASE}/admin", headers=admin_headers)

        assert purged.status_code == 200
        assert purged.json() == {"deleted": 2}
        mine = await client.get(f"{BASE}/mine", headers=auth_headers)
        assert mine.json() == []


class TestStatus:
    async def test_status_covers_every_resource(
        self, client: AsyncClient, auth_headers, test_account, db_session: AsyncSession
    ):
        await _persist(
            db_session, AccessGrantFactory.approved(account_id=test_account["account"].id)
        )

        response = await client.get(f"{BASE}/status", headers=auth_headers)

        by_resource = {item["resource_id"]: item for item in response.json()}
        assert by_resource["ai-trl"]["has_access"] is True
        assert by_resource["ai-trl"]["status"] == "approved"
        assert by_resource["ai-tutot"]["has_access"] is False
        assert by_resource["ai-tutot"]["status"] is None

    async def test_single_resource_status(self, client: AsyncClient, auth_headers):
        await _submit(client, auth_headers, "ai-tutot")

        response = await client.get(f"{BASE}/status/ai-tutot", headers=auth_headers)

        assert response.json()["status"] == "pending"
        assert response.json()["has_access"] is False

    async def test_mine_lists_own_requests_newest_first(
        self, client: AsyncClient, auth_headers
    ):
        await _submit(client, auth_headers, "ai-trl")
        await _submit(client, auth_headers, "ai-tutot")

        response = await client.get(f"{BASE}/mine", headers=auth_headers)

        assert [g["resource_id"] for g in response.json()] == ["ai-tutot", "ai-trl"]
