"""Tests for request_id in error responses and the ambient response headers."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def test_not_found_includes_request_id(client: AsyncClient):
    response = await client.get("/api/v1/nonexistent-endpoint")

    assert response.status_code == 404
    data = response.json()
    assert isinstance(data["request_id"], str)
    assert "detail" in data


async def test_app_error_includes_request_id_and_code(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
    data = response.json()
    assert data["error"] == "NoToken"
    assert data["request_id"] == response.headers["x-request-id"]


async def test_validation_error_is_400_with_field(client: AsyncClient):
    response = await client.post("/api/v1/auth/signin", json={"email": "x@example.com"})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "ValidationError"
    assert data["detail"].startswith("password")
    assert data["request_id"] is not None


async def test_incoming_request_id_is_echoed(client: AsyncClient):
    request_id = "0f8fad5b-d9cb-469f-a165-70867728950e"

    response = await client.get("/api/v1/auth/me", headers={"X-Request-ID": request_id})

    assert response.headers["x-request-id"] == request_id
    assert response.json()["request_id"] == request_id


async def test_security_headers_present(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "content-security-policy" in response.headers
