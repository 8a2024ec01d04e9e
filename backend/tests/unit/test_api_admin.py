"""Tests for the admin endpoints (cache management and provider health)."""

import pytest

from smartapply.providers.errors import TransientError

_URL = "/api/v1/admin"

_REQUEST = {"domain": "Healthcare", "jobRole": "Registered Nurse", "experienceLevel": "entry"}


class TestAdminAccess:
    @pytest.mark.asyncio
    async def test_anonymous_is_401(self, client):
        assert (await client.get(f"{_URL}/cache")).status_code == 401

    @pytest.mark.parametrize(
        "method, path",
        [("GET", "/cache"), ("DELETE", "/cache"), ("GET", "/health/roadmaps")],
    )
    @pytest.mark.asyncio
    async def test_regular_user_is_403(self, demo_client, method, path):
        response = await demo_client.request(method, f"{_URL}{path}")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ADMIN_REQUIRED"


class TestCacheManagement:
    @pytest.mark.asyncio
    async def test_stats_list_keys(self, admin_client):
        await admin_client.post("/api/v1/roadmaps", json=_REQUEST)

        data = (await admin_client.get(f"{_URL}/cache")).json()["data"]

        assert data["size"] == 1
        assert len(data["keys"]) == 1
        assert data["keys"][0].startswith("gemini_roadmap_")

    @pytest.mark.asyncio
    async def test_clear_forces_regeneration(self, admin_client, mock_llm):
        await admin_client.post("/api/v1/roadmaps", json=_REQUEST)

        response = await admin_client.delete(f"{_URL}/cache")
        await admin_client.post("/api/v1/roadmaps", json=_REQUEST)

        assert response.json()["data"] == {"removed": 1}
        assert len(mock_llm.calls) == 2


class TestProviderHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, admin_client):
        data = (await admin_client.get(f"{_URL}/health/roadmaps")).json()["data"]

        assert data["status"] == "healthy"
        assert data["details"]["api_key"] is True

    @pytest.mark.asyncio
    async def test_unhealthy_when_provider_fails(self, admin_client, mock_llm):
        mock_llm.fail_always(TransientError("deadline exceeded"))

        data = (await admin_client.get(f"{_URL}/health/roadmaps")).json()["data"]

        assert data["status"] == "unhealthy"
        assert data["details"]["error"] == "deadline exceeded"
