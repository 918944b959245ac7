"""
Tests for the member sync API.

Uses FastAPI's TestClient with the store and adapter factory overridden,
so no database or platform is needed.
"""

from datetime import date

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from conftest import FakeAdapter, make_member, make_visit
from app.api.endpoints.sync import get_adapter_factory, get_member_store
from app.core.config import Settings
from app.integrations.base import AdapterConfigError
from app.main import app
from app.services.adapter_factory import UnknownProviderError, build_gym_adapter
from app.services.member_sync import InMemoryMemberStore

OFFLINE = Settings(integrations_offline_mode=True, sample_data_seed=42)


@pytest.fixture
def memory_store():
    return InMemoryMemberStore()


@pytest.fixture
def client(memory_store):
    adapters = {}

    def factory(provider):
        name = provider.lower()
        if name == "broken":
            return FakeAdapter(name="Broken", connected=False)
        if name == "unconfigured":
            raise AdapterConfigError("UNCONFIGURED_API_KEY not configured")
        if name not in adapters:
            adapters[name] = build_gym_adapter(name, OFFLINE)
        return adapters[name]

    app.dependency_overrides[get_member_store] = lambda: memory_store
    app.dependency_overrides[get_adapter_factory] = lambda: factory
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSyncMembersEndpoint:
    """Tests for POST /api/v1/sync/members."""

    def test_full_sync(self, client, memory_store):
        """Test a full offline sync of members, visits and risk."""
        response = client.post(
            "/api/v1/sync/members",
            json={"provider": "mindbody", "gym_id": "gym-1"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["provider"] == "mindbody"
        assert body["members"]["created"] == 20
        assert body["visits"]["created"] > 0
        assert body["risk"]["updated"] == 20
        assert len(memory_store.members) == 20

    def test_repeat_sync_updates(self, client):
        """Test that a second identical request creates nothing new."""
        payload = {"provider": "glofox", "gym_id": "gym-1"}
        client.post("/api/v1/sync/members", json=payload)

        body = client.post("/api/v1/sync/members", json=payload).json()

        assert body["members"]["created"] == 0
        assert body["members"]["updated"] == 20
        assert body["visits"]["created"] == 0

    def test_dry_run(self, client, memory_store):
        """Test that a dry run reports counts and writes nothing."""
        response = client.post(
            "/api/v1/sync/members",
            json={"provider": "mindbody", "gym_id": "gym-1", "dry_run": True},
        )

        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert body["dry_run"] is True
        assert body["members"]["created"] == 20
        assert body["risk"] is None
        assert body["message"] == "Dry run completed - no data was saved"
        assert memory_store.members == {}
        assert memory_store.mappings == {}

    def test_unknown_provider(self, client):
        """Test that unknown providers are a client error."""
        app.dependency_overrides[get_adapter_factory] = lambda: _raise_unknown

        response = client.post(
            "/api/v1/sync/members",
            json={"provider": "zenplanner", "gym_id": "gym-1"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invalid_body(self, client):
        """Test that a missing gym id is rejected by validation."""
        response = client.post("/api/v1/sync/members", json={"provider": "mindbody"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_connection_failure(self, client, memory_store):
        """Test that an unreachable platform maps to 503 with nothing written."""
        response = client.post(
            "/api/v1/sync/members",
            json={"provider": "broken", "gym_id": "gym-1"},
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert "Broken" in response.json()["detail"]
        assert memory_store.members == {}

    def test_unconfigured_provider(self, client):
        """Test that missing credentials map to 503."""
        response = client.post(
            "/api/v1/sync/members",
            json={"provider": "unconfigured", "gym_id": "gym-1"},
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_since_and_visits_flag(self, client, memory_store):
        """Test request options reach the orchestrator."""
        adapter = FakeAdapter(
            [make_member("X-1", joined_date=date(2024, 2, 1)), make_member("X-2", joined_date=date(2023, 1, 1))],
            [make_visit("V-1", "X-1", date(2024, 2, 5))],
        )
        app.dependency_overrides[get_adapter_factory] = lambda: (lambda provider: adapter)

        response = client.post(
            "/api/v1/sync/members",
            json={
                "provider": "fake",
                "gym_id": "gym-1",
                "since": "2024-01-01T00:00:00Z",
                "sync_visits": False,
                "calculate_risk_scores": False,
            },
        )

        body = response.json()
        assert body["members"]["total"] == 1
        assert body["visits"] is None
        assert body["risk"] is None
        assert adapter.fetch_visits_calls == 0


class TestStatusEndpoints:
    """Tests for status and health endpoints."""

    def test_status_idle(self, client):
        """Test the status before any sync."""
        body = client.get("/api/v1/sync/status").json()

        assert body["phase"] == "idle"
        assert body["is_running"] is False

    def test_status_after_sync(self, client):
        """Test the status reflects the last completed run."""
        client.post("/api/v1/sync/members", json={"provider": "mindbody", "gym_id": "gym-7"})

        body = client.get("/api/v1/sync/status").json()

        assert body["phase"] == "completed"
        assert body["provider"] == "mindbody"
        assert body["gym_id"] == "gym-7"
        assert body["progress"]["members_created"] == 20

    def test_status_filtered_by_gym_and_provider(self, client):
        """Test that each gym and provider keeps its own status."""
        client.post("/api/v1/sync/members", json={"provider": "mindbody", "gym_id": "gym-7"})
        client.post("/api/v1/sync/members", json={"provider": "glofox", "gym_id": "gym-8"})

        latest = client.get("/api/v1/sync/status").json()
        first = client.get(
            "/api/v1/sync/status", params={"gym_id": "gym-7", "provider": "Mindbody"}
        ).json()
        unknown = client.get("/api/v1/sync/status", params={"gym_id": "gym-9"}).json()

        assert latest["gym_id"] == "gym-8"
        assert latest["provider"] == "glofox"
        assert first["gym_id"] == "gym-7"
        assert first["provider"] == "mindbody"
        assert first["progress"]["members_created"] == 20
        assert unknown["phase"] == "idle"

    def test_liveness(self, client):
        """Test the root health endpoint."""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"


def _raise_unknown(provider):
    raise UnknownProviderError(f"Unknown provider: {provider}")
