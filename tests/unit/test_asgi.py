"""
Unit tests for the FastAPI ASGI application — operations endpoints.

Uses FastAPI's TestClient without running the lifespan: the module-level
state is populated with in-memory components instead.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from eidas_bridge import asgi
from eidas_bridge.adapters.metadata import StaticCountryMetadataProvider
from eidas_bridge.health import PridHealth
from eidas_bridge.loa.negotiator import LoaNegotiator
from eidas_bridge.main import Components
from eidas_bridge.prid.generators import create_generators
from eidas_bridge.prid.service import PridService
from tests.conftest import InMemoryPolicyReader, entry


@pytest.fixture(autouse=True)
def _reset_asgi_state() -> None:
    """Reset ASGI module-level state before each test."""
    asgi._components = None
    asgi._scheduler = None
    asgi._error_message = None


@pytest.fixture()
def client() -> TestClient:
    """Create a TestClient without running the lifespan (no real startup)."""
    return TestClient(asgi.app, raise_server_exceptions=False)


@pytest.fixture()
def reader() -> InMemoryPolicyReader:
    return InMemoryPolicyReader({"NO": entry(), "DE": entry("colresist-eIDAS", "B")})


@pytest.fixture()
def components(reader: InMemoryPolicyReader) -> Components:
    service = PridService(reader, create_generators())
    metadata = StaticCountryMetadataProvider({"NO": [], "DE": []})
    built = Components(
        service=service,
        negotiator=LoaNegotiator(metadata),
        metadata_provider=metadata,
        health=PridHealth(service, metadata),
    )
    asgi._components = built
    return built


# ─────────────────────── GET /health ───────────────────────


class TestHealthEndpoint:
    def test_503_before_startup(self, client: TestClient) -> None:
        """
        GIVEN the application has not completed startup
        WHEN GET /health is called
        THEN it returns 503 OUT_OF_SERVICE.
        """
        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "OUT_OF_SERVICE"

    def test_503_with_startup_error(self, client: TestClient, components: Components) -> None:
        asgi._error_message = "PRID policy error - ['Empty PRID policy']"

        response = client.get("/health")

        assert response.status_code == 503
        assert "Empty PRID policy" in response.json()["error"]

    def test_up(self, client: TestClient, components: Components) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "UP"
        assert set(body["details"]["policy"]) == {"DE", "NO"}

    def test_warning_is_still_200(
        self, client: TestClient, components: Components, reader: InMemoryPolicyReader
    ) -> None:
        """
        GIVEN a reload that dropped DE from the policy
        WHEN GET /health is called
        THEN it returns 200 WARNING listing DE as missing.
        """
        reader.entries = {"NO": entry()}
        components.service.update_policy()

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "WARNING"
        assert response.json()["details"]["missingCountries"] == ["DE"]


# ─────────────────────── GET /ready ───────────────────────


class TestReadyEndpoint:
    def test_not_ready_before_startup(self, client: TestClient) -> None:
        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "starting"

    def test_ready_when_scheduler_running(self, client: TestClient, components: Components) -> None:
        scheduler = MagicMock()
        scheduler.running = True
        asgi._scheduler = scheduler

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"


# ─────────────────────── GET /info ───────────────────────


class TestInfoEndpoint:
    def test_reports_installed_policy(self, client: TestClient, components: Components) -> None:
        body = client.get("/info").json()

        assert body["name"] == "eidas-bridge"
        assert body["prid"]["policy"]["DE"] == {"algorithm": "colresist-eIDAS", "persistenceClass": "B"}
        assert body["scheduler_running"] is False

    def test_empty_before_startup(self, client: TestClient) -> None:
        assert client.get("/info").json()["prid"]["policy"] == {}


# ─────────────────────── POST /refresh ───────────────────────


class TestRefreshEndpoint:
    def test_503_before_startup(self, client: TestClient) -> None:
        response = client.post("/refresh")

        assert response.status_code == 503
        assert response.json()["status"] == "ERROR"

    def test_ok_installs_new_policy(
        self, client: TestClient, components: Components, reader: InMemoryPolicyReader
    ) -> None:
        """
        GIVEN the policy document gained a country
        WHEN POST /refresh is called
        THEN it returns 200 OK with the new policy installed.
        """
        reader.entries = {"NO": entry(), "DE": entry("colresist-eIDAS", "B"), "DK": entry()}

        response = client.post("/refresh")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert set(body["policy"]) == {"DE", "DK", "NO"}

    def test_error_keeps_previous_policy(
        self, client: TestClient, components: Components, reader: InMemoryPolicyReader
    ) -> None:
        """
        GIVEN the policy document became unreadable
        WHEN POST /refresh is called
        THEN it returns 500 ERROR and the previous policy stays installed.
        """
        reader.fail()

        response = client.post("/refresh")

        assert response.status_code == 500
        assert response.json()["status"] == "ERROR"
        assert response.json()["errors"]
        assert components.service.get_policy().countries == ["DE", "NO"]
