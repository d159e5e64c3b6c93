"""Unit tests for the status HTTP surface."""
import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from nft_tracker.api.main import create_app
from nft_tracker.core.container import build_services
from tests.conftest import MINT_A, MINT_B, create_snapshot


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def services(mock_bot, mock_provider):
    services = build_services(mock_bot, provider=mock_provider)
    services.nfts.track(MINT_A, 1, "A")
    services.nfts.track(MINT_B, 1, "B")
    services.nfts.set_alert(MINT_B, 1, 3.0)
    services.collections.put(create_snapshot())
    return services


@pytest.fixture
def mock_scheduler():
    scheduler = MagicMock()
    scheduler.job_states.return_value = {"check_alerts": "2025-06-01T12:00:30+00:00"}
    return scheduler


@pytest.fixture
def client(services, mock_scheduler):
    return TestClient(create_app(services, mock_scheduler))


# ============================================================================
# Tests
# ============================================================================

@pytest.mark.unit
class TestStatusRoutes:
    """Test status endpoints."""

    def test_health(self, client):
        """✅ Health check."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "nft-tracker-bot"}

    def test_ping(self, client):
        """✅ Ping returns a timestamp."""
        data = client.get("/ping").json()

        assert data["status"] == "ok"
        assert "timestamp" in data

    def test_wake(self, client):
        """✅ Wake endpoint answers."""
        assert client.get("/wake").json()["status"] == "awake"

    def test_monitor(self, client):
        """✅ Monitor reports registry sizes, alerts and jobs."""
        data = client.get("/monitor").json()

        assert data["tracked_nfts"] == 2
        assert data["tracked_collections"] == 1
        assert data["active_alerts"] == 1
        assert data["uptime_seconds"] >= 0
        assert data["workers"] == {"alert_check_running": False, "collection_poll_running": False}
        assert data["jobs"] == {"check_alerts": "2025-06-01T12:00:30+00:00"}

    def test_monitor_without_scheduler(self, services):
        """✅ No scheduler → empty jobs."""
        client = TestClient(create_app(services))

        assert client.get("/monitor").json()["jobs"] == {}

    def test_status_page(self, client):
        """✅ HTML status page with counts."""
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Tracked NFTs: 2" in response.text
        assert "NFT Tracker Bot" in response.text
