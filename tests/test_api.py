"""
Test Suite for the HTTP API

FastAPI TestClient with the database, settings and SERP source overridden
(see conftest.make_client).
"""

from unittest.mock import patch

import httpx
import pytest

from solar_rank.auth import TokenStore
from solar_rank.business import BusinessConfig, TargetKeywords
from solar_rank.database import repository


@pytest.fixture
def configured(db, round_rock_config):
    repository.save_business_config(db, round_rock_config)
    return round_rock_config


@pytest.fixture
def sunrun_configured(db):
    config = BusinessConfig(
        business_name="Sunrun",
        website="https://www.sunrun.com/",
        service_areas=["Round Rock, TX"],
        target_keywords=TargetKeywords(global_keywords=["solar installation", "solar panels"]),
    )
    repository.save_business_config(db, config)
    return config


# ============================================================================
# Health
# ============================================================================

class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        db_info = {"database_type": "sqlite", "connected": True, "tables": ["solar_locations"]}
        with patch("api.main.get_db_info", return_value=db_info):
            response = client.get("/api/health")

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["databaseType"] == "sqlite"


# ============================================================================
# Business configuration
# ============================================================================

class TestBusinessConfigEndpoints:
    """Test /api/business-config."""

    def test_defaults_before_setup(self, client):
        data = client.get("/api/business-config").json()

        assert data["businessName"] == ""
        assert data["serviceAreas"] == []
        assert data["targetKeywords"] == {"global": [], "areas": {}, "competitors": {}}

    def test_save_and_read(self, client):
        payload = {
            "businessName": "Affordable Solar Round Rock",
            "websiteUrl": "https://www.affordablesolar-rr.com/",
            "serviceAreas": ["Round Rock, TX", " "],
            "targetKeywords": ["solar installation", "solar panels"],
        }
        response = client.post("/api/business-config", json=payload)

        assert response.status_code == 200
        assert response.json()["ok"] is True

        data = client.get("/api/business-config").json()
        assert data["serviceAreas"] == ["Round Rock, TX"]
        assert data["targetKeywords"]["global"] == ["solar installation", "solar panels"]


# ============================================================================
# Competitor tracking
# ============================================================================

class TestCompetitorTrackingEndpoints:
    """Test /api/competitor-tracking."""

    def test_missing_config_is_400(self, client):
        response = client.get("/api/competitor-tracking")

        assert response.status_code == 400
        assert "Business configuration not found" in response.json()["error"]

    def test_fresh_then_cached(self, client, configured):
        first = client.get("/api/competitor-tracking").json()

        assert first["fromCache"] is False
        assert len(first["competitors"]) == 12
        domains = {c["competitor"]["domain"] for c in first["competitors"]}
        assert "hillcountrysolar.com" in domains
        assert "affordablesolar-rr.com" not in domains
        assert "youtube.com" not in domains

        second = client.get("/api/competitor-tracking").json()
        assert second["fromCache"] is True
        assert len(second["competitors"]) == 12

    def test_refresh_clears_cache(self, client, configured):
        client.get("/api/competitor-tracking")

        response = client.post("/api/competitor-tracking", json={"action": "refresh"})
        assert response.status_code == 200
        assert response.json()["cleared"]["competitors"] == 12

        assert client.get("/api/competitor-tracking").json()["fromCache"] is False

    def test_remove(self, client, configured):
        client.get("/api/competitor-tracking")

        response = client.post("/api/competitor-tracking", json={"action": "remove", "competitorId": "sunrun-com"})
        assert response.status_code == 200

        status = client.get("/api/competitor-tracking/schedule").json()
        assert status["totalCompetitors"] == 11

    def test_remove_unknown_is_404(self, client):
        response = client.post("/api/competitor-tracking", json={"action": "remove", "competitorId": "nope-com"})
        assert response.status_code == 404

    def test_remove_requires_id(self, client):
        response = client.post("/api/competitor-tracking", json={"action": "remove"})
        assert response.status_code == 400

    def test_unknown_action_is_400(self, client):
        response = client.post("/api/competitor-tracking", json={"action": "explode"})
        assert response.status_code == 400

    def test_schedule(self, client, configured):
        assert client.get("/api/competitor-tracking/schedule").json()["status"] == "idle"

        result = client.post("/api/competitor-tracking/schedule").json()
        assert result["success"] is True
        assert result["totalAreas"] == 2
        assert result["totalCompetitors"] == 23

        status = client.get("/api/competitor-tracking/schedule").json()
        assert status["status"] == "active"
        assert status["totalCompetitors"] == 12

    def test_serp_outage_still_answers(self, make_client, failing_serp, configured):
        client = make_client(serp=failing_serp)
        data = client.get("/api/competitor-tracking").json()

        assert data["fromCache"] is False
        assert [c["competitor"]["domain"] for c in data["competitors"]] == ["hillcountrysolar.com"]
        assert data["errors"]


# ============================================================================
# Keyword discovery
# ============================================================================

class TestKeywordEndpoints:
    """Test /api/keyword-discovery and /api/keywords/bootstrap."""

    def test_discovery_for_area(self, client):
        data = client.get("/api/keyword-discovery", params={"area": "Austin, TX"}).json()

        suggestions = data["areas"]["Austin, TX"]
        assert len(suggestions) == 12
        assert suggestions[0] == {
            "keyword": "solar panels austin, tx",
            "estimatedVolume": 9600,
            "competitorCount": 5,
            "opportunity": 30,
        }

    def test_discovery_for_configured_areas(self, client, configured):
        data = client.get("/api/keyword-discovery", params={"limit": 3}).json()

        assert list(data["areas"]) == ["Round Rock, TX", "Austin, TX"]
        assert all(len(items) == 3 for items in data["areas"].values())

    def test_discovery_without_config_is_400(self, client):
        assert client.get("/api/keyword-discovery").status_code == 400

    def test_apply_merges_into_config(self, client, configured):
        response = client.post(
            "/api/keyword-discovery",
            json={"apply": {"Phoenix, AZ": ["solar panels phoenix, az", "solar panels phoenix, az"]}},
        )

        assert response.status_code == 200
        targets = response.json()["targetKeywords"]
        assert targets["areas"]["Phoenix, AZ"] == ["solar panels phoenix, az"]
        assert targets["areas"]["Round Rock, TX"] == ["tesla powerwall round rock"]
        assert targets["global"][-1] == "solar panels phoenix, az"
        assert targets["competitors"] == {"Round Rock, TX": ["https://www.hillcountrysolar.com/"]}

        config = client.get("/api/business-config").json()
        assert config["serviceAreas"] == ["Round Rock, TX", "Austin, TX", "Phoenix, AZ"]
        assert config["businessName"] == "Affordable Solar Round Rock"

    def test_apply_empty_is_400(self, client):
        assert client.post("/api/keyword-discovery", json={"apply": {}}).status_code == 400

    def test_bootstrap(self, client, configured):
        data = client.post("/api/keywords/bootstrap", json={"area": "Phoenix, AZ", "limit": 3}).json()

        assert data["processed"] == 3
        assert all(r["found"] is False for r in data["results"])

        locations = {loc["name"]: loc for loc in client.get("/api/locations").json()["locations"]}
        assert locations["Phoenix, AZ"]["overallScore"] == 75
        assert locations["Phoenix, AZ"]["keywordCount"] == 3

    def test_bootstrap_requires_config(self, client):
        response = client.post("/api/keywords/bootstrap", json={"area": "Phoenix, AZ"})
        assert response.status_code == 400

    def test_bootstrap_validates_limit(self, client, configured):
        response = client.post("/api/keywords/bootstrap", json={"area": "Phoenix, AZ", "limit": 0})
        assert response.status_code == 422


# ============================================================================
# Rankings
# ============================================================================

class TestRankingEndpoints:
    """Test /api/rankings, /api/auto-ranking and /api/live-rankings."""

    def test_auto_ranking_then_summaries(self, client):
        response = client.post("/api/auto-ranking", json={
            "keywords": ["solar installation"],
            "locations": ["Austin, TX"],
            "domain": "sunrun.com",
        })

        assert response.status_code == 200
        assert response.json()["summary"] == {"totalChecked": 1, "found": 1, "notFound": 0}

        recent = client.get("/api/auto-ranking").json()["rankings"]
        assert [(r["keyword"], r["position"], r["location"]) for r in recent] == [
            ("solar installation", 10, "Austin, TX")
        ]

        top = client.get("/api/rankings").json()["top"]
        assert top[0]["keyword"] == "solar installation"
        assert top[0]["avgPosition"] == 10.0

        by_area = client.get("/api/rankings/by-area").json()["areas"]
        assert list(by_area) == ["Austin, TX"]

        status = client.get("/api/rankings/status").json()["status"]
        assert status[0]["area"] == "Austin, TX"
        assert status[0]["mode"] == "simulation"
        assert status[0]["lastUpdated"] is not None

    def test_auto_ranking_validation(self, client):
        response = client.post("/api/auto-ranking", json={"keywords": [], "locations": ["Austin, TX"], "domain": "sunrun.com"})
        assert response.status_code == 422

    def test_live_rankings_preview_when_disabled(self, client, configured):
        data = client.get("/api/live-rankings").json()

        assert data["mode"] == "simulation"
        assert data["area"] == "Round Rock, TX"
        assert "LIVE_SCRAPER_ENABLED" in data["message"]

    def test_live_rankings_preview_requires_config(self, client):
        assert client.get("/api/live-rankings").status_code == 400

    def test_live_rankings_enabled(self, make_client, settings, sunrun_configured):
        live_settings = settings.model_copy(update={"LIVE_SCRAPER_ENABLED": True})
        client = make_client(settings_override=live_settings)

        data = client.get("/api/live-rankings").json()

        assert data["mode"] == "live"
        assert [r["position"] for r in data["results"]] == [10, 10]

        top = client.get("/api/rankings").json()["top"]
        assert {r["keyword"] for r in top} == {
            "solar installation Round Rock, TX",
            "solar panels Round Rock, TX",
        }

    def test_post_live_rankings_disabled(self, client, configured):
        data = client.post("/api/live-rankings", json={}).json()

        assert data["mode"] == "simulation"
        assert [p["area"] for p in data["processed"]] == ["Round Rock, TX", "Austin, TX"]

    def test_post_live_rankings_requires_config(self, client):
        assert client.post("/api/live-rankings", json={"areas": ["Austin, TX"]}).status_code == 400


# ============================================================================
# Integrations
# ============================================================================

class TestIntegrationEndpoints:
    """Test /api/integrations credential storage."""

    @pytest.fixture
    def token_client(self, make_client, db, settings):
        from api.dependencies import get_token_store
        from api.main import app

        def _make(handler):
            client = make_client()
            mock = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            app.dependency_overrides[get_token_store] = lambda: TokenStore(db, settings, client=mock)
            return client
        return _make

    def test_status_before_connect(self, client):
        assert client.get("/api/integrations/google").json() == {"provider": "google", "connected": False}

    def test_save_token(self, client):
        response = client.post("/api/integrations/google/token", json={
            "access_token": "a1", "refresh_token": "r1", "expires_in": 3600,
        })

        data = response.json()
        assert response.status_code == 200
        assert data["connected"] is True
        assert data["hasRefreshToken"] is True
        assert "access_token" not in data

    def test_refresh(self, token_client):
        client = token_client(lambda request: httpx.Response(200, json={"access_token": "a2", "expires_in": 3600}))
        client.post("/api/integrations/google/token", json={"access_token": "a1", "refresh_token": "r1"})

        response = client.post("/api/integrations/google/refresh")

        assert response.status_code == 200
        assert response.json()["expired"] is False

    def test_rejected_refresh_is_502(self, token_client):
        client = token_client(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
        client.post("/api/integrations/google/token", json={"access_token": "a1", "refresh_token": "r1"})

        response = client.post("/api/integrations/google/refresh")

        assert response.status_code == 502
        assert response.json()["error"] == "Token refresh failed"
