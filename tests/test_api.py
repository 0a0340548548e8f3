"""
API integration tests for the dashboard service.
The orchestrator is wired with in-memory stubs; no network access.
"""

import sys
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.data.schema import AirQualitySample, ClimateSample, Coordinate, Place, PollenEntry
from src.location.errors import TransportError
from src.location.provider import AuthorizationStatus, LocationProvider


NYC = Coordinate(40.7128, -74.0060)


class StubAirQuality:
    def __init__(self, fail=False):
        self.fail = fail

    async def fetch(self, coordinate):
        if self.fail:
            raise TransportError("air-quality", "HTTP 503")
        return AirQualitySample(us_aqi=42, pm25=9.6, pm10=18.3, co=231.0, no2=21.4, so2=4.1, o3=61.0)

    async def fetch_many(self, coordinates):
        return [30 + i for i in range(len(coordinates))]


class StubPollen:
    async def fetch(self, coordinate):
        return [PollenEntry(id="GRASS", name="Grass", value=3, category="Moderate", is_plant=False)]


class StubClimate:
    async def fetch(self, coordinate):
        return [ClimateSample(1980, 24.0), ClimateSample(2024, 25.0)]


class StubGeocoder:
    async def search(self, query):
        return [Place("5128581", "New York", NYC, country="United States", region="New York")]


class StubProvider(LocationProvider):
    async def _locate(self):
        return NYC


def _build(status=AuthorizationStatus.AUTHORIZED, air_fails=False):
    from src.dashboard.orchestrator import DashboardOrchestrator

    return DashboardOrchestrator(
        geocoder=StubGeocoder(),
        air_quality=StubAirQuality(fail=air_fails),
        pollen=StubPollen(),
        climate=StubClimate(),
        location_provider=StubProvider(status),
        search_debounce=0.0,
    )


def _client(orchestrator, fahrenheit=True):
    import src.api.app as app_module
    from src.dashboard.config import DashboardConfig

    app_module.config = DashboardConfig(use_fahrenheit=fahrenheit)
    app_module.orchestrator = orchestrator
    app_module.api_version = "1.0.0-test"

    from fastapi.testclient import TestClient
    return TestClient(app_module.app)


@pytest.fixture
def client():
    """Test client sharing one event loop across requests."""
    with _client(_build()) as test_client:
        yield test_client


class TestHealthAndCatalog:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "1.0.0-test"}

    def test_cities(self, client):
        response = client.get("/cities")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 10
        assert data[0]["name"] == "New York"
        assert data[0]["id"] == "top:new-york"
        assert data[0]["coordinate"] == {"latitude": 40.7128, "longitude": -74.006}

    def test_ticker_limit(self, client):
        response = client.get("/ticker", params={"limit": 3})
        assert response.status_code == 200
        data = response.json()
        assert [e["place"]["name"] for e in data] == ["New York", "Los Angeles", "Chicago"]
        assert [e["us_aqi"] for e in data] == [30, 31, 32]

    @pytest.mark.parametrize("limit", [0, -2])
    def test_ticker_limit_must_be_positive(self, client, limit):
        response = client.get("/ticker", params={"limit": limit})
        assert response.status_code == 422

    def test_ticker_published_in_state(self, client):
        client.get("/ticker", params={"limit": 2})

        data = client.get("/state").json()

        assert [e["place"]["name"] for e in data["ticker"]] == ["New York", "Los Angeles"]
        assert [e["us_aqi"] for e in data["ticker"]] == [30, 31]

    def test_initial_state(self, client):
        data = client.get("/state").json()
        assert data["status"] == "idle"
        assert data["air_quality"] is None
        assert data["pollutants"] == []
        assert data["search"]["status"] == "idle"
        assert data["ticker"] == []


class TestLocationEndpoints:

    def test_select_returns_loaded_dashboard(self, client):
        """POST /select with a catalog place returns the full dashboard."""
        place = client.get("/cities").json()[0]

        response = client.post("/select", json=place)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "loaded"
        assert data["is_loading"] is False
        assert data["location_name"] == "New York, USA"
        assert data["air_quality"]["us_aqi"] == 42
        assert data["aqi_status"]["text"] == "Good"
        assert [p["label"] for p in data["pollutants"]] == ["PM2.5", "PM10", "NO₂", "SO₂", "O₃", "CO"]
        assert data["pollutants"][0]["status"] == "Good"
        assert data["error"] is None

    def test_enrichment_visible_in_state(self, client):
        client.post("/refresh", json={"latitude": 40.7128, "longitude": -74.0060})

        data = client.get("/state").json()

        assert data["location_name"] == "40.7128, -74.0060"
        assert data["pollen"][0]["name"] == "Grass"
        assert data["pollen"][0]["level"] == "Moderate"
        assert data["climate"]["baseline_year"] == 1980
        assert data["climate"]["temperature_change_c"] == 1.0
        assert data["climate"]["temperature_change"] == "+1.8°F"
        assert [s["temperature"] for s in data["climate"]["samples"]] == ["75.2°F", "77.0°F"]
        assert data["climate"]["samples"][0]["temperature_c"] == 24.0

    def test_climate_samples_follow_celsius_setting(self):
        with _client(_build(), fahrenheit=False) as test_client:
            test_client.post("/refresh", json={"latitude": 40.7128, "longitude": -74.0060})
            data = test_client.get("/state").json()

        assert [s["temperature"] for s in data["climate"]["samples"]] == ["24.0°C", "25.0°C"]
        assert data["climate"]["temperature_change"] == "+1.0°C"

    def test_refresh_out_of_range_is_422(self, client):
        response = client.post("/refresh", json={"latitude": 95.0, "longitude": 0.0})
        assert response.status_code == 422

    def test_air_quality_failure_reported(self):
        with _client(_build(air_fails=True)) as test_client:
            response = test_client.post("/refresh", json={"latitude": 40.7, "longitude": -74.0})

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "load_failed"
        assert data["error"]["kind"] == "transport"
        assert data["error"]["message"] == "Unable to fetch air quality data."

    def test_search_results_via_state(self, client):
        response = client.post("/search", json={"query": "New"})
        assert response.status_code == 200
        assert response.json()["search"]["query"] == "New"

        import time
        for _ in range(50):
            data = client.get("/state").json()
            if data["search"]["status"] == "results_shown":
                break
            time.sleep(0.01)
        assert data["search"]["results"][0]["display_name"] == "New York, New York, United States"

    def test_short_search_clears(self, client):
        data = client.post("/search", json={"query": "N"}).json()
        assert data["search"]["status"] == "idle"
        assert data["search"]["results"] == []


class TestCurrentLocationEndpoints:

    def test_denied_location(self):
        with _client(_build(status=AuthorizationStatus.DENIED)) as test_client:
            data = test_client.post("/current-location").json()

        assert data["status"] == "idle"
        assert data["error"]["kind"] == "permission"
        assert data["is_locating"] is False

    def test_authorized_location(self, client):
        data = client.post("/current-location").json()
        assert data["status"] == "loaded"
        assert data["location_name"] == "Your Location"

    def test_permission_answer_completes_request(self):
        import time

        with _client(_build(status=AuthorizationStatus.NOT_DETERMINED)) as test_client:
            pending = test_client.post("/current-location").json()
            assert pending["is_locating"] is True

            test_client.post("/location-permission", json={"granted": True})
            for _ in range(50):
                data = test_client.get("/state").json()
                if data["status"] == "loaded":
                    break
                time.sleep(0.01)

        assert data["status"] == "loaded"
        assert data["air_quality"]["us_aqi"] == 42
        assert data["is_locating"] is False
