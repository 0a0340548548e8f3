"""Tests for environment configuration and client wiring."""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.dashboard.config import DashboardConfig, build_orchestrator
from src.location.provider import AuthorizationStatus


class TestDashboardConfig:

    def test_defaults(self, monkeypatch):
        for name in ("BREEZE_UNITS", "BREEZE_LOCATION_CONSENT", "BREEZE_HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        config = DashboardConfig.from_env()

        assert config.air_quality_url == "https://air-quality-api.open-meteo.com/v1/air-quality"
        assert config.http_timeout == 30
        assert config.search_debounce == 0.3
        assert config.reference_years == [1980, 1990, 2000, 2010, 2020]
        assert config.location_consent is None
        assert config.use_fahrenheit is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BREEZE_AIR_QUALITY_URL", "http://localhost:9000/aq")
        monkeypatch.setenv("BREEZE_HTTP_TIMEOUT", "5")
        monkeypatch.setenv("BREEZE_SEARCH_DEBOUNCE", "0.1")
        monkeypatch.setenv("BREEZE_LOCATION_CONSENT", "yes")
        monkeypatch.setenv("BREEZE_UNITS", "metric")

        config = DashboardConfig.from_env()

        assert config.air_quality_url == "http://localhost:9000/aq"
        assert config.http_timeout == 5.0
        assert config.search_debounce == 0.1
        assert config.location_consent is True
        assert config.use_fahrenheit is False

    def test_unrecognized_consent_is_undecided(self, monkeypatch):
        monkeypatch.setenv("BREEZE_LOCATION_CONSENT", "maybe")
        assert DashboardConfig.from_env().location_consent is None

    def test_build_orchestrator_wires_config(self):
        config = DashboardConfig(
            pollen_url="http://localhost:9000/pollen",
            http_timeout=3,
            location_consent=False,
            reference_years=[2000],
        )

        orchestrator = build_orchestrator(config)

        assert orchestrator.location_provider.authorization_status is AuthorizationStatus.DENIED
        assert orchestrator._pollen.base_url == "http://localhost:9000/pollen"
        assert orchestrator._pollen.timeout == 3
        assert orchestrator._climate.reference_years == [2000]
