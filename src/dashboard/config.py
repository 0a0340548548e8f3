"""
Runtime configuration for the dashboard and the wiring of its real clients.

Every field has a working default; `DashboardConfig.from_env()` lets
deployments override endpoints and timings through BREEZE_* variables.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from src.dashboard.orchestrator import SEARCH_DEBOUNCE_SECONDS, DashboardOrchestrator
from src.data.schema import REFERENCE_YEARS
from src.location.air_quality import OPEN_METEO_AIR_QUALITY, AirQualityClient
from src.location.climate import OPEN_METEO_ARCHIVE, ClimateHistoryClient
from src.location.http import DEFAULT_TIMEOUT
from src.location.pollen import BREEZE_POLLEN_PROXY, PollenClient
from src.location.provider import IPAPI_URL, IPLocationProvider
from src.location.resolver import (
    DEFAULT_USER_AGENT,
    NOMINATIM_REVERSE,
    OPEN_METEO_GEOCODING,
    GeocodingClient,
    ReverseGeocoder,
)

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "granted", "on"}
_FALSE = {"0", "false", "no", "denied", "off"}


def _parse_consent(value: Optional[str]) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    value = value.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Ignoring unrecognized BREEZE_LOCATION_CONSENT=%r", value)
    return None


@dataclass
class DashboardConfig:
    """Endpoints, timings and preferences for one dashboard session."""
    air_quality_url: str = OPEN_METEO_AIR_QUALITY
    pollen_url: str = BREEZE_POLLEN_PROXY
    climate_url: str = OPEN_METEO_ARCHIVE
    geocoding_url: str = OPEN_METEO_GEOCODING
    reverse_geocoding_url: str = NOMINATIM_REVERSE
    ip_location_url: str = IPAPI_URL
    http_timeout: float = DEFAULT_TIMEOUT
    search_debounce: float = SEARCH_DEBOUNCE_SECONDS
    reference_years: List[int] = field(default_factory=lambda: list(REFERENCE_YEARS))
    user_agent: str = DEFAULT_USER_AGENT
    location_consent: Optional[bool] = None
    use_fahrenheit: bool = True

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Build a config from BREEZE_* environment variables."""
        env = os.environ
        config = cls()
        config.air_quality_url = env.get("BREEZE_AIR_QUALITY_URL", config.air_quality_url)
        config.pollen_url = env.get("BREEZE_POLLEN_URL", config.pollen_url)
        config.climate_url = env.get("BREEZE_CLIMATE_URL", config.climate_url)
        config.geocoding_url = env.get("BREEZE_GEOCODING_URL", config.geocoding_url)
        config.reverse_geocoding_url = env.get(
            "BREEZE_REVERSE_GEOCODING_URL", config.reverse_geocoding_url
        )
        config.ip_location_url = env.get("BREEZE_IP_LOCATION_URL", config.ip_location_url)
        config.http_timeout = float(env.get("BREEZE_HTTP_TIMEOUT", config.http_timeout))
        config.search_debounce = float(env.get("BREEZE_SEARCH_DEBOUNCE", config.search_debounce))
        config.user_agent = env.get("BREEZE_USER_AGENT", config.user_agent)
        config.location_consent = _parse_consent(env.get("BREEZE_LOCATION_CONSENT"))
        units = env.get("BREEZE_UNITS", "").strip().lower()
        if units in ("c", "celsius", "metric"):
            config.use_fahrenheit = False
        elif units in ("f", "fahrenheit", "imperial"):
            config.use_fahrenheit = True
        return config


def build_orchestrator(
    config: Optional[DashboardConfig] = None,
    location_prompt: Optional[Callable[[], bool]] = None,
) -> DashboardOrchestrator:
    """
    Wire a DashboardOrchestrator with the real HTTP clients.

    Args:
        config: Session configuration (default: from environment)
        location_prompt: Blocking yes/no callable asked when location
            consent is undecided
    """
    config = config or DashboardConfig.from_env()
    timeout = config.http_timeout
    return DashboardOrchestrator(
        geocoder=GeocodingClient(config.geocoding_url, timeout=timeout),
        air_quality=AirQualityClient(config.air_quality_url, timeout=timeout),
        pollen=PollenClient(config.pollen_url, timeout=timeout),
        climate=ClimateHistoryClient(
            config.climate_url,
            timeout=timeout,
            reference_years=config.reference_years,
        ),
        location_provider=IPLocationProvider(
            consent=config.location_consent,
            prompt=location_prompt,
            base_url=config.ip_location_url,
            timeout=timeout,
        ),
        reverse_geocoder=ReverseGeocoder(
            config.reverse_geocoding_url,
            timeout=timeout,
            user_agent=config.user_agent,
        ),
        search_debounce=config.search_debounce,
    )
