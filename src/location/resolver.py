"""
Location resolver: free-text city search via the Open-Meteo geocoding API and
best-effort reverse lookups (coordinates to "City, Country") via Nominatim.

API docs: https://open-meteo.com/en/docs/geocoding-api
          https://nominatim.org/release-docs/develop/api/Reverse/
"""

import logging
from typing import List, Optional

from src.data.schema import Coordinate, Place
from src.location.errors import DecodeError
from src.location.http import DEFAULT_TIMEOUT, get_json

logger = logging.getLogger(__name__)

OPEN_METEO_GEOCODING = "https://geocoding-api.open-meteo.com/v1/search"
NOMINATIM_REVERSE = "https://nominatim.openstreetmap.org/reverse"

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 5

DEFAULT_USER_AGENT = "breeze-dashboard/1.0"

# Nominatim address keys tried in order for the locality name
_LOCALITY_KEYS = ("city", "town", "village", "municipality")


class GeocodingClient:
    """Resolve a city name into a short ranked list of candidate places."""

    source = "geocoding"

    def __init__(self, base_url: str = OPEN_METEO_GEOCODING, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url
        self.timeout = timeout

    def search(self, query: str) -> List[Place]:
        """
        Search for places matching a free-text query.

        The query must be at least 2 characters long; shorter queries return
        an empty list without contacting the server. Zero matches is an empty
        list, not an error.

        Raises:
            TransportError: On network or HTTP failure.
            DecodeError: If the payload is malformed.
        """
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        params = {
            "name": query,
            "count": MAX_RESULTS,
            "language": "en",
            "format": "json",
        }
        data = get_json(self.source, self.base_url, params=params, timeout=self.timeout)
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")

        results = data.get("results") or []
        if not isinstance(results, list):
            raise DecodeError(self.source, "'results' is not a list")

        places = [self._parse_place(item) for item in results[:MAX_RESULTS]]
        logger.info("Geocoding '%s' returned %d place(s)", query, len(places))
        return places

    def _parse_place(self, item: dict) -> Place:
        try:
            coordinate = Coordinate(float(item["latitude"]), float(item["longitude"]))
            return Place(
                id=str(item["id"]),
                name=str(item["name"]),
                country=item.get("country") or None,
                region=item.get("admin1") or None,
                coordinate=coordinate,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(self.source, f"malformed place entry: {e}") from e


class ReverseGeocoder:
    """Turn a coordinate into a human-readable place name (best effort)."""

    source = "reverse-geocoding"

    def __init__(
        self,
        base_url: str = NOMINATIM_REVERSE,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent

    def lookup(self, coordinate: Coordinate) -> Optional[str]:
        """
        Return "City, Country" for a coordinate, or None if the server knows
        nothing usable about it.

        Raises:
            SourceError: On transport or decoding failure.
        """
        params = {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "format": "jsonv2",
            "zoom": 10,
            "accept-language": "en",
        }
        # Nominatim usage policy requires an identifying User-Agent
        headers = {"User-Agent": self.user_agent}
        data = get_json(self.source, self.base_url, params=params,
                        timeout=self.timeout, headers=headers)
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")

        address = data.get("address") or {}
        locality = next((address[k] for k in _LOCALITY_KEYS if address.get(k)), None)
        components = [c for c in (locality, address.get("country")) if c]
        if not components:
            return None
        return ", ".join(components)

