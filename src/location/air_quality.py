"""
Open-Meteo air quality client: current US AQI and pollutant concentrations
for a point. Free API, no key required.

API docs: https://open-meteo.com/en/docs/air-quality-api
License: CC-BY 4.0
"""

import logging
from typing import List, Optional, Sequence

from src.data.schema import AirQualitySample, Coordinate, round_half_away
from src.location.errors import DecodeError, EmptyResultError, SourceError
from src.location.http import DEFAULT_TIMEOUT, get_json, require_float

logger = logging.getLogger(__name__)

OPEN_METEO_AIR_QUALITY = "https://air-quality-api.open-meteo.com/v1/air-quality"

CURRENT_VARIABLES = [
    "us_aqi",
    "pm10",
    "pm2_5",
    "carbon_monoxide",
    "nitrogen_dioxide",
    "sulphur_dioxide",
    "ozone",
]


class AirQualityClient:
    """Fetch the current air quality snapshot for a coordinate."""

    source = "air-quality"

    def __init__(self, base_url: str = OPEN_METEO_AIR_QUALITY, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url
        self.timeout = timeout

    def fetch(self, coordinate: Coordinate) -> AirQualitySample:
        """
        Fetch current air quality for a location.

        Raises:
            TransportError: On network or HTTP failure.
            DecodeError: If the payload is malformed.
            EmptyResultError: If the payload carries no current reading.
        """
        params = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "current": ",".join(CURRENT_VARIABLES),
            "timezone": "auto",
        }
        data = get_json(self.source, self.base_url, params=params, timeout=self.timeout)
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")

        current = data.get("current")
        if not current:
            raise EmptyResultError(self.source, "no air quality data available")
        if not isinstance(current, dict):
            raise DecodeError(self.source, "'current' is not an object")

        sample = AirQualitySample(
            us_aqi=round_half_away(require_float(self.source, current, "us_aqi")),
            pm25=require_float(self.source, current, "pm2_5"),
            pm10=require_float(self.source, current, "pm10"),
            co=require_float(self.source, current, "carbon_monoxide"),
            no2=require_float(self.source, current, "nitrogen_dioxide"),
            so2=require_float(self.source, current, "sulphur_dioxide"),
            o3=require_float(self.source, current, "ozone"),
        )
        logger.info(
            "Air quality at %.4f, %.4f: US AQI %d",
            coordinate.latitude, coordinate.longitude, sample.us_aqi,
        )
        return sample

    def fetch_many(self, coordinates: Sequence[Coordinate]) -> List[Optional[int]]:
        """
        Fetch only the US AQI for several coordinates in a single request.

        Open-Meteo answers a multi-location query with a list of documents
        and a single-location query with one document. Never raises: any
        failure yields None for every coordinate.

        Returns:
            One US AQI (or None) per input coordinate, in input order.
        """
        if not coordinates:
            return []

        params = {
            "latitude": ",".join(str(c.latitude) for c in coordinates),
            "longitude": ",".join(str(c.longitude) for c in coordinates),
            "current": "us_aqi",
        }
        empty: List[Optional[int]] = [None] * len(coordinates)
        try:
            data = get_json(self.source, self.base_url, params=params, timeout=self.timeout)
        except SourceError as e:
            logger.warning("Multi-city air quality fetch failed: %s", e)
            return empty

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            logger.warning("Multi-city air quality payload has unexpected type %s", type(data).__name__)
            return empty

        values = [_current_aqi(doc) for doc in data[:len(coordinates)]]
        return values + [None] * (len(coordinates) - len(values))


def _current_aqi(doc) -> Optional[int]:
    if not isinstance(doc, dict):
        return None
    current = doc.get("current")
    if not isinstance(current, dict):
        return None
    value = current.get("us_aqi")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return round_half_away(value)
