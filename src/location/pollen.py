"""
Pollen client: daily pollen-type and plant indices for a point, served by
the Breeze backend proxy in front of the Google Pollen API.

Upstream docs: https://developers.google.com/maps/documentation/pollen
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from src.data.schema import Coordinate, PollenEntry
from src.location.errors import DecodeError, EmptyResultError
from src.location.http import DEFAULT_TIMEOUT, get_json

logger = logging.getLogger(__name__)

BREEZE_POLLEN_PROXY = "https://breeze.earth/api/pollen"

# Upstream display names that read badly in the UI
DISPLAY_NAME_OVERRIDES: Dict[str, str] = {
    "GRAMINALES": "Graminales",
}


class PollenClient:
    """Fetch today's pollen indices for a coordinate."""

    source = "pollen"

    def __init__(self, base_url: str = BREEZE_POLLEN_PROXY, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url
        self.timeout = timeout

    def fetch(self, coordinate: Coordinate) -> List[PollenEntry]:
        """
        Fetch pollen data for a location.

        Pollen types (grass, tree, weed) come first, then specific plants,
        each group in server order.

        Raises:
            TransportError: On network or HTTP failure.
            DecodeError: If the payload is malformed.
            EmptyResultError: If the payload has no daily entries.
        """
        params = {"lat": coordinate.latitude, "lon": coordinate.longitude}
        data = get_json(self.source, self.base_url, params=params, timeout=self.timeout)
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")

        daily = data.get("dailyInfo")
        if not daily:
            raise EmptyResultError(self.source, "no daily pollen data")
        if not isinstance(daily, list) or not isinstance(daily[0], dict):
            raise DecodeError(self.source, "'dailyInfo' is not a list of objects")

        today = daily[0]
        try:
            entries = [
                self._parse_entry(item, is_plant=False)
                for item in today.get("pollenTypeInfo") or []
            ]
            entries.extend(
                self._parse_entry(item, is_plant=True)
                for item in today.get("plantInfo") or []
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(self.source, f"malformed pollen entry: {e}") from e

        logger.info(
            "Pollen at %.4f, %.4f: %d entries",
            coordinate.latitude, coordinate.longitude, len(entries),
        )
        return entries

    def _parse_entry(self, item: dict, is_plant: bool) -> PollenEntry:
        code = str(item["code"])
        index = item.get("indexInfo") or {}
        value = index.get("value")
        entry = PollenEntry(
            id=code,
            name=DISPLAY_NAME_OVERRIDES.get(code, str(item["displayName"])),
            value=int(value) if value is not None else 0,
            category=index.get("category") or "Low",
            is_plant=is_plant,
            health_recommendations=_as_tuple(item.get("healthRecommendations")),
        )
        if is_plant:
            description = item.get("plantDescription") or {}
            entry = replace(
                entry,
                image_url=description.get("picture"),
                family=description.get("family"),
                season=description.get("season"),
                appearance=description.get("specialColors"),
            )
        return entry


def _as_tuple(values: Optional[list]) -> Optional[Tuple[str, ...]]:
    if values is None:
        return None
    return tuple(str(v) for v in values)
