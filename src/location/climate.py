"""
Open-Meteo climate history client: daily maximum temperature on today's
calendar day for a set of decadal reference years. Uses ERA5 reanalysis.

API docs: https://open-meteo.com/en/docs/historical-weather-api
License: CC-BY 4.0
"""

import calendar
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Callable, List, Optional, Sequence

from src.data.schema import REFERENCE_YEARS, ClimateSample, Coordinate
from src.location.errors import DecodeError, EmptyResultError, SourceError
from src.location.http import DEFAULT_TIMEOUT, get_json

logger = logging.getLogger(__name__)

OPEN_METEO_ARCHIVE = "https://archive-api.open-meteo.com/v1/archive"


def same_day_in_year(day: date, year: int) -> date:
    """Return the same month/day in another year (29 Feb becomes 28 Feb)."""
    if day.month == 2 and day.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, day.month, day.day)


class ClimateHistoryClient:
    """
    Fetch one daily max temperature per reference year for a coordinate.

    Each year is an independent archive request. A failed year is left out
    of the result instead of failing the call, so the returned list may be
    shorter than the year set (or empty).
    """

    source = "climate"

    def __init__(
        self,
        base_url: str = OPEN_METEO_ARCHIVE,
        timeout: float = DEFAULT_TIMEOUT,
        reference_years: Optional[Sequence[int]] = None,
        today: Callable[[], date] = date.today,
        max_workers: int = 6,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.reference_years = list(reference_years or REFERENCE_YEARS)
        self.today = today
        self.max_workers = max_workers

    def years(self) -> List[int]:
        """Reference years plus the current year, without duplicates."""
        current_year = self.today().year
        return list(dict.fromkeys(self.reference_years + [current_year]))

    def fetch(self, coordinate: Coordinate) -> List[ClimateSample]:
        """
        Fetch historical temperatures for every reference year.

        Returns:
            Samples sorted ascending by year; years whose request failed are
            simply missing.
        """
        today = self.today()
        years = self.years()
        samples: List[ClimateSample] = []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(years))) as pool:
            futures = {
                pool.submit(self.fetch_year, coordinate, same_day_in_year(today, year)): year
                for year in years
            }
            for future in as_completed(futures):
                year = futures[future]
                try:
                    samples.append(future.result())
                except SourceError as e:
                    logger.warning("Climate data for %d unavailable: %s", year, e)

        samples.sort(key=lambda s: s.year)
        logger.info(
            "Climate history at %.4f, %.4f: %d/%d years",
            coordinate.latitude, coordinate.longitude, len(samples), len(years),
        )
        return samples

    def fetch_year(self, coordinate: Coordinate, day: date) -> ClimateSample:
        """
        Fetch the daily max temperature for a single date.

        Raises:
            TransportError: On network or HTTP failure.
            DecodeError: If the payload is malformed.
            EmptyResultError: If the archive has no value for that day.
        """
        day_str = day.strftime("%Y-%m-%d")
        params = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "start_date": day_str,
            "end_date": day_str,
            "daily": "temperature_2m_max",
            "timezone": "auto",
        }
        data = get_json(self.source, self.base_url, params=params, timeout=self.timeout)
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")

        daily = data.get("daily") or {}
        if not isinstance(daily, dict):
            raise DecodeError(self.source, "'daily' is not an object")
        temps = daily.get("temperature_2m_max")
        if temps is not None and not isinstance(temps, list):
            raise DecodeError(self.source, "'temperature_2m_max' is not a list")
        # Archive lags a few days behind, so recent dates come back as null
        if not temps or temps[0] is None:
            raise EmptyResultError(self.source, f"no temperature for {day_str}")
        try:
            temperature = float(temps[0])
        except (TypeError, ValueError) as e:
            raise DecodeError(self.source, f"temperature is not numeric: {temps[0]!r}") from e

        return ClimateSample(year=day.year, temperature_c=temperature)
