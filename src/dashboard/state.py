"""
Published dashboard state.

`ViewState` is an immutable snapshot; the orchestrator replaces it wholesale
on every change, so readers never observe a half-applied update.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from src.data.schema import (
    AirQualitySample,
    AQIStatus,
    ClimateSample,
    Coordinate,
    Place,
    PollenEntry,
    PollutantReading,
    aqi_status,
    pollutant_readings,
)
from src.location.errors import DecodeError, EmptyResultError


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class SearchStatus(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS_SHOWN = "results_shown"


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    DECODE = "decode"
    EMPTY = "empty"
    PERMISSION = "permission"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ErrorInfo:
    """A user-visible error."""
    kind: ErrorKind
    message: str
    source: Optional[str] = None


def error_from_exception(exc: Exception, message: str, source: Optional[str] = None) -> ErrorInfo:
    """Classify a data source failure into a user-visible error."""
    if isinstance(exc, DecodeError):
        kind = ErrorKind.DECODE
    elif isinstance(exc, EmptyResultError):
        kind = ErrorKind.EMPTY
    else:
        # TransportError and anything the transport layer did not classify
        kind = ErrorKind.TRANSPORT
    return ErrorInfo(kind=kind, message=message, source=getattr(exc, "source", source))


@dataclass(frozen=True)
class TickerEntry:
    """Current US AQI for one catalog city (None when unavailable)."""
    place: Place
    us_aqi: Optional[int] = None


@dataclass(frozen=True)
class ViewState:
    place: Optional[Place] = None
    coordinate: Optional[Coordinate] = None
    location_name: str = ""
    air_quality: Optional[AirQualitySample] = None
    pollen: Tuple[PollenEntry, ...] = ()
    climate: Tuple[ClimateSample, ...] = ()
    status: LoadStatus = LoadStatus.IDLE
    is_locating: bool = False
    error: Optional[ErrorInfo] = None
    search_query: str = ""
    search_results: Tuple[Place, ...] = ()
    search_status: SearchStatus = SearchStatus.IDLE
    # Diagnostics for enrichment sources (pollen, climate); never shown as errors
    source_errors: Dict[str, str] = field(default_factory=dict)
    ticker: Tuple[TickerEntry, ...] = ()

    @property
    def pollutants(self) -> Tuple[PollutantReading, ...]:
        return pollutant_readings(self.air_quality)

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING

    @property
    def aqi_status(self) -> Optional[AQIStatus]:
        if self.air_quality is None:
            return None
        return aqi_status(self.air_quality.us_aqi)

    @property
    def temperature_change(self) -> float:
        """Latest minus earliest climate sample, 0.0 with fewer than two."""
        if len(self.climate) < 2:
            return 0.0
        return self.climate[-1].temperature_c - self.climate[0].temperature_c

    @property
    def baseline_year(self) -> Optional[int]:
        return self.climate[0].year if self.climate else None

