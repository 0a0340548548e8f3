"""
Pydantic request/response schemas for the FastAPI dashboard service.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.dashboard.formatting import format_temperature, format_temperature_diff
from src.dashboard.state import TickerEntry, ViewState
from src.data.schema import Place


class CoordinateModel(BaseModel):
    """A latitude/longitude pair."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude (decimal degrees)")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude (decimal degrees)")


class PlaceModel(BaseModel):
    """A named place from search results or the city catalog."""
    id: str
    name: str
    country: Optional[str] = None
    region: Optional[str] = None
    coordinate: CoordinateModel
    display_name: Optional[str] = None

    model_config = {"json_schema_extra": {
        "examples": [{
            "id": "5128581",
            "name": "New York",
            "country": "United States",
            "region": "New York",
            "coordinate": {"latitude": 40.71427, "longitude": -74.00597},
        }]
    }}


class SearchRequest(BaseModel):
    """Input schema for /search."""
    query: str = Field(..., description="Free-text city name; at least 2 characters to search")


class AirQualityModel(BaseModel):
    us_aqi: int
    pm25: float
    pm10: float
    co: float
    no2: float
    so2: float
    o3: float


class AQIStatusModel(BaseModel):
    text: str
    description: str
    color: str
    tips: List[str]


class PollutantModel(BaseModel):
    """One cell of the pollutant grid."""
    key: str
    label: str
    full_name: str
    value: float
    rounded_value: int
    unit: str
    status: str


class PollenModel(BaseModel):
    id: str
    name: str
    value: int
    category: str
    level: str
    is_plant: bool
    image_url: Optional[str] = None
    family: Optional[str] = None
    season: Optional[str] = None
    appearance: Optional[str] = None
    health_recommendations: Optional[List[str]] = None


class ClimateModel(BaseModel):
    year: int
    temperature_c: float
    temperature: str = Field(..., description="Formatted in the session's unit, e.g. '75.2°F'")


class ClimateSummaryModel(BaseModel):
    samples: List[ClimateModel]
    baseline_year: Optional[int] = None
    temperature_change_c: float = 0.0
    temperature_change: str = ""


class ErrorModel(BaseModel):
    kind: str
    message: str
    source: Optional[str] = None


class SearchStateModel(BaseModel):
    query: str
    status: str
    results: List[PlaceModel]


class TickerEntryModel(BaseModel):
    place: PlaceModel
    us_aqi: Optional[int] = None


class DashboardStateResponse(BaseModel):
    """Output schema for every command and /state."""
    status: str
    is_loading: bool
    is_locating: bool
    location_name: str
    place: Optional[PlaceModel] = None
    coordinate: Optional[CoordinateModel] = None
    air_quality: Optional[AirQualityModel] = None
    aqi_status: Optional[AQIStatusModel] = None
    pollutants: List[PollutantModel]
    pollen: List[PollenModel]
    climate: ClimateSummaryModel
    error: Optional[ErrorModel] = None
    source_errors: Dict[str, str] = {}
    search: SearchStateModel
    ticker: List[TickerEntryModel] = []


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# ---- Converters ----

def place_model(place: Place) -> PlaceModel:
    return PlaceModel(
        id=place.id,
        name=place.name,
        country=place.country,
        region=place.region,
        coordinate=CoordinateModel(
            latitude=place.coordinate.latitude,
            longitude=place.coordinate.longitude,
        ),
        display_name=place.display_name,
    )


def ticker_model(entry: TickerEntry) -> TickerEntryModel:
    return TickerEntryModel(place=place_model(entry.place), us_aqi=entry.us_aqi)


def state_response(state: ViewState, fahrenheit: bool = True) -> DashboardStateResponse:
    """Flatten a ViewState snapshot into the response schema."""
    aq = state.air_quality
    status = state.aqi_status
    return DashboardStateResponse(
        status=state.status.value,
        is_loading=state.is_loading,
        is_locating=state.is_locating,
        location_name=state.location_name,
        place=place_model(state.place) if state.place else None,
        coordinate=CoordinateModel(
            latitude=state.coordinate.latitude,
            longitude=state.coordinate.longitude,
        ) if state.coordinate else None,
        air_quality=AirQualityModel(
            us_aqi=aq.us_aqi, pm25=aq.pm25, pm10=aq.pm10,
            co=aq.co, no2=aq.no2, so2=aq.so2, o3=aq.o3,
        ) if aq else None,
        aqi_status=AQIStatusModel(
            text=status.text,
            description=status.description,
            color=status.color,
            tips=list(status.tips),
        ) if status else None,
        pollutants=[
            PollutantModel(
                key=r.type.key,
                label=r.type.label,
                full_name=r.type.full_name,
                value=r.value,
                rounded_value=r.rounded_value,
                unit=r.type.unit,
                status=r.status.value,
            )
            for r in state.pollutants
        ],
        pollen=[
            PollenModel(
                id=p.id,
                name=p.name,
                value=p.value,
                category=p.category,
                level=p.level.value,
                is_plant=p.is_plant,
                image_url=p.image_url,
                family=p.family,
                season=p.season,
                appearance=p.appearance,
                health_recommendations=list(p.health_recommendations)
                if p.health_recommendations is not None else None,
            )
            for p in state.pollen
        ],
        climate=ClimateSummaryModel(
            samples=[
                ClimateModel(
                    year=c.year,
                    temperature_c=c.temperature_c,
                    temperature=format_temperature(c.temperature_c, fahrenheit),
                )
                for c in state.climate
            ],
            baseline_year=state.baseline_year,
            temperature_change_c=round(state.temperature_change, 2),
            temperature_change=format_temperature_diff(state.temperature_change, fahrenheit)
            if len(state.climate) >= 2 else "",
        ),
        error=ErrorModel(
            kind=state.error.kind.value,
            message=state.error.message,
            source=state.error.source,
        ) if state.error else None,
        source_errors=dict(state.source_errors),
        search=SearchStateModel(
            query=state.search_query,
            status=state.search_status.value,
            results=[place_model(p) for p in state.search_results],
        ),
        ticker=[ticker_model(e) for e in state.ticker],
    )
