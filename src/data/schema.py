"""
Canonical data types and static reference data for the Breeze dashboard.

Everything here is immutable: values produced by the remote clients and the
reference tables (pollutant thresholds, AQI bands, city catalog) that the
presentation layer reads alongside them.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


# ---------- Location values ----------

@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (-90 <= self.latitude <= 90):
            raise ValueError(f"Latitude {self.latitude} out of range [-90, 90]")
        if not (-180 <= self.longitude <= 180):
            raise ValueError(f"Longitude {self.longitude} out of range [-180, 180]")


@dataclass(frozen=True)
class Place:
    """A named place, from geocoding search or the static city catalog."""
    id: str
    name: str
    coordinate: Coordinate
    country: Optional[str] = None
    region: Optional[str] = None

    @property
    def display_name(self) -> str:
        parts = [self.name]
        for part in (self.region, self.country):
            if part:
                parts.append(part)
        return ", ".join(parts)


# ---------- Air quality ----------

@dataclass(frozen=True)
class AirQualitySample:
    """Current air quality snapshot (concentrations in µg/m³)."""
    us_aqi: int
    pm25: float
    pm10: float
    co: float
    no2: float
    so2: float
    o3: float


class PollutantStatus(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY = "Unhealthy"


@dataclass(frozen=True)
class PollutantType:
    """Static descriptor for one pollutant: display metadata and thresholds."""
    key: str
    label: str
    full_name: str
    description: str
    good_limit: float
    moderate_limit: float
    unit: str = "µg/m³"


PM25 = PollutantType(
    key="pm25",
    label="PM2.5",
    full_name="Fine Particulate Matter (PM2.5)",
    description="Tiny particles ≤2.5 micrometers that can penetrate deep into lungs and bloodstream.",
    good_limit=12,
    moderate_limit=35.4,
)
PM10 = PollutantType(
    key="pm10",
    label="PM10",
    full_name="Coarse Particulate Matter (PM10)",
    description="Inhalable particles ≤10 micrometers from dust, pollen, and mold. Affects respiratory system.",
    good_limit=54,
    moderate_limit=154,
)
NO2 = PollutantType(
    key="no2",
    label="NO₂",
    full_name="Nitrogen Dioxide (NO₂)",
    description="Reddish-brown gas from vehicle emissions and power plants. Irritates airways and reduces immunity.",
    good_limit=53,
    moderate_limit=100,
)
SO2 = PollutantType(
    key="so2",
    label="SO₂",
    full_name="Sulfur Dioxide (SO₂)",
    description="Colorless gas from fossil fuel combustion. Can trigger asthma and respiratory issues.",
    good_limit=35,
    moderate_limit=75,
)
O3 = PollutantType(
    key="o3",
    label="O₃",
    full_name="Ground-Level Ozone (O₃)",
    description="Formed by sunlight reacting with pollutants. Harmful to lungs, especially during outdoor activities.",
    good_limit=54,
    moderate_limit=70,
)
CO = PollutantType(
    key="co",
    label="CO",
    full_name="Carbon Monoxide (CO)",
    description="Odorless, colorless gas from incomplete combustion. Reduces oxygen delivery to body tissues.",
    good_limit=4400,
    moderate_limit=9400,
)

# Display order of the pollutant grid; each key is an AirQualitySample field
POLLUTANT_TYPES: List[PollutantType] = [PM25, PM10, NO2, SO2, O3, CO]


@dataclass(frozen=True)
class PollutantReading:
    """One pollutant value paired with its static descriptor."""
    type: PollutantType
    value: float

    @property
    def status(self) -> PollutantStatus:
        if self.value <= self.type.good_limit:
            return PollutantStatus.GOOD
        if self.value <= self.type.moderate_limit:
            return PollutantStatus.MODERATE
        return PollutantStatus.UNHEALTHY

    @property
    def rounded_value(self) -> int:
        return round_half_away(self.value)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (42.5 -> 43)."""
    return int(math.floor(abs(value) + 0.5) * (1 if value >= 0 else -1))


def pollutant_readings(sample: Optional[AirQualitySample]) -> Tuple[PollutantReading, ...]:
    """Derive the pollutant grid from an air quality sample (empty for None)."""
    if sample is None:
        return ()
    return tuple(
        PollutantReading(type=ptype, value=getattr(sample, ptype.key))
        for ptype in POLLUTANT_TYPES
    )


@dataclass(frozen=True)
class AQIStatus:
    """Human-readable band for a US AQI value."""
    text: str
    description: str
    color: str
    tips: Tuple[str, ...]


# (upper bound inclusive, status); the last band catches everything above 300
AQI_BANDS: List[Tuple[float, AQIStatus]] = [
    (25, AQIStatus(
        text="Excellent",
        description="Air quality is pristine! Perfect day for adventures.",
        color="aqiGood",
        tips=(
            "Air is exceptionally clean right now",
            "No air quality concerns at this level",
        ),
    )),
    (50, AQIStatus(
        text="Good",
        description="Air quality is great. Breathe easy!",
        color="aqiGood",
        tips=(
            "Air quality meets health standards",
            "Pollutant levels are low",
            "No health risks from air quality",
        ),
    )),
    (75, AQIStatus(
        text="Moderate",
        description="Air quality is acceptable for most people.",
        color="aqiModerate",
        tips=(
            "Air quality is acceptable for most",
            "Unusually sensitive people may experience minor effects",
            "Pollutant levels are within moderate range",
        ),
    )),
    (100, AQIStatus(
        text="Slightly High",
        description="Getting a bit iffy for sensitive groups.",
        color="aqiModerate",
        tips=(
            "Sensitive groups may experience respiratory symptoms",
            "Air pollutants are at elevated levels",
            "Those with asthma should have medication available",
        ),
    )),
    (150, AQIStatus(
        text="Unhealthy for Sensitive Groups",
        description="Sensitive groups should be cautious.",
        color="aqiUnhealthySensitive",
        tips=(
            "Air quality may affect children, elderly, and those with respiratory conditions",
            "Pollutant concentrations are unhealthy for sensitive groups",
            "Consider using air purifiers indoors",
        ),
    )),
    (200, AQIStatus(
        text="Unhealthy",
        description="Everyone may feel the effects now.",
        color="aqiUnhealthy",
        tips=(
            "Air quality is unhealthy for everyone",
            "Keeping windows closed will help maintain indoor air quality",
            "Wearing masks can reduce exposure to pollutants",
        ),
    )),
    (300, AQIStatus(
        text="Very Unhealthy",
        description="Serious health concerns for everyone.",
        color="aqiVeryUnhealthy",
        tips=(
            "Air pollutants are at dangerous levels",
            "Indoor air quality is significantly better than outdoor",
            "Air purifiers can help reduce indoor pollutant levels",
        ),
    )),
    (math.inf, AQIStatus(
        text="Hazardous",
        description="Emergency conditions. Seriously bad air.",
        color="aqiHazardous",
        tips=(
            "Air quality has reached hazardous levels",
            "Outdoor air contains dangerous pollutant concentrations",
            "N95 masks filter harmful particles from the air",
            "Air purifiers on high settings can improve indoor air",
        ),
    )),
]


def aqi_status(aqi: int) -> AQIStatus:
    """Look up the AQI band for a US AQI value."""
    for upper, status in AQI_BANDS:
        if aqi <= upper:
            return status
    return AQI_BANDS[-1][1]


# ---------- Pollen ----------

class PollenLevel(str, Enum):
    NONE = "None"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"


@dataclass(frozen=True)
class PollenEntry:
    """A pollen type (grass/tree/weed) or a specific plant, indexed 0..5."""
    id: str
    name: str
    value: int
    category: str
    is_plant: bool
    image_url: Optional[str] = None
    family: Optional[str] = None
    season: Optional[str] = None
    appearance: Optional[str] = None
    health_recommendations: Optional[Tuple[str, ...]] = None

    @property
    def level(self) -> PollenLevel:
        # Numeric index is more reliable than the category label
        if self.value == 0:
            return PollenLevel.NONE
        if self.value == 1:
            return PollenLevel.LOW
        if self.value in (2, 3):
            return PollenLevel.MODERATE
        if self.value == 4:
            return PollenLevel.HIGH
        if self.value >= 5:
            return PollenLevel.VERY_HIGH
        return PollenLevel.LOW


# ---------- Climate ----------

@dataclass(frozen=True)
class ClimateSample:
    """Daily maximum temperature for one reference year."""
    year: int
    temperature_c: float


# Decadal reference years; the current year is appended at fetch time
REFERENCE_YEARS: List[int] = [1980, 1990, 2000, 2010, 2020]


# ---------- City catalog ----------

def _city(name: str, country: str, lat: float, lon: float) -> Place:
    slug = name.lower().replace(" ", "-")
    return Place(id=f"top:{slug}", name=name, country=country,
                 coordinate=Coordinate(lat, lon))


TOP_CITIES: List[Place] = [
    _city("New York", "USA", 40.7128, -74.0060),
    _city("Los Angeles", "USA", 34.0522, -118.2437),
    _city("Chicago", "USA", 41.8781, -87.6298),
    _city("London", "UK", 51.5074, -0.1278),
    _city("Paris", "France", 48.8566, 2.3522),
    _city("Tokyo", "Japan", 35.6762, 139.6503),
    _city("Berlin", "Germany", 52.5200, 13.4050),
    _city("Toronto", "Canada", 43.6532, -79.3832),
    _city("Sydney", "Australia", -33.8688, 151.2093),
    _city("Dubai", "UAE", 25.2048, 55.2708),
]

TOP_CITIES_BY_NAME: Dict[str, Place] = {p.name.lower(): p for p in TOP_CITIES}


def find_top_city(name: str) -> Optional[Place]:
    """Case-insensitive lookup in the static city catalog."""
    return TOP_CITIES_BY_NAME.get(name.strip().lower())
