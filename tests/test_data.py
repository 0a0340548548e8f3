"""Tests for data types, reference tables, view state and formatting."""

import sys
import pytest
from pathlib import Path

# Add project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.data.schema import (
    AQI_BANDS, CO, NO2, O3, PM10, PM25, POLLUTANT_TYPES, SO2, TOP_CITIES,
    AirQualitySample, ClimateSample, Coordinate, Place, PollenEntry, PollenLevel,
    PollutantReading, PollutantStatus, aqi_status, find_top_city, pollutant_readings,
    round_half_away,
)
from src.dashboard.state import (
    ErrorKind, LoadStatus, ViewState, error_from_exception,
)
from src.dashboard.formatting import (
    celsius_to_fahrenheit, format_temperature, format_temperature_diff,
)
from src.location.errors import DecodeError, EmptyResultError, TransportError


def _sample(**overrides):
    values = dict(us_aqi=42, pm25=9.6, pm10=18.3, co=231.0, no2=21.4, so2=4.1, o3=61.0)
    values.update(overrides)
    return AirQualitySample(**values)


class TestLocationValues:

    def test_coordinate_range_checked(self):
        with pytest.raises(ValueError):
            Coordinate(91.0, 0.0)
        with pytest.raises(ValueError):
            Coordinate(0.0, -180.5)
        assert Coordinate(-90.0, 180.0).latitude == -90.0

    def test_display_name_skips_missing_parts(self):
        coord = Coordinate(51.5, -0.1)
        assert Place("1", "London", coord, country="UK", region="England").display_name == \
            "London, England, UK"
        assert Place("2", "London", coord, country="UK").display_name == "London, UK"
        assert Place("3", "Atlantis", coord).display_name == "Atlantis"

    def test_places_are_values(self):
        a = Place("1", "Paris", Coordinate(48.8566, 2.3522), country="France")
        b = Place("1", "Paris", Coordinate(48.8566, 2.3522), country="France")
        assert a == b
        assert hash(a) == hash(b)


class TestPollutants:
    """Pollutant thresholds are inclusive upper bounds."""

    def test_grid_order(self):
        assert [p.label for p in POLLUTANT_TYPES] == ["PM2.5", "PM10", "NO₂", "SO₂", "O₃", "CO"]

    def test_thresholds(self):
        expected = {
            PM25: (12, 35.4), PM10: (54, 154), NO2: (53, 100),
            SO2: (35, 75), O3: (54, 70), CO: (4400, 9400),
        }
        for ptype, (good, moderate) in expected.items():
            assert (ptype.good_limit, ptype.moderate_limit) == (good, moderate)
            assert ptype.unit == "µg/m³"

    @pytest.mark.parametrize("value,status", [
        (0.0, PollutantStatus.GOOD),
        (12.0, PollutantStatus.GOOD),
        (12.1, PollutantStatus.MODERATE),
        (35.4, PollutantStatus.MODERATE),
        (35.5, PollutantStatus.UNHEALTHY),
    ])
    def test_pm25_status(self, value, status):
        assert PollutantReading(PM25, value).status is status

    def test_co_uses_its_own_scale(self):
        assert PollutantReading(CO, 231.0).status is PollutantStatus.GOOD
        assert PollutantReading(CO, 9400.0).status is PollutantStatus.MODERATE
        assert PollutantReading(CO, 9401.0).status is PollutantStatus.UNHEALTHY

    def test_rounded_value_half_away_from_zero(self):
        assert PollutantReading(PM25, 2.5).rounded_value == 3
        assert PollutantReading(PM25, 9.4).rounded_value == 9
        assert PollutantReading(PM25, 0.5).rounded_value == 1

    @pytest.mark.parametrize("value,expected", [
        (42.5, 43), (86.5, 87), (42.4, 42), (-2.5, -3), (0.0, 0),
    ])
    def test_round_half_away(self, value, expected):
        assert round_half_away(value) == expected

    def test_readings_follow_sample(self):
        readings = pollutant_readings(_sample())
        assert [r.type.key for r in readings] == ["pm25", "pm10", "no2", "so2", "o3", "co"]
        assert readings[0].value == 9.6
        assert readings[-1].value == 231.0
        assert pollutant_readings(None) == ()


class TestAQIBands:

    @pytest.mark.parametrize("aqi,text", [
        (0, "Excellent"),
        (25, "Excellent"),
        (26, "Good"),
        (42, "Good"),
        (50, "Good"),
        (75, "Moderate"),
        (100, "Slightly High"),
        (150, "Unhealthy for Sensitive Groups"),
        (200, "Unhealthy"),
        (300, "Very Unhealthy"),
        (301, "Hazardous"),
        (999, "Hazardous"),
    ])
    def test_band_lookup(self, aqi, text):
        assert aqi_status(aqi).text == text

    def test_every_band_has_tips(self):
        for _, status in AQI_BANDS:
            assert status.tips
            assert status.color.startswith("aqi")


class TestPollenLevels:

    @pytest.mark.parametrize("value,level", [
        (0, PollenLevel.NONE),
        (1, PollenLevel.LOW),
        (2, PollenLevel.MODERATE),
        (3, PollenLevel.MODERATE),
        (4, PollenLevel.HIGH),
        (5, PollenLevel.VERY_HIGH),
        (-1, PollenLevel.LOW),
    ])
    def test_level_from_index(self, value, level):
        entry = PollenEntry(id="TREE", name="Tree", value=value, category="x", is_plant=False)
        assert entry.level is level


class TestCityCatalog:

    def test_catalog(self):
        assert len(TOP_CITIES) == 10
        assert TOP_CITIES[0].name == "New York"
        assert len({p.id for p in TOP_CITIES}) == 10

    def test_find_top_city(self):
        assert find_top_city("  tokyo ").country == "Japan"
        assert find_top_city("Los Angeles").id == "top:los-angeles"
        assert find_top_city("Gotham") is None


class TestViewState:

    def test_defaults(self):
        state = ViewState()
        assert state.status is LoadStatus.IDLE
        assert state.pollutants == ()
        assert state.aqi_status is None
        assert state.temperature_change == 0.0
        assert state.baseline_year is None

    def test_derived_values(self):
        state = ViewState(
            air_quality=_sample(us_aqi=42),
            climate=(ClimateSample(1980, 24.0), ClimateSample(2000, 24.9), ClimateSample(2024, 25.5)),
            status=LoadStatus.LOADED,
        )
        assert state.aqi_status.text == "Good"
        assert len(state.pollutants) == 6
        assert state.temperature_change == pytest.approx(1.5)
        assert state.baseline_year == 1980
        assert not state.is_loading

    def test_single_climate_sample_has_no_change(self):
        state = ViewState(climate=(ClimateSample(2024, 25.5),))
        assert state.temperature_change == 0.0
        assert state.baseline_year == 2024

    def test_error_classification(self):
        decode = error_from_exception(DecodeError("pollen", "bad"), "msg")
        assert decode.kind is ErrorKind.DECODE
        assert decode.source == "pollen"
        assert error_from_exception(EmptyResultError("air-quality", "none"), "m").kind is ErrorKind.EMPTY
        assert error_from_exception(TransportError("x", "down"), "m").kind is ErrorKind.TRANSPORT
        other = error_from_exception(RuntimeError("?"), "m", source="air-quality")
        assert other.kind is ErrorKind.TRANSPORT
        assert other.source == "air-quality"


class TestFormatting:

    def test_absolute_temperature(self):
        assert celsius_to_fahrenheit(100) == 212
        assert format_temperature(22.0) == "71.6°F"
        assert format_temperature(22.0, fahrenheit=False) == "22.0°C"

    def test_difference_has_no_offset(self):
        assert format_temperature_diff(1.0) == "+1.8°F"
        assert format_temperature_diff(-0.5, fahrenheit=False) == "-0.5°C"
        assert format_temperature_diff(0.0, fahrenheit=False) == "+0.0°C"
