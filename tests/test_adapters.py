"""
Tests for mapping upstream payloads into the canonical model.
"""
from datetime import date

import pytest

from weather_widget.adapters import (
    OpenMeteoAdapter,
    OpenWeatherMapAdapter,
    format_display_name,
    owm_condition,
    wmo_condition,
)
from weather_widget.errors import UpstreamError
from weather_widget.models import ConditionCode

OWM_CURRENT = {
    "coord": {"lon": 26.1025, "lat": 44.4268},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky"}],
    "main": {
        "temp": 22.5,
        "feels_like": 21.8,
        "temp_min": 20.1,
        "temp_max": 24.3,
        "pressure": 1013,
        "humidity": 65,
    },
    "wind": {"speed": 3.5},
    "dt": 1701273600,
    "timezone": 7200,
    "name": "Bucharest",
}


def owm_hourly_item(dt: int, temp_min: float, temp_max: float, condition_id=500):
    return {
        "dt": dt,
        "main": {"temp": temp_max, "temp_min": temp_min, "temp_max": temp_max},
        "weather": [{"id": condition_id}],
    }


class TestConditionMapping:
    @pytest.mark.parametrize(
        "condition_id,expected",
        [
            (200, ConditionCode.THUNDERSTORM),
            (301, ConditionCode.DRIZZLE),
            (500, ConditionCode.RAIN),
            (521, ConditionCode.SHOWERS),
            (601, ConditionCode.SNOW),
            (741, ConditionCode.FOG),
            (800, ConditionCode.CLEAR),
            (802, ConditionCode.PARTLY_CLOUDY),
            (804, ConditionCode.CLOUDY),
            (None, ConditionCode.UNKNOWN),
        ],
    )
    def test_owm_condition(self, condition_id, expected):
        assert owm_condition(condition_id) == expected

    @pytest.mark.parametrize(
        "code,expected",
        [
            (0, ConditionCode.CLEAR),
            (2, ConditionCode.PARTLY_CLOUDY),
            (3, ConditionCode.CLOUDY),
            (48, ConditionCode.FOG),
            (53, ConditionCode.DRIZZLE),
            (63, ConditionCode.RAIN),
            (75, ConditionCode.SNOW),
            (81, ConditionCode.SHOWERS),
            (86, ConditionCode.SNOW),
            (95, ConditionCode.THUNDERSTORM),
            (42, ConditionCode.UNKNOWN),
        ],
    )
    def test_wmo_condition(self, code, expected):
        assert wmo_condition(code) == expected


class TestDisplayName:
    def test_with_admin_area(self):
        assert format_display_name("Springfield", "Illinois", "US") == (
            "Springfield, Illinois, US"
        )

    def test_admin_area_equal_to_name_is_skipped(self):
        assert format_display_name("Bucharest", "Bucharest", "RO") == "Bucharest, RO"

    def test_without_country(self):
        assert format_display_name("Atlantis", None, "") == "Atlantis"


class TestOpenWeatherMapAdapter:
    def setup_method(self):
        """Setup test fixtures."""
        self.adapter = OpenWeatherMapAdapter(units="metric")

    def test_geocode(self):
        results = [
            {"name": "Bucharest", "lat": 44.4268, "lon": 26.1025, "country": "RO"},
            {
                "name": "Bucharest",
                "lat": 44.427,
                "lon": 26.09,
                "country": "RO",
                "state": "Bucuresti",
            },
        ]

        coordinates = self.adapter.geocode(results)

        assert len(coordinates) == 2
        assert coordinates[0].lat == 44.4268
        assert coordinates[0].display_name == "Bucharest, RO"
        assert coordinates[1].display_name == "Bucharest, Bucuresti, RO"
        assert coordinates[1].admin_area == "Bucuresti"

    def test_geocode_empty(self):
        assert self.adapter.geocode([]) == []

    def test_current(self):
        current = self.adapter.current(OWM_CURRENT)

        assert current.temperature_c == 22.5
        assert current.feels_like_c == 21.8
        assert current.humidity_pct == 65
        assert current.pressure_hpa == 1013
        assert current.wind_speed_ms == 3.5
        assert current.condition_code == ConditionCode.CLEAR
        assert current.place == "Bucharest"
        assert current.description == "clear sky"
        assert current.observed_at.utcoffset().total_seconds() == 7200

    def test_current_imperial_payload_normalised(self):
        adapter = OpenWeatherMapAdapter(units="imperial")
        payload = dict(OWM_CURRENT)
        payload["main"] = dict(OWM_CURRENT["main"], temp=72.5, feels_like=32)
        payload["wind"] = {"speed": 10}

        current = adapter.current(payload)

        assert current.temperature_c == pytest.approx(22.5)
        assert current.feels_like_c == pytest.approx(0)
        assert current.wind_speed_ms == pytest.approx(4.4704)

    def test_current_standard_payload_normalised(self):
        adapter = OpenWeatherMapAdapter(units="standard")
        payload = dict(OWM_CURRENT)
        payload["main"] = dict(OWM_CURRENT["main"], temp=295.65, feels_like=295.65)

        assert adapter.current(payload).temperature_c == pytest.approx(22.5)

    def test_current_malformed_payload(self):
        with pytest.raises(UpstreamError):
            self.adapter.current({"cod": 200})

    def test_daily_with_temp_block(self):
        payload = {
            "city": {"timezone": 7200},
            "list": [
                {
                    "dt": 1701280800,
                    "temp": {"min": 15.2, "max": 25.8},
                    "weather": [{"id": 803}],
                }
            ],
        }

        days = self.adapter.daily(payload)

        assert days[0].date == date(2023, 11, 29)
        assert days[0].temp_max_c == 25.8
        assert days[0].temp_min_c == 15.2
        assert days[0].condition_code == ConditionCode.CLOUDY

    def test_daily_with_main_block(self):
        payload = {
            "city": {"timezone": 0},
            "list": [owm_hourly_item(1701280800, 15.2, 25.8, condition_id=800)],
        }

        days = self.adapter.daily(payload)

        assert days[0].temp_max_c == 25.8
        assert days[0].condition_code == ConditionCode.CLEAR

    def test_hourly_uses_city_timezone(self):
        # 2023-11-29 22:00 UTC is 2023-11-30 00:00 in UTC+2
        payload = {
            "city": {"timezone": 7200},
            "list": [owm_hourly_item(1701295200, 1, 2)],
        }

        entries = self.adapter.hourly(payload)

        assert entries[0].local_time.date() == date(2023, 11, 30)
        assert entries[0].local_time.hour == 0
        assert entries[0].condition_code == ConditionCode.RAIN


class TestOpenMeteoAdapter:
    def setup_method(self):
        """Setup test fixtures."""
        self.adapter = OpenMeteoAdapter()

    def test_geocode(self):
        results = [
            {
                "name": "Tel Aviv",
                "latitude": 32.08,
                "longitude": 34.78,
                "country": "Israel",
                "country_code": "IL",
                "admin1": "Tel Aviv",
            }
        ]

        coordinates = self.adapter.geocode(results)

        assert coordinates[0].lat == 32.08
        assert coordinates[0].country == "IL"
        assert coordinates[0].display_name == "Tel Aviv, Israel"

    def test_geocode_missing_coordinates(self):
        with pytest.raises(UpstreamError):
            self.adapter.geocode([{"name": "Nowhere"}])

    def test_current(self):
        payload = {
            "utc_offset_seconds": 10800,
            "current": {
                "time": "2025-10-20T14:00",
                "temperature_2m": 24.1,
                "apparent_temperature": 25.0,
                "relative_humidity_2m": 60,
                "weather_code": 2,
                "wind_speed_10m": 4.2,
                "pressure_msl": 1012.3,
            },
        }

        current = self.adapter.current(payload)

        assert current.temperature_c == 24.1
        assert current.feels_like_c == 25.0
        assert current.wind_speed_ms == 4.2
        assert current.condition_code == ConditionCode.PARTLY_CLOUDY
        assert current.observed_at.hour == 14
        assert current.observed_at.utcoffset().total_seconds() == 10800

    def test_daily(self):
        payload = {
            "daily": {
                "time": ["2025-10-20", "2025-10-21"],
                "temperature_2m_max": [28.0, 27.0],
                "temperature_2m_min": [20.0, 19.5],
                "weather_code": [1, 61],
            }
        }

        days = self.adapter.daily(payload)

        assert [d.date for d in days] == [date(2025, 10, 20), date(2025, 10, 21)]
        assert days[1].condition_code == ConditionCode.RAIN

    def test_daily_malformed(self):
        with pytest.raises(UpstreamError):
            self.adapter.daily({"daily": {"time": ["2025-10-20"]}})

    def test_hourly_skips_missing_temperatures(self):
        payload = {
            "utc_offset_seconds": 0,
            "hourly": {
                "time": ["2025-10-20T11:00", "2025-10-20T12:00"],
                "temperature_2m": [None, 18.5],
                "weather_code": [0, 3],
            },
        }

        entries = self.adapter.hourly(payload)

        assert len(entries) == 1
        assert entries[0].temp_max_c == 18.5
        assert entries[0].condition_code == ConditionCode.CLOUDY
