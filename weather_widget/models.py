"""
Canonical data model shared by the provider, the cache and the renderer.

Upstream field names never appear past the adapters; everything here is in
canonical units (Celsius, meters/second, hectopascals).
"""
import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    def toggled(self) -> "UnitSystem":
        if self is UnitSystem.METRIC:
            return UnitSystem.IMPERIAL
        return UnitSystem.METRIC


class ConditionCode(str, Enum):
    CLEAR = "clear"
    PARTLY_CLOUDY = "partly_cloudy"
    CLOUDY = "cloudy"
    FOG = "fog"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    SNOW = "snow"
    SHOWERS = "showers"
    THUNDERSTORM = "thunderstorm"
    UNKNOWN = "unknown"


CONDITION_DESCRIPTIONS = {
    ConditionCode.CLEAR: "Clear",
    ConditionCode.PARTLY_CLOUDY: "Partly cloudy",
    ConditionCode.CLOUDY: "Overcast",
    ConditionCode.FOG: "Foggy",
    ConditionCode.DRIZZLE: "Drizzle",
    ConditionCode.RAIN: "Rain",
    ConditionCode.SNOW: "Snow",
    ConditionCode.SHOWERS: "Showers",
    ConditionCode.THUNDERSTORM: "Thunderstorm",
    ConditionCode.UNKNOWN: "Unknown",
}


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    display_name: str
    name: str = ""
    country: str = ""
    admin_area: Optional[str] = None


class CurrentConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature_c: float
    feels_like_c: float
    humidity_pct: int
    pressure_hpa: float
    wind_speed_ms: float
    condition_code: ConditionCode = ConditionCode.UNKNOWN
    observed_at: dt.datetime
    place: str = ""
    description: str = ""


class ForecastDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    temp_max_c: float
    temp_min_c: float
    condition_code: ConditionCode = ConditionCode.UNKNOWN


class CurrentView(BaseModel):
    """Display-ready current conditions."""

    place: str
    temperature: str
    feels_like: str
    humidity: str
    wind: str
    pressure: str
    description: str
    observed_at: str


class ForecastDayView(BaseModel):
    """Display-ready forecast card."""

    date: str
    temp_max: str
    temp_min: str
    description: str
