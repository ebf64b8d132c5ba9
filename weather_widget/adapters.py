"""
Payload adapters: one per upstream JSON shape, each producing the canonical
model in Celsius, meters/second and hectopascals.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .errors import UpstreamError
from .forecast import HourlyEntry
from .models import ConditionCode, Coordinates, CurrentConditions, ForecastDay

logger = logging.getLogger(__name__)

MPH_TO_MS = 0.44704


def fahrenheit_to_celsius(value: float) -> float:
    return (value - 32) * 5 / 9


def kelvin_to_celsius(value: float) -> float:
    return value - 273.15


def format_display_name(name: str, admin_area: Optional[str], country: str) -> str:
    """'Bucharest, Bucuresti, RO' style label for suggestions."""
    parts = [name]
    if admin_area and admin_area != name:
        parts.append(admin_area)
    if country:
        parts.append(country)
    return ", ".join(parts)


def owm_condition(condition_id: Optional[int]) -> ConditionCode:
    """Map an OpenWeatherMap condition id (e.g. 800) to a canonical code."""
    if condition_id is None:
        return ConditionCode.UNKNOWN
    group = condition_id // 100
    if group == 2:
        return ConditionCode.THUNDERSTORM
    if group == 3:
        return ConditionCode.DRIZZLE
    if group == 5:
        return ConditionCode.SHOWERS if condition_id >= 520 else ConditionCode.RAIN
    if group == 6:
        return ConditionCode.SNOW
    if group == 7:
        return ConditionCode.FOG
    if condition_id == 800:
        return ConditionCode.CLEAR
    if condition_id in (801, 802):
        return ConditionCode.PARTLY_CLOUDY
    if condition_id in (803, 804):
        return ConditionCode.CLOUDY
    return ConditionCode.UNKNOWN


def wmo_condition(code: Optional[int]) -> ConditionCode:
    """Map a WMO weather interpretation code (Open-Meteo) to a canonical code."""
    if code is None:
        return ConditionCode.UNKNOWN
    if code == 0:
        return ConditionCode.CLEAR
    if code in (1, 2):
        return ConditionCode.PARTLY_CLOUDY
    if code == 3:
        return ConditionCode.CLOUDY
    if code in (45, 48):
        return ConditionCode.FOG
    if 51 <= code <= 57:
        return ConditionCode.DRIZZLE
    if 61 <= code <= 67:
        return ConditionCode.RAIN
    if 71 <= code <= 77 or code in (85, 86):
        return ConditionCode.SNOW
    if 80 <= code <= 82:
        return ConditionCode.SHOWERS
    if 95 <= code <= 99:
        return ConditionCode.THUNDERSTORM
    return ConditionCode.UNKNOWN


def _malformed(operation: str, error: Exception) -> UpstreamError:
    logger.error(f"Unexpected {operation} payload: {error}")
    return UpstreamError(502, f"Unexpected {operation} payload")


class OpenWeatherMapAdapter:
    """Maps OpenWeatherMap 2.5 payloads requested with ``units``."""

    supports_daily = True

    def __init__(self, units: str = "metric"):
        self.units = units

    def _temperature(self, value: float) -> float:
        if self.units == "imperial":
            return fahrenheit_to_celsius(value)
        if self.units == "standard":
            return kelvin_to_celsius(value)
        return float(value)

    def _wind(self, value: float) -> float:
        if self.units == "imperial":
            return value * MPH_TO_MS
        return float(value)

    @staticmethod
    def _tz(seconds: Optional[int]) -> timezone:
        return timezone(timedelta(seconds=seconds or 0))

    def geocode(self, results: List[Dict[str, Any]]) -> List[Coordinates]:
        coordinates = []
        try:
            for result in results:
                name = result.get("name", "")
                country = result.get("country") or ""
                state = result.get("state")
                coordinates.append(
                    Coordinates(
                        lat=result["lat"],
                        lon=result["lon"],
                        name=name,
                        country=country,
                        admin_area=state,
                        display_name=format_display_name(name, state, country),
                    )
                )
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("geocoding", e) from e
        return coordinates

    def current(self, data: Dict[str, Any]) -> CurrentConditions:
        try:
            main = data["main"]
            weather = (data.get("weather") or [{}])[0]
            tz = self._tz(data.get("timezone"))
            return CurrentConditions(
                temperature_c=self._temperature(main["temp"]),
                feels_like_c=self._temperature(main.get("feels_like", main["temp"])),
                humidity_pct=int(main["humidity"]),
                pressure_hpa=float(main["pressure"]),
                wind_speed_ms=self._wind((data.get("wind") or {}).get("speed", 0.0)),
                condition_code=owm_condition(weather.get("id")),
                observed_at=datetime.fromtimestamp(data["dt"], tz),
                place=data.get("name", ""),
                description=weather.get("description", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("current weather", e) from e

    def daily(self, data: Dict[str, Any]) -> List[ForecastDay]:
        try:
            tz = self._tz((data.get("city") or {}).get("timezone"))
            days = []
            for item in data["list"]:
                # forecast/daily carries temp.{min,max}; older shapes use main
                temp = item.get("temp")
                if isinstance(temp, dict):
                    temp_max, temp_min = temp["max"], temp["min"]
                else:
                    temp_max = item["main"]["temp_max"]
                    temp_min = item["main"]["temp_min"]
                weather = (item.get("weather") or [{}])[0]
                days.append(
                    ForecastDay(
                        date=datetime.fromtimestamp(item["dt"], tz).date(),
                        temp_max_c=self._temperature(temp_max),
                        temp_min_c=self._temperature(temp_min),
                        condition_code=owm_condition(weather.get("id")),
                    )
                )
            return days
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("daily forecast", e) from e

    def hourly(self, data: Dict[str, Any]) -> List[HourlyEntry]:
        try:
            tz = self._tz((data.get("city") or {}).get("timezone"))
            entries = []
            for item in data["list"]:
                main = item["main"]
                weather = (item.get("weather") or [{}])[0]
                entries.append(
                    HourlyEntry(
                        local_time=datetime.fromtimestamp(item["dt"], tz),
                        temp_max_c=self._temperature(main["temp_max"]),
                        temp_min_c=self._temperature(main["temp_min"]),
                        condition_code=owm_condition(weather.get("id")),
                    )
                )
            return entries
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("hourly forecast", e) from e


class OpenMeteoAdapter:
    """Maps Open-Meteo payloads requested in Celsius and m/s."""

    supports_daily = True

    @staticmethod
    def _local_time(value: str, offset_seconds: Optional[int]) -> datetime:
        # Open-Meteo returns naive local timestamps with timezone=auto
        tz = timezone(timedelta(seconds=offset_seconds or 0))
        return datetime.fromisoformat(value).replace(tzinfo=tz)

    def geocode(self, results: List[Dict[str, Any]]) -> List[Coordinates]:
        coordinates = []
        try:
            for result in results:
                name = result.get("name", "")
                country = result.get("country_code") or result.get("country") or ""
                admin = result.get("admin1")
                coordinates.append(
                    Coordinates(
                        lat=result["latitude"],
                        lon=result["longitude"],
                        name=name,
                        country=country,
                        admin_area=admin,
                        display_name=format_display_name(
                            name, admin, result.get("country") or country
                        ),
                    )
                )
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("geocoding", e) from e
        return coordinates

    def current(self, data: Dict[str, Any]) -> CurrentConditions:
        try:
            current = data["current"]
            temperature = current["temperature_2m"]
            return CurrentConditions(
                temperature_c=float(temperature),
                feels_like_c=float(current.get("apparent_temperature", temperature)),
                humidity_pct=int(current["relative_humidity_2m"]),
                pressure_hpa=float(current["pressure_msl"]),
                wind_speed_ms=float(current.get("wind_speed_10m") or 0.0),
                condition_code=wmo_condition(current.get("weather_code")),
                observed_at=self._local_time(
                    current["time"], data.get("utc_offset_seconds")
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise _malformed("current weather", e) from e

    def daily(self, data: Dict[str, Any]) -> List[ForecastDay]:
        try:
            daily = data["daily"]
            codes = daily.get("weather_code") or []
            days = []
            for i, day in enumerate(daily["time"]):
                days.append(
                    ForecastDay(
                        date=datetime.fromisoformat(day).date(),
                        temp_max_c=float(daily["temperature_2m_max"][i]),
                        temp_min_c=float(daily["temperature_2m_min"][i]),
                        condition_code=wmo_condition(
                            codes[i] if i < len(codes) else None
                        ),
                    )
                )
            return days
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise _malformed("daily forecast", e) from e

    def hourly(self, data: Dict[str, Any]) -> List[HourlyEntry]:
        try:
            hourly = data["hourly"]
            offset = data.get("utc_offset_seconds")
            codes = hourly.get("weather_code") or []
            entries = []
            for i, stamp in enumerate(hourly["time"]):
                temperature = hourly["temperature_2m"][i]
                if temperature is None:
                    continue
                entries.append(
                    HourlyEntry(
                        local_time=self._local_time(stamp, offset),
                        temp_max_c=float(temperature),
                        temp_min_c=float(temperature),
                        condition_code=wmo_condition(
                            codes[i] if i < len(codes) else None
                        ),
                    )
                )
            return entries
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise _malformed("hourly forecast", e) from e
