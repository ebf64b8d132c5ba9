"""
HTTP collaborators for the upstream geocoding and weather APIs.

Clients only move raw JSON; mapping to the canonical model lives in
``adapters``. Transport failures become ``NetworkError`` and non-2xx
responses become ``UpstreamError`` carrying the status.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from utils.metrics import upstream_calls

from .errors import ConfigError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def _get_json(
    url: str, params: Dict[str, Any], operation: str, timeout: int = DEFAULT_TIMEOUT
) -> Any:
    """GET ``url`` and decode JSON, translating failures into weather errors."""
    try:
        response = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"{operation} request failed: {e}")
        upstream_calls.labels(operation=operation, status="network_error").inc()
        raise NetworkError(f"Failed to reach {url}: {e}") from e

    status = response.status_code
    upstream_calls.labels(operation=operation, status=str(status)).inc()

    if not 200 <= status < 300:
        message = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                message = str(body.get("message") or body.get("reason") or "")
        except ValueError:
            pass
        logger.warning(f"{operation} returned HTTP {status}: {message}")
        raise UpstreamError(status, message)

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"{operation} returned invalid JSON: {e}")
        raise UpstreamError(status, "Invalid JSON in upstream response") from e


class OpenWeatherMapClient:
    """
    OpenWeatherMap geocoding and weather endpoints.

    With ``proxy_url`` set, requests go through the pass-through proxy which
    injects the credential; otherwise ``api_key`` is required.
    """

    name = "openweathermap"
    base_url = "https://api.openweathermap.org/data/2.5"
    geo_url = "https://api.openweathermap.org/geo/1.0"

    def __init__(
        self,
        api_key: Optional[str] = None,
        proxy_url: Optional[str] = None,
        units: str = "metric",
        lang: str = "en",
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.proxy_url = proxy_url.rstrip("/") if proxy_url else None
        self.units = units
        self.lang = lang
        self.timeout = timeout

    def _credentials(self) -> Dict[str, str]:
        if self.proxy_url:
            return {}
        if not self.api_key:
            raise ConfigError("OPENWEATHERMAP_API_KEY is not configured")
        return {"appid": self.api_key}

    def _weather_url(self, endpoint: str) -> str:
        if self.proxy_url:
            return f"{self.proxy_url}/api/weather/{endpoint}"
        return f"{self.base_url}/{endpoint}"

    def _geo_url(self, endpoint: str) -> str:
        if self.proxy_url:
            return f"{self.proxy_url}/api/geo/{endpoint}"
        return f"{self.geo_url}/{endpoint}"

    def _weather_params(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {"lat": lat, "lon": lon, "units": self.units, "lang": self.lang}
        params.update(self._credentials())
        return params

    def search(self, name: str, limit: int = 5) -> List[Dict[str, Any]]:
        params = {"q": name, "limit": limit}
        params.update(self._credentials())
        data = _get_json(self._geo_url("direct"), params, "geocode", self.timeout)
        return data if isinstance(data, list) else []

    def current(self, lat: float, lon: float) -> Dict[str, Any]:
        return _get_json(
            self._weather_url("weather"),
            self._weather_params(lat, lon),
            "current",
            self.timeout,
        )

    def daily_forecast(self, lat: float, lon: float, days: int = 7) -> Dict[str, Any]:
        # Not available on the free tier; callers fall back to hourly_forecast
        params = self._weather_params(lat, lon)
        params["cnt"] = days
        return _get_json(
            self._weather_url("forecast/daily"), params, "forecast_daily", self.timeout
        )

    def hourly_forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        return _get_json(
            self._weather_url("forecast"),
            self._weather_params(lat, lon),
            "forecast_hourly",
            self.timeout,
        )


class OpenMeteoClient:
    """Open-Meteo endpoints. No credential needed."""

    name = "open-meteo"

    def __init__(
        self, lang: str = "en", forecast_days: int = 7, timeout: int = DEFAULT_TIMEOUT
    ):
        self.geocoding_url = "https://geocoding-api.open-meteo.com/v1/search"
        self.weather_url = "https://api.open-meteo.com/v1/forecast"
        self.lang = lang
        self.forecast_days = forecast_days
        self.timeout = timeout

    def search(self, name: str, limit: int = 10) -> List[Dict[str, Any]]:
        params = {"name": name, "count": limit, "language": self.lang, "format": "json"}
        data = _get_json(self.geocoding_url, params, "geocode", self.timeout)
        if not isinstance(data, dict):
            return []
        return data.get("results") or []

    def current(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": [
                "temperature_2m",
                "apparent_temperature",
                "relative_humidity_2m",
                "weather_code",
                "wind_speed_10m",
                "pressure_msl",
            ],
            "wind_speed_unit": "ms",
            "timezone": "auto",
        }
        return _get_json(self.weather_url, params, "current", self.timeout)

    def daily_forecast(self, lat: float, lon: float, days: int = 7) -> Dict[str, Any]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "daily": ["weather_code", "temperature_2m_max", "temperature_2m_min"],
            "forecast_days": days,
            "timezone": "auto",
        }
        return _get_json(self.weather_url, params, "forecast_daily", self.timeout)

    def hourly_forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": ["temperature_2m", "weather_code"],
            "forecast_days": self.forecast_days,
            "timezone": "auto",
        }
        return _get_json(self.weather_url, params, "forecast_hourly", self.timeout)
