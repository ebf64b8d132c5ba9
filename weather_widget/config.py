"""
Widget configuration, read from environment variables.
"""
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .models import UnitSystem


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class WidgetConfig(BaseModel):
    api_key: Optional[str] = None
    provider: Literal["openweathermap", "open-meteo"] = "openweathermap"
    proxy_url: Optional[str] = None
    units: UnitSystem = UnitSystem.METRIC
    lang: str = "en"
    cache_ttl_seconds: int = Field(3600, gt=0)
    cache_max_size: Optional[int] = Field(100, ge=1)
    cache_dir: Path = Path(".weather_widget")
    recent_searches_limit: int = Field(5, ge=1)
    search_debounce_ms: int = Field(300, ge=0)
    daily_forecast_enabled: bool = True
    forecast_days: int = Field(7, ge=1, le=7)
    warning_dismiss_seconds: float = Field(8.0, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides) -> "WidgetConfig":
        """Build a config from the environment; keyword overrides win."""
        values = {
            "api_key": os.getenv("OPENWEATHERMAP_API_KEY") or None,
            "provider": os.getenv("WEATHER_PROVIDER", "openweathermap"),
            "proxy_url": os.getenv("WEATHER_PROXY_URL") or None,
            "units": os.getenv("WEATHER_UNITS", "metric"),
            "lang": os.getenv("WEATHER_LANG", "en"),
            "cache_ttl_seconds": os.getenv("CACHE_TTL_SECONDS", 3600),
            "cache_max_size": os.getenv("MAX_CACHE_SIZE", 100),
            "cache_dir": os.getenv("CACHE_DIR", ".weather_widget"),
            "recent_searches_limit": os.getenv("RECENT_SEARCHES_LIMIT", 5),
            "search_debounce_ms": os.getenv("SEARCH_DEBOUNCE_MS", 300),
            "daily_forecast_enabled": _env_bool("DAILY_FORECAST_ENABLED", True),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
