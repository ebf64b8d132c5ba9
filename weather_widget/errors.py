"""
Error taxonomy for the weather widget and its user-facing translation.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

WARNING_DISMISS_SECONDS = 8.0


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class WeatherError(Exception):
    """Base class for errors surfaced by the weather provider."""

    severity = Severity.ERROR


class ConfigError(WeatherError):
    """A required setting (usually the API key) is missing."""


class NotFound(WeatherError):
    """Geocoding returned no candidates."""

    severity = Severity.WARNING

    def __init__(self, name: str):
        super().__init__(f"No results found for '{name}'")
        self.name = name


class UpstreamError(WeatherError):
    """Non-2xx response from the weather or geocoding API."""

    def __init__(self, status: int, message: str = ""):
        super().__init__(message or f"API Error: {status}")
        self.status = status

    @property
    def severity(self) -> Severity:  # type: ignore[override]
        # Rate limiting is transient
        if self.status == 429:
            return Severity.WARNING
        return Severity.ERROR


class NetworkError(WeatherError):
    """Transport-level failure (DNS, refused connection, timeout)."""


class CacheCorruption(Exception):
    """A persisted blob could not be decoded. Never leaves the storage layer."""


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    severity: Severity
    auto_dismiss_after: Optional[float] = None


def describe_error(error: Exception) -> Notification:
    """Translate a provider error into a notification for the renderer."""
    if isinstance(error, NotFound):
        message = f'City not found: "{error.name}". Please try another search.'
    elif isinstance(error, UpstreamError):
        if error.status == 401:
            message = "Invalid API key"
        elif error.status == 404:
            message = "City not found"
        elif error.status == 429:
            message = "Too many requests. Please wait a moment and try again."
        else:
            message = f"Weather service error ({error.status})"
    elif isinstance(error, NetworkError):
        message = "Unable to reach the weather service"
    elif isinstance(error, ConfigError):
        message = "API key not configured"
    else:
        message = "Failed to load weather data"

    severity = getattr(error, "severity", Severity.ERROR)
    if severity == Severity.WARNING:
        return Notification(
            message=message,
            severity=Severity.WARNING,
            auto_dismiss_after=WARNING_DISMISS_SECONDS,
        )
    return Notification(message=message, severity=Severity.ERROR)
