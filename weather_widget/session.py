"""
Top-level session: owns the unit system and wires search, provider,
recent searches and the renderer together.
"""
import asyncio
import logging
import time
import uuid
from typing import List, Optional, Tuple

from utils.logging_config import log_request

from .adapters import OpenMeteoAdapter, OpenWeatherMapAdapter
from .cache import TTLCache
from .clients import OpenMeteoClient, OpenWeatherMapClient
from .config import WidgetConfig
from .errors import (
    WARNING_DISMISS_SECONDS,
    Notification,
    Severity,
    WeatherError,
    describe_error,
)
from .forecast import DEFAULT_STRATEGIES, ForecastStrategy
from .models import Coordinates, CurrentConditions, ForecastDay, UnitSystem
from .provider import WeatherDataProvider
from .recent import RecentSearches
from .search import SearchCoordinator
from .storage import FileStore
from .units import UnitConverter
from .views import current_view, forecast_views

logger = logging.getLogger(__name__)


class Renderer:
    """
    Presentation collaborator. The base class ignores everything, so
    front-ends only override what they display.
    """

    def render_current(self, view) -> None:
        pass

    def render_forecast(self, views) -> None:
        pass

    def render_suggestions(self, suggestions: List[Coordinates]) -> None:
        pass

    def render_recent(self, names: List[str]) -> None:
        pass

    def notify(self, notification: Notification) -> None:
        pass

    def clear_notification(self) -> None:
        pass

    def set_loading(self, loading: bool) -> None:
        pass


class WeatherSession:
    def __init__(
        self,
        provider: WeatherDataProvider,
        recent: RecentSearches,
        renderer: Renderer,
        units: UnitSystem = UnitSystem.METRIC,
        debounce_seconds: float = 0.3,
        warning_dismiss_seconds: float = WARNING_DISMISS_SECONDS,
    ):
        self.provider = provider
        self.recent = recent
        self.renderer = renderer
        self.converter = UnitConverter(units)
        self.warning_dismiss_seconds = warning_dismiss_seconds
        self.coordinator = SearchCoordinator(
            provider, renderer.render_suggestions, debounce_seconds=debounce_seconds
        )
        self.current_coordinates: Optional[Coordinates] = None
        self._last: Optional[
            Tuple[Coordinates, CurrentConditions, List[ForecastDay]]
        ] = None

    @property
    def units(self) -> UnitSystem:
        return self.converter.system

    def start(self) -> None:
        self.renderer.render_recent(self.recent.items)

    def on_input(self, text: str) -> None:
        self.coordinator.on_input(text)

    async def search(self, text: str) -> bool:
        """Geocode free text, take the best match and load its weather."""
        query = (text or "").strip()
        if not query:
            self._notify(
                Notification(
                    message="Please enter a city name",
                    severity=Severity.WARNING,
                    auto_dismiss_after=self.warning_dismiss_seconds,
                )
            )
            return False

        self.coordinator.cancel()
        try:
            candidates = await self.provider.geocode_by_name(query)
        except WeatherError as e:
            logger.warning(f"Search for '{query}' failed: {e}")
            self.report_error(e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error searching for '{query}': {e}")
            self.report_error(e)
            return False

        return await self.load(candidates[0])

    async def select_suggestion(self, coordinates: Coordinates) -> bool:
        return await self.load(self.coordinator.select(coordinates))

    async def select_recent(self, name: str) -> bool:
        return await self.search(name)

    def remove_recent(self, name: str) -> None:
        self.recent.remove(name)
        self.renderer.render_recent(self.recent.items)

    async def load(self, coordinates: Coordinates) -> bool:
        """
        Fetch current conditions and the forecast concurrently and render
        both. If either fails nothing is rendered and the error is reported.
        """
        request_id = str(uuid.uuid4())
        start_time = time.time()
        self.current_coordinates = coordinates
        self.renderer.set_loading(True)

        try:
            results = await asyncio.gather(
                self.provider.get_current_conditions(coordinates.lat, coordinates.lon),
                self.provider.get_forecast(coordinates.lat, coordinates.lon),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            current, forecast = results
        except WeatherError as e:
            duration_ms = int((time.time() - start_time) * 1000)
            log_request(
                logger,
                request_id,
                "load_weather",
                duration_ms,
                "error",
                f"Weather load failed for {coordinates.display_name}: {e}",
                level=logging.WARNING,
            )
            self.report_error(e)
            return False
        except Exception as e:
            logger.exception(
                f"Unexpected error loading weather: {e}",
                extra={"request_id": request_id},
            )
            self.report_error(e)
            return False
        finally:
            self.renderer.set_loading(False)

        self._last = (coordinates, current, forecast)
        self._render()
        self.renderer.clear_notification()

        self.recent.record(coordinates.name or coordinates.display_name)
        self.renderer.render_recent(self.recent.items)

        duration_ms = int((time.time() - start_time) * 1000)
        log_request(
            logger,
            request_id,
            "load_weather",
            duration_ms,
            "success",
            f"Weather loaded for {coordinates.display_name}",
        )
        return True

    def toggle_units(self) -> UnitSystem:
        """Switch unit system and re-render; canonical data is untouched."""
        self.converter.system = self.converter.system.toggled()
        if self._last is not None:
            self._render()
        return self.converter.system

    def dismiss_notification(self) -> None:
        self.renderer.clear_notification()

    def _render(self) -> None:
        coordinates, current, forecast = self._last
        self.renderer.render_current(
            current_view(current, self.converter, place=coordinates.name)
        )
        self.renderer.render_forecast(forecast_views(forecast, self.converter))

    def report_error(self, error: Exception) -> None:
        """Translate an error into a notification and hand it to the renderer."""
        notification = describe_error(error)
        if notification.severity == Severity.WARNING:
            notification = notification.model_copy(
                update={"auto_dismiss_after": self.warning_dismiss_seconds}
            )
        self._notify(notification)

    def _notify(self, notification: Notification) -> None:
        self.renderer.notify(notification)


def create_session(
    config: WidgetConfig, renderer: Renderer, store=None
) -> WeatherSession:
    """Assemble a session from configuration."""
    store = store if store is not None else FileStore(config.cache_dir)

    if config.provider == "open-meteo":
        client = OpenMeteoClient(lang=config.lang, forecast_days=config.forecast_days)
        adapter = OpenMeteoAdapter()
    else:
        # Upstream is always asked for metric; display units are applied later
        client = OpenWeatherMapClient(
            api_key=config.api_key,
            proxy_url=config.proxy_url,
            units="metric",
            lang=config.lang,
        )
        adapter = OpenWeatherMapAdapter(units="metric")

    strategies = (
        DEFAULT_STRATEGIES
        if config.daily_forecast_enabled
        else (ForecastStrategy.HOURLY_GROUPED,)
    )
    cache = TTLCache(
        store, ttl_seconds=config.cache_ttl_seconds, max_size=config.cache_max_size
    )
    provider = WeatherDataProvider(
        client, adapter, cache, strategies=strategies, forecast_days=config.forecast_days
    )
    recent = RecentSearches(store, limit=config.recent_searches_limit)

    return WeatherSession(
        provider,
        recent,
        renderer,
        units=config.units,
        debounce_seconds=config.search_debounce_ms / 1000,
        warning_dismiss_seconds=config.warning_dismiss_seconds,
    )
