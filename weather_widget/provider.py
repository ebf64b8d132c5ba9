"""
Weather data provider: cache-fronted geocoding, current conditions and
forecasts over a pluggable upstream client/adapter pair.
"""
import asyncio
import logging
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from utils.metrics import cache_lookups, forecast_fallbacks

from .cache import TTLCache
from .errors import NotFound, WeatherError
from .forecast import (
    DEFAULT_STRATEGIES,
    MAX_FORECAST_DAYS,
    ForecastStrategy,
    group_hourly_by_day,
    truncate_daily,
)
from .models import Coordinates, CurrentConditions, ForecastDay

logger = logging.getLogger(__name__)


def geocode_key(name: str) -> str:
    return f"geocode:{name.strip().lower()}"


def current_key(lat: float, lon: float) -> str:
    return f"current:{lat}:{lon}"


def forecast_key(lat: float, lon: float) -> str:
    return f"forecast:{lat}:{lon}"


class WeatherDataProvider:
    """
    Orchestrates the three upstream operations over a ``TTLCache``.

    ``client`` performs blocking HTTP calls and is run in a worker thread;
    ``adapter`` maps its raw payloads to the canonical model. Cache access
    happens on the event loop only.
    """

    def __init__(
        self,
        client,
        adapter,
        cache: TTLCache,
        strategies: Sequence[ForecastStrategy] = DEFAULT_STRATEGIES,
        forecast_days: int = MAX_FORECAST_DAYS,
        geocode_limit: int = 5,
    ):
        if not strategies:
            raise ValueError("At least one forecast strategy is required")
        self.client = client
        self.adapter = adapter
        self.cache = cache
        self.strategies = tuple(strategies)
        self.forecast_days = min(forecast_days, MAX_FORECAST_DAYS)
        self.geocode_limit = geocode_limit

    def _cached(self, key: str) -> Optional[Any]:
        namespace = key.split(":", 1)[0]
        value = self.cache.get(key)
        cache_lookups.labels(
            namespace=namespace, result="miss" if value is None else "hit"
        ).inc()
        if value is not None:
            logger.debug(f"Cache hit for {key}")
        return value

    async def geocode_by_name(self, name: str) -> List[Coordinates]:
        """Resolve a place name to candidate coordinates, best match first."""
        if not name or not name.strip():
            raise NotFound(name or "")

        key = geocode_key(name)
        cached = self._cached(key)
        if cached is not None:
            try:
                return [Coordinates.model_validate(item) for item in cached]
            except ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")

        results = await asyncio.to_thread(
            self.client.search, name.strip(), self.geocode_limit
        )
        coordinates = self.adapter.geocode(results)
        if not coordinates:
            raise NotFound(name.strip())

        self.cache.set(key, [c.model_dump(mode="json") for c in coordinates])
        logger.info(f"Geocoded '{name}' to {len(coordinates)} candidate(s)")
        return coordinates

    async def get_current_conditions(self, lat: float, lon: float) -> CurrentConditions:
        key = current_key(lat, lon)
        cached = self._cached(key)
        if cached is not None:
            try:
                return CurrentConditions.model_validate(cached)
            except ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")

        payload = await asyncio.to_thread(self.client.current, lat, lon)
        conditions = self.adapter.current(payload)
        self.cache.set(key, conditions.model_dump(mode="json"))
        return conditions

    async def get_forecast(self, lat: float, lon: float) -> List[ForecastDay]:
        """At most seven days, one per local calendar day, chronological."""
        key = forecast_key(lat, lon)
        cached = self._cached(key)
        if cached is not None:
            try:
                return [ForecastDay.model_validate(item) for item in cached]
            except ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")

        days = await self._fetch_forecast(lat, lon)
        self.cache.set(key, [d.model_dump(mode="json") for d in days])
        return days

    def _available_strategies(self) -> List[ForecastStrategy]:
        supports_daily = getattr(self.adapter, "supports_daily", True)
        return [
            strategy
            for strategy in self.strategies
            if strategy != ForecastStrategy.DAILY or supports_daily
        ] or [ForecastStrategy.HOURLY_GROUPED]

    async def _fetch_forecast(self, lat: float, lon: float) -> List[ForecastDay]:
        strategies = self._available_strategies()
        days: List[ForecastDay] = []

        for position, strategy in enumerate(strategies):
            is_last = position == len(strategies) - 1
            try:
                days = await self._run_strategy(strategy, lat, lon)
            except WeatherError as e:
                if is_last:
                    raise
                logger.warning(
                    f"{strategy.value} forecast unavailable ({e}), trying next strategy"
                )
                forecast_fallbacks.labels(from_strategy=strategy.value).inc()
                continue

            if days or is_last:
                return days

            logger.warning(f"{strategy.value} forecast was empty, trying next strategy")
            forecast_fallbacks.labels(from_strategy=strategy.value).inc()

        return days

    async def _run_strategy(
        self, strategy: ForecastStrategy, lat: float, lon: float
    ) -> List[ForecastDay]:
        if strategy == ForecastStrategy.DAILY:
            payload = await asyncio.to_thread(
                self.client.daily_forecast, lat, lon, self.forecast_days
            )
            return truncate_daily(self.adapter.daily(payload), self.forecast_days)

        payload = await asyncio.to_thread(self.client.hourly_forecast, lat, lon)
        return group_hourly_by_day(self.adapter.hourly(payload), self.forecast_days)

    def clear_cache(self) -> None:
        self.cache.clear()
