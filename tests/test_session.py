"""
Tests for the session orchestration: search, concurrent load, recents,
unit toggling and error notifications.
"""
import asyncio
from datetime import date, datetime, timezone

from weather_widget.errors import NetworkError, NotFound, Severity, UpstreamError
from weather_widget.models import (
    ConditionCode,
    Coordinates,
    CurrentConditions,
    ForecastDay,
    UnitSystem,
)
from weather_widget.recent import RecentSearches
from weather_widget.session import Renderer, WeatherSession
from weather_widget.storage import MemoryStore

BUCHAREST = Coordinates(
    lat=44.4268,
    lon=26.1025,
    name="Bucharest",
    country="RO",
    display_name="Bucharest, RO",
)

CURRENT = CurrentConditions(
    temperature_c=22.5,
    feels_like_c=21.8,
    humidity_pct=65,
    pressure_hpa=1013,
    wind_speed_ms=3.5,
    condition_code=ConditionCode.CLEAR,
    observed_at=datetime(2023, 11, 29, 16, 0, tzinfo=timezone.utc),
    place="Bucuresti",
    description="clear sky",
)

FORECAST = [
    ForecastDay(
        date=date(2023, 11, 30),
        temp_max_c=25.8,
        temp_min_c=15.2,
        condition_code=ConditionCode.RAIN,
    )
]


class RecordingRenderer(Renderer):
    def __init__(self):
        self.current = []
        self.forecast = []
        self.suggestions = []
        self.recent = []
        self.notifications = []
        self.cleared = 0
        self.loading = []

    def render_current(self, view):
        self.current.append(view)

    def render_forecast(self, views):
        self.forecast.append(views)

    def render_suggestions(self, suggestions):
        self.suggestions.append(suggestions)

    def render_recent(self, names):
        self.recent.append(names)

    def notify(self, notification):
        self.notifications.append(notification)

    def clear_notification(self):
        self.cleared += 1

    def set_loading(self, loading):
        self.loading.append(loading)


class FakeProvider:
    def __init__(self, candidates=None, current_error=None, forecast_error=None):
        self.candidates = [BUCHAREST] if candidates is None else candidates
        self.current_error = current_error
        self.forecast_error = forecast_error
        self.events = []

    async def geocode_by_name(self, name):
        self.events.append(("geocode", name))
        if not self.candidates:
            raise NotFound(name)
        return self.candidates

    async def get_current_conditions(self, lat, lon):
        self.events.append(("start", "current", lat, lon))
        await asyncio.sleep(0.01)
        self.events.append(("end", "current"))
        if self.current_error:
            raise self.current_error
        return CURRENT

    async def get_forecast(self, lat, lon):
        self.events.append(("start", "forecast", lat, lon))
        await asyncio.sleep(0.01)
        self.events.append(("end", "forecast"))
        if self.forecast_error:
            raise self.forecast_error
        return FORECAST


def make_session(provider=None, units=UnitSystem.METRIC):
    provider = provider or FakeProvider()
    renderer = RecordingRenderer()
    recent = RecentSearches(MemoryStore(), limit=5)
    session = WeatherSession(
        provider, recent, renderer, units=units, debounce_seconds=0.01
    )
    return session, provider, renderer


class TestLoad:
    def test_selecting_suggestion_fetches_both_concurrently(self):
        session, provider, renderer = make_session()

        ok = asyncio.run(session.select_suggestion(BUCHAREST))

        assert ok is True
        starts = [e for e in provider.events if e[0] == "start"]
        assert starts == [
            ("start", "current", 44.4268, 26.1025),
            ("start", "forecast", 44.4268, 26.1025),
        ]
        # Both started before either finished
        assert [e[0] for e in provider.events] == ["start", "start", "end", "end"]

    def test_renders_view_models(self):
        session, _, renderer = make_session()

        asyncio.run(session.load(BUCHAREST))

        view = renderer.current[-1]
        assert view.place == "Bucharest"
        assert view.temperature == "23°C"
        assert view.feels_like == "22°C"
        assert view.wind == "12.6 km/h"
        assert view.humidity == "65%"
        assert view.pressure == "1013 hPa"
        assert view.description == "Clear sky"
        forecast = renderer.forecast[-1]
        assert forecast[0].temp_max == "26°C"
        assert forecast[0].temp_min == "15°C"
        assert forecast[0].description == "Rain"
        assert renderer.loading == [True, False]

    def test_success_records_recent_and_clears_notification(self):
        session, _, renderer = make_session()

        asyncio.run(session.load(BUCHAREST))

        assert session.recent.items == ["Bucharest"]
        assert renderer.recent[-1] == ["Bucharest"]
        assert renderer.cleared == 1
        assert session.current_coordinates == BUCHAREST

    def test_partial_failure_renders_nothing(self):
        session, _, renderer = make_session(
            FakeProvider(forecast_error=UpstreamError(500))
        )

        ok = asyncio.run(session.load(BUCHAREST))

        assert ok is False
        assert renderer.current == []
        assert renderer.forecast == []
        assert session.recent.items == []
        assert renderer.notifications[-1].severity == Severity.ERROR
        assert renderer.notifications[-1].auto_dismiss_after is None
        assert renderer.loading == [True, False]

    def test_rate_limit_is_a_warning(self):
        session, _, renderer = make_session(
            FakeProvider(current_error=UpstreamError(429))
        )

        asyncio.run(session.load(BUCHAREST))

        notification = renderer.notifications[-1]
        assert notification.severity == Severity.WARNING
        assert notification.auto_dismiss_after == 8.0

    def test_network_error_message(self):
        session, _, renderer = make_session(
            FakeProvider(current_error=NetworkError("refused"))
        )

        asyncio.run(session.load(BUCHAREST))

        assert renderer.notifications[-1].message == (
            "Unable to reach the weather service"
        )

    def test_unexpected_error_is_contained(self):
        session, _, renderer = make_session(
            FakeProvider(current_error=RuntimeError("bug"))
        )

        ok = asyncio.run(session.load(BUCHAREST))

        assert ok is False
        assert renderer.notifications[-1].severity == Severity.ERROR


class TestSearch:
    def test_blank_search_warns(self):
        session, provider, renderer = make_session()

        ok = asyncio.run(session.search("   "))

        assert ok is False
        assert provider.events == []
        assert renderer.notifications[-1].message == "Please enter a city name"
        assert renderer.notifications[-1].severity == Severity.WARNING

    def test_search_uses_first_candidate(self):
        other = Coordinates(lat=1.0, lon=2.0, name="Other", display_name="Other")
        session, provider, _ = make_session(FakeProvider(candidates=[BUCHAREST, other]))

        asyncio.run(session.search("Bucharest"))

        assert ("start", "current", 44.4268, 26.1025) in provider.events

    def test_search_not_found_is_warning(self):
        session, _, renderer = make_session(FakeProvider(candidates=[]))

        ok = asyncio.run(session.search("Atlantis"))

        assert ok is False
        notification = renderer.notifications[-1]
        assert notification.severity == Severity.WARNING
        assert "Atlantis" in notification.message

    def test_select_recent_searches_again(self):
        session, provider, _ = make_session()

        asyncio.run(session.select_recent("Bucharest"))

        assert ("geocode", "Bucharest") in provider.events

    def test_typing_then_selecting(self):
        async def scenario():
            session, provider, renderer = make_session()
            session.on_input("Buch")
            await session.coordinator.wait_idle()
            suggestions = renderer.suggestions[-1]
            await session.select_suggestion(suggestions[0])
            return session, renderer

        session, renderer = asyncio.run(scenario())

        assert renderer.suggestions[0] == [BUCHAREST]
        assert renderer.suggestions[-1] == []
        assert session.recent.items == ["Bucharest"]


class TestRecentAndUnits:
    def test_remove_recent_rerenders(self):
        session, _, renderer = make_session()
        asyncio.run(session.load(BUCHAREST))

        session.remove_recent("Bucharest")

        assert session.recent.items == []
        assert renderer.recent[-1] == []

    def test_start_renders_persisted_recents(self):
        session, _, renderer = make_session()
        session.recent.record("Paris")

        session.start()

        assert renderer.recent[-1] == ["Paris"]

    def test_toggle_units_rerenders_without_refetch(self):
        session, provider, renderer = make_session()
        asyncio.run(session.load(BUCHAREST))
        fetches = len(provider.events)

        units = session.toggle_units()

        assert units == UnitSystem.IMPERIAL
        assert session.units == UnitSystem.IMPERIAL
        assert len(provider.events) == fetches
        view = renderer.current[-1]
        assert view.temperature == "73°F"
        assert view.wind == "7.8 mph"
        assert view.pressure == "1013 hPa"

    def test_toggle_before_any_load(self):
        session, _, renderer = make_session()

        session.toggle_units()

        assert renderer.current == []
        assert session.units == UnitSystem.IMPERIAL
