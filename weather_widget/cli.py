#!/usr/bin/env python3
"""
Command line front-end for the weather widget.
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from utils.logging_config import setup_logging

from .config import WidgetConfig
from .errors import Notification, WeatherError
from .models import Coordinates, CurrentView, ForecastDayView
from .session import Renderer, create_session


class ConsoleRenderer(Renderer):
    """Plain-text renderer writing to a stream (stdout by default)."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _write(self, line: str = "") -> None:
        print(line, file=self.stream)

    def render_current(self, view: CurrentView) -> None:
        self._write(f"{view.place} - {view.observed_at}")
        self._write(f"  {view.temperature}  {view.description}")
        self._write(f"  Feels like {view.feels_like}")
        self._write(f"  Wind {view.wind}  Humidity {view.humidity}  {view.pressure}")

    def render_forecast(self, views: List[ForecastDayView]) -> None:
        if not views:
            self._write("No forecast data available")
            return
        self._write()
        for day in views:
            self._write(
                f"  {day.date:<12} {day.temp_max:>6} / {day.temp_min:<6} {day.description}"
            )

    def render_suggestions(self, suggestions: List[Coordinates]) -> None:
        for index, suggestion in enumerate(suggestions, start=1):
            self._write(f"  {index}. {suggestion.display_name}")

    def render_recent(self, names: List[str]) -> None:
        if names:
            self._write(f"Recent: {', '.join(names)}")
        else:
            self._write("No recent searches")

    def notify(self, notification: Notification) -> None:
        self._write(f"[{notification.severity.value.upper()}] {notification.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weather widget")
    parser.add_argument("place", nargs="?", help="Place name to look up")
    parser.add_argument(
        "--units", choices=["metric", "imperial"], help="Display unit system"
    )
    parser.add_argument(
        "--provider",
        choices=["openweathermap", "open-meteo"],
        help="Upstream weather API",
    )
    parser.add_argument(
        "--suggest", action="store_true", help="List geocoding candidates only"
    )
    parser.add_argument(
        "--recent", action="store_true", help="Show recent searches and exit"
    )
    parser.add_argument("--forget", metavar="NAME", help="Remove a recent search")
    parser.add_argument(
        "--clear-cache", action="store_true", help="Drop all cached responses"
    )
    return parser


async def run(args: argparse.Namespace, config: WidgetConfig, renderer: Renderer) -> int:
    session = create_session(config, renderer)

    if args.clear_cache:
        session.provider.clear_cache()

    if args.forget:
        session.remove_recent(args.forget)
        return 0

    if args.recent or not args.place:
        session.start()
        return 0

    if args.suggest:
        try:
            renderer.render_suggestions(
                await session.provider.geocode_by_name(args.place)
            )
        except WeatherError as e:
            session.report_error(e)
            return 1
        return 0

    return 0 if await session.search(args.place) else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = WidgetConfig.from_env(units=args.units, provider=args.provider)
    setup_logging(config.log_level)
    return asyncio.run(run(args, config, ConsoleRenderer()))


if __name__ == "__main__":
    sys.exit(main())
