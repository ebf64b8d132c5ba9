"""
Tests for the command line front-end.
"""
import asyncio
import io

from weather_widget.cli import ConsoleRenderer, build_parser, run
from weather_widget.config import WidgetConfig
from weather_widget.errors import Notification, Severity
from weather_widget.models import ForecastDayView


class TestConsoleRenderer:
    def setup_method(self):
        self.stream = io.StringIO()
        self.renderer = ConsoleRenderer(self.stream)

    def test_notification(self):
        self.renderer.notify(
            Notification(message="City not found", severity=Severity.WARNING)
        )

        assert self.stream.getvalue() == "[WARNING] City not found\n"

    def test_empty_recent(self):
        self.renderer.render_recent([])

        assert "No recent searches" in self.stream.getvalue()

    def test_forecast_rows(self):
        self.renderer.render_forecast(
            [
                ForecastDayView(
                    date="Thu, 30 Nov", temp_max="26°C", temp_min="15°C", description="Rain"
                )
            ]
        )

        output = self.stream.getvalue()
        assert "Thu, 30 Nov" in output
        assert "26°C" in output
        assert "Rain" in output


class TestRun:
    def test_parser(self):
        args = build_parser().parse_args(["Paris", "--units", "imperial"])

        assert args.place == "Paris"
        assert args.units == "imperial"
        assert args.suggest is False

    def test_no_place_shows_recents(self, tmp_path):
        stream = io.StringIO()
        config = WidgetConfig(cache_dir=tmp_path)
        args = build_parser().parse_args([])

        code = asyncio.run(run(args, config, ConsoleRenderer(stream)))

        assert code == 0
        assert "No recent searches" in stream.getvalue()

    def test_missing_api_key_is_reported(self, tmp_path):
        stream = io.StringIO()
        config = WidgetConfig(cache_dir=tmp_path, api_key=None)
        args = build_parser().parse_args(["Paris"])

        code = asyncio.run(run(args, config, ConsoleRenderer(stream)))

        assert code == 1
        assert "[ERROR] API key not configured" in stream.getvalue()
