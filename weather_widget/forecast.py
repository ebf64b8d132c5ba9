"""
Forecast strategies and the hourly-to-daily grouping used as fallback.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple

from .models import ConditionCode, ForecastDay

MAX_FORECAST_DAYS = 7
NOON_MINUTES = 12 * 60


class ForecastStrategy(str, Enum):
    DAILY = "daily"
    HOURLY_GROUPED = "hourly_grouped"


DEFAULT_STRATEGIES = (ForecastStrategy.DAILY, ForecastStrategy.HOURLY_GROUPED)


class HourlyEntry(NamedTuple):
    """One sub-daily forecast point in the location's local time."""

    local_time: datetime
    temp_max_c: float
    temp_min_c: float
    condition_code: ConditionCode


def _distance_from_noon(entry: HourlyEntry) -> int:
    minutes = entry.local_time.hour * 60 + entry.local_time.minute
    return abs(minutes - NOON_MINUTES)


def group_hourly_by_day(
    entries: Iterable[HourlyEntry], max_days: int = MAX_FORECAST_DAYS
) -> List[ForecastDay]:
    """
    Collapse sub-daily entries into one forecast per local calendar day.

    For each day the entry closest to 12:00 local time is kept; on a tie the
    earlier entry wins. Days come back in chronological order, at most
    ``max_days`` of them.
    """
    selected: Dict = {}
    for entry in entries:
        day = entry.local_time.date()
        best = selected.get(day)
        if best is None:
            selected[day] = entry
            continue

        key = (_distance_from_noon(entry), entry.local_time)
        best_key = (_distance_from_noon(best), best.local_time)
        if key < best_key:
            selected[day] = entry

    days = sorted(selected)[:max_days]
    return [
        ForecastDay(
            date=day,
            temp_max_c=selected[day].temp_max_c,
            temp_min_c=selected[day].temp_min_c,
            condition_code=selected[day].condition_code,
        )
        for day in days
    ]


def truncate_daily(
    days: Iterable[ForecastDay], max_days: int = MAX_FORECAST_DAYS
) -> List[ForecastDay]:
    """Daily-native forecasts map 1:1; keep chronological order and the cap."""
    return sorted(days, key=lambda d: d.date)[:max_days]
