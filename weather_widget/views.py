"""
Turn canonical entities into display-ready view-models.
"""
from typing import List

from .models import (
    CONDITION_DESCRIPTIONS,
    CurrentConditions,
    CurrentView,
    ForecastDay,
    ForecastDayView,
)
from .units import UnitConverter


def describe(conditions) -> str:
    description = getattr(conditions, "description", "")
    if description:
        return description[:1].upper() + description[1:]
    return CONDITION_DESCRIPTIONS[conditions.condition_code]


def current_view(
    conditions: CurrentConditions, converter: UnitConverter, place: str = ""
) -> CurrentView:
    temp_unit = converter.temp_unit()
    return CurrentView(
        place=place or conditions.place or "Weather",
        temperature=f"{converter.temperature(conditions.temperature_c)}{temp_unit}",
        feels_like=f"{converter.temperature(conditions.feels_like_c)}{temp_unit}",
        humidity=f"{conditions.humidity_pct}%",
        wind=f"{converter.wind_speed(conditions.wind_speed_ms)} {converter.wind_unit()}",
        pressure=f"{converter.pressure(conditions.pressure_hpa)} hPa",
        description=describe(conditions),
        observed_at=conditions.observed_at.strftime("%A, %d %B %Y %H:%M"),
    )


def forecast_views(
    days: List[ForecastDay], converter: UnitConverter
) -> List[ForecastDayView]:
    temp_unit = converter.temp_unit()
    return [
        ForecastDayView(
            date=day.date.strftime("%a, %d %b"),
            temp_max=f"{converter.temperature(day.temp_max_c)}{temp_unit}",
            temp_min=f"{converter.temperature(day.temp_min_c)}{temp_unit}",
            description=CONDITION_DESCRIPTIONS[day.condition_code],
        )
        for day in days
    ]
