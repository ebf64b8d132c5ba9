"""
Unit conversion from canonical metric readings to display values.
"""
import math

from .models import UnitSystem

MS_TO_KMH = 3.6
MS_TO_MPH = 2.237


def round_half_up(value: float) -> int:
    """Round halves towards positive infinity (22.5 -> 23, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def to_display_temperature(celsius: float, system: UnitSystem) -> int:
    if system == UnitSystem.IMPERIAL:
        return round_half_up(celsius * 9 / 5 + 32)
    return round_half_up(celsius)


def to_display_wind(meters_per_second: float, system: UnitSystem) -> str:
    """Wind speed in km/h (metric) or mph (imperial), one decimal."""
    if system == UnitSystem.IMPERIAL:
        return f"{meters_per_second * MS_TO_MPH:.1f}"
    return f"{meters_per_second * MS_TO_KMH:.1f}"


def to_display_pressure(hectopascals: float) -> int:
    # Pressure stays in hPa for both systems
    return round_half_up(hectopascals)


class UnitConverter:
    """Presentation helper bound to one unit system."""

    def __init__(self, system: UnitSystem = UnitSystem.METRIC):
        self.system = system

    def temperature(self, celsius: float) -> int:
        return to_display_temperature(celsius, self.system)

    def wind_speed(self, meters_per_second: float) -> str:
        return to_display_wind(meters_per_second, self.system)

    def pressure(self, hectopascals: float) -> int:
        return to_display_pressure(hectopascals)

    def temp_unit(self) -> str:
        return "°F" if self.system == UnitSystem.IMPERIAL else "°C"

    def wind_unit(self) -> str:
        return "mph" if self.system == UnitSystem.IMPERIAL else "km/h"
