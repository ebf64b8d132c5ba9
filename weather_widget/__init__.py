"""
Weather widget core: cached geocoding, current conditions and forecasts.
"""
__version__ = "1.0.0"
