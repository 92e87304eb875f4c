# config.py
"""
Configurations for the zonecast polygon weather dashboard.

This module holds the defaults shared across the application: the Open-Meteo
endpoint, the supported hourly fields, the default data source and its colour
rules, drawing limits, playback timing and map start position.

Tunables are looked up with ``get_setting``: Streamlit secrets first, then
environment variables, then the default given here.
"""

import os

from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


def get_setting(key: str, default=None):
    """
    Look up a setting from Streamlit secrets, then the environment.

    :param key: Setting name, e.g. "FETCH_WORKERS".
    :param default: Returned when neither source defines the key.
    :return: The raw setting value (strings from the environment).
    """
    try:
        import streamlit as st

        if key in st.secrets:
            return st.secrets[key]
    except Exception as e:
        # No secrets.toml outside a deployed app
        logger.debug(f"Secrets unavailable for {key}: {e}")
    return os.getenv(key, default)


OPEN_METEO_ARCHIVE_URL = get_setting(
    "OPEN_METEO_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive"
)
REQUEST_TIMEOUT = float(get_setting("REQUEST_TIMEOUT", 30))
FETCH_WORKERS = int(get_setting("FETCH_WORKERS", 4))
CACHE_TTL_SECONDS = int(get_setting("CACHE_TTL_SECONDS", 300))
PLAYBACK_INTERVAL_SECONDS = float(get_setting("PLAYBACK_INTERVAL_SECONDS", 1.0))

# Time controls
STEP_HOURS = 1
DEFAULT_RANGE_HOURS = 1
TIMELINE_WINDOW_DAYS = 15

# Drawing limits
MIN_POLYGON_POINTS = 3
MAX_POLYGON_POINTS = 12

# Colours
NEUTRAL_COLOR = "#94a3b8"
DEFAULT_POLYGON_COLOR = "#3b82f6"
DRAWING_COLOR = "#3b82f6"

# Map start position (Berlin)
MAP_CENTER = (52.52, 13.41)
MAP_ZOOM = 10

sample_fields = {
    "temperature_2m": {"name": "Temperature (2m)", "unit": "°C"},
    "relative_humidity_2m": {"name": "Relative Humidity (2m)", "unit": "%"},
    "surface_pressure": {"name": "Surface Pressure", "unit": "hPa"},
}

DEFAULT_DATA_SOURCE = {
    "id": "open-meteo",
    "name": "Open-Meteo",
    "active": True,
    "field": "temperature_2m",
    "unit": "°C",
    "color_rules": [
        {"id": "cold", "operator": "<", "threshold": 10, "color": "#ef4444", "label": "< 10°C"},
        {"id": "medium", "operator": ">=", "threshold": 10, "color": "#3b82f6", "label": "10-25°C"},
        {"id": "warm", "operator": ">=", "threshold": 25, "color": "#22c55e", "label": ">= 25°C"},
    ],
}

# Rule given to a new data source created without any
NEW_SOURCE_RULE = {
    "id": "default",
    "operator": ">=",
    "threshold": 0,
    "color": "#3b82f6",
    "label": "Default",
}
