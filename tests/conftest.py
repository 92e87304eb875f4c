"""Shared fixtures for zonecast tests."""

from datetime import datetime, timezone

import pytest

from zonecast.core.dashboard_store import DashboardStore
from zonecast.models.dashboard import WeatherSeries

NOW = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

SQUARE = [(52.50, 13.30), (52.60, 13.30), (52.60, 13.50), (52.50, 13.50)]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    """Store pinned to 2024-01-01 00:00 UTC with the default Open-Meteo source."""
    return DashboardStore(now=NOW)


@pytest.fixture
def hourly_series():
    """Three hourly samples: 5, 15, then a gap."""
    return WeatherSeries(
        latitude=52.52,
        longitude=13.41,
        hourly={
            "time": ["2024-01-01T00:00", "2024-01-01T01:00", "2024-01-01T02:00"],
            "temperature_2m": [5.0, 15.0, None],
        },
    )


def draw(store, points=SQUARE):
    """Run a full drawing session and return the committed polygon."""
    store.start_drawing()
    for lat, lng in points:
        store.add_drawing_point(lat, lng)
    return store.finish_drawing()
