"""
Tests for concurrent polygon value refresh.

Fetchers are stubbed; results are checked for per-polygon isolation and
for dropping of stale generations.
"""

from unittest.mock import MagicMock

import pytest

from conftest import SQUARE, draw
from zonecast.config import NEUTRAL_COLOR
from zonecast.core.polygon_values import PolygonValueRefresher
from zonecast.errors import WeatherApiError
from zonecast.models.dashboard import SampleField, WeatherSeries

NORTH = [(60.0, 10.0), (60.0, 11.0), (61.0, 11.0)]
SOUTH = [(40.0, 10.0), (40.0, 11.0), (41.0, 11.0)]


def series_with(values, field="temperature_2m"):
    return WeatherSeries(
        latitude=0,
        longitude=0,
        hourly={
            "time": ["2024-01-01T00:00", "2024-01-01T01:00", "2024-01-01T02:00"],
            field: values,
        },
    )


class TestRefresh:
    """Test PolygonValueRefresher.refresh()."""

    def test_empty_store(self, store):
        """No polygons, no fetches."""
        fetcher = MagicMock()
        assert PolygonValueRefresher(fetcher=fetcher).refresh(store) == {}
        fetcher.assert_not_called()

    def test_average_applied(self, store):
        """The in-window average (00:00-01:00) is applied and coloured."""
        polygon = draw(store)
        fetcher = MagicMock(return_value=series_with([4.0, 6.0, 100.0]))

        results = PolygonValueRefresher(fetcher=fetcher, max_workers=2).refresh(store)

        assert results[polygon.id].value == pytest.approx(5.0)
        assert polygon.current_value.value == pytest.approx(5.0)
        assert polygon.color == "#ef4444"

    def test_fetch_arguments(self, store):
        """The centroid, window dates and source field are requested."""
        polygon = draw(store)
        fetcher = MagicMock(return_value=series_with([1.0, 2.0, 3.0]))

        PolygonValueRefresher(fetcher=fetcher).refresh(store)

        fetcher.assert_called_once_with(
            polygon.centroid[0],
            polygon.centroid[1],
            "2024-01-01",
            "2024-01-01",
            [SampleField.TEMPERATURE_2M],
        )

    def test_failure_isolated(self, store):
        """One failing polygon does not affect the other."""
        north = draw(store, NORTH)
        south = draw(store, SOUTH)

        def fetcher(lat, lng, start, end, fields):
            if lat > 50:
                raise WeatherApiError("Weather API error: 500", status_code=500)
            return series_with([20.0, 30.0, None])

        results = PolygonValueRefresher(fetcher=fetcher, max_workers=2).refresh(store)

        assert not results[north.id].is_known
        assert not north.current_value.is_known
        assert results[south.id].value == pytest.approx(25.0)
        assert south.color == "#22c55e"

    def test_unexpected_error_isolated(self, store):
        """Malformed payload errors are contained too."""
        polygon = draw(store)
        fetcher = MagicMock(side_effect=KeyError("hourly"))
        results = PolygonValueRefresher(fetcher=fetcher).refresh(store)
        assert not results[polygon.id].is_known

    def test_no_samples_in_window_is_unknown(self, store):
        """A window without valid samples stays unknown rather than zero."""
        polygon = draw(store)
        fetcher = MagicMock(return_value=series_with([None, None, 3.0]))
        results = PolygonValueRefresher(fetcher=fetcher).refresh(store)
        assert not results[polygon.id].is_known
        assert store.polygon_color(polygon) == NEUTRAL_COLOR

    def test_missing_source_skips_fetch(self, store):
        """Polygons with a dangling source are unknown without a request."""
        polygon = store.add_polygon("Orphan", SQUARE, "deleted-source")
        fetcher = MagicMock()
        results = PolygonValueRefresher(fetcher=fetcher).refresh(store)
        assert not results[polygon.id].is_known
        fetcher.assert_not_called()

    def test_uses_source_field(self, store):
        """The polygon's source field is averaged."""
        source = store.add_data_source("Humidity", "relative_humidity_2m", "%")
        polygon = store.add_polygon("Humid", SQUARE, source.id)
        fetcher = MagicMock(return_value=series_with([70.0, 90.0, None], field="relative_humidity_2m"))
        results = PolygonValueRefresher(fetcher=fetcher).refresh(store)
        assert results[polygon.id].value == pytest.approx(80.0)
        assert fetcher.call_args[0][4] == [SampleField.RELATIVE_HUMIDITY_2M]

    def test_stale_results_discarded(self, store):
        """A window change while requests are in flight drops their results."""
        polygon = draw(store)

        def fetcher(lat, lng, start, end, fields):
            store.step_forward()
            return series_with([4.0, 6.0, None])

        results = PolygonValueRefresher(fetcher=fetcher, max_workers=1).refresh(store)

        assert results[polygon.id].value == pytest.approx(5.0)
        assert not polygon.current_value.is_known

    def test_worker_bounds(self):
        """Worker count is clamped to 1-16."""
        assert PolygonValueRefresher(fetcher=MagicMock(), max_workers=0).max_workers == 1
        assert PolygonValueRefresher(fetcher=MagicMock(), max_workers=64).max_workers == 16
