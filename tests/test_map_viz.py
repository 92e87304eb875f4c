"""
Unit tests for the Plotly polygon map.
"""

import plotly.graph_objects as go

from conftest import SQUARE, draw
from zonecast.config import NEUTRAL_COLOR
from zonecast.core.map_viz import create_polygon_map, drawing_trace, hex_to_rgba


class TestHexToRgba:
    """Test hex_to_rgba()."""

    def test_conversion(self):
        assert hex_to_rgba("#ef4444", 0.4) == "rgba(239, 68, 68, 0.4)"

    def test_non_hex_passthrough(self):
        """Values that are not #rrggbb are returned unchanged."""
        assert hex_to_rgba("red", 0.5) == "red"


class TestCreatePolygonMap:
    """Test create_polygon_map()."""

    def test_empty_store(self, store):
        """An empty store gives an empty figure centred on the store's map centre."""
        fig = create_polygon_map(store)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 0
        assert fig.layout.map.center.lat == 52.52
        assert fig.layout.map.zoom == 10

    def test_polygon_traces(self, store):
        """One closed ring per polygon plus a centroid trace."""
        draw(store)
        draw(store)
        fig = create_polygon_map(store)

        assert len(fig.data) == 3
        ring = fig.data[0]
        assert ring.fill == "toself"
        assert len(ring.lat) == len(SQUARE) + 1
        assert ring.lat[0] == ring.lat[-1]
        assert len(fig.data[2].lat) == 2

    def test_polygon_colour_follows_value(self, store):
        """Traces use the resolved colour; unknown values are neutral."""
        polygon = draw(store)
        fig = create_polygon_map(store)
        assert fig.data[0].line.color == NEUTRAL_COLOR

        store.set_polygon_value(polygon.id, 30)
        fig = create_polygon_map(store)
        assert fig.data[0].line.color == "#22c55e"
        assert "30.0°C" in fig.data[0].text

    def test_drawing_preview(self, store):
        """The in-progress drawing appears once it has two points."""
        store.start_drawing()
        store.add_drawing_point(52.5, 13.3)
        assert len(create_polygon_map(store).data) == 0

        store.add_drawing_point(52.6, 13.3)
        fig = create_polygon_map(store)
        assert len(fig.data) == 1
        assert fig.data[0].name == "Drawing"

    def test_drawing_trace_requires_two_points(self):
        assert drawing_trace([(0, 0)]) is None
