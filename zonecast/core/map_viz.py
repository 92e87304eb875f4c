"""
map_viz.py

Plotly map rendering of the dashboard: filled polygons in their resolved
colours, centroid markers, and the dashed outline of a drawing in progress.
"""

from typing import Dict, List, Optional

import plotly.graph_objects as go

from zonecast.config import DRAWING_COLOR
from zonecast.core.dashboard_store import DashboardStore
from zonecast.models.dashboard import LatLng, Polygon
from zonecast.utils.format_util import format_value
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


def hex_to_rgba(color: str, alpha: float) -> str:
    """Convert ``#rrggbb`` to an ``rgba()`` string for translucent fills."""
    color = color.lstrip("#")
    if len(color) != 6:
        return color
    r, g, b = (int(color[i : i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {alpha})"


def _closed_ring(points: List[LatLng]) -> Dict[str, list]:
    ring = list(points)
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return {"lat": [p[0] for p in ring], "lon": [p[1] for p in ring]}


def polygon_trace(polygon: Polygon, color: str, unit: str = "", selected: bool = False) -> go.Scattermap:
    """Filled, closed outline for one polygon."""
    ring = _closed_ring(polygon.points)
    label = f"{polygon.name}: {format_value(polygon.current_value, unit)}"
    return go.Scattermap(
        lat=ring["lat"],
        lon=ring["lon"],
        mode="lines",
        fill="toself",
        fillcolor=hex_to_rgba(color, 0.6 if selected else 0.4),
        line=dict(color=color, width=4 if selected else 2),
        name=polygon.name,
        text=label,
        hoverinfo="text",
        showlegend=False,
    )


def drawing_trace(points: List[LatLng]) -> Optional[go.Scattermap]:
    """Dashed preview of the drawing; None until there are two points."""
    if len(points) < 2:
        return None
    ring = _closed_ring(points)
    return go.Scattermap(
        lat=ring["lat"],
        lon=ring["lon"],
        mode="lines+markers",
        fill="toself",
        fillcolor=hex_to_rgba(DRAWING_COLOR, 0.2),
        line=dict(color=DRAWING_COLOR, width=2),
        marker=dict(size=8, color=DRAWING_COLOR),
        name="Drawing",
        hoverinfo="skip",
        showlegend=False,
    )


def create_polygon_map(store: DashboardStore, height: int = 600) -> go.Figure:
    """
    Build the map figure for the current store state.

    :param store: Dashboard state
    :param height: Figure height in pixels
    :return: Plotly figure
    """
    fig = go.Figure()

    for polygon in store.polygons:
        source = store.get_data_source(polygon.data_source_id)
        unit = source.unit if source else ""
        color = store.polygon_color(polygon)
        fig.add_trace(
            polygon_trace(
                polygon, color, unit, selected=polygon.id == store.selected_polygon_id
            )
        )

    if store.polygons:
        fig.add_trace(
            go.Scattermap(
                lat=[p.centroid[0] for p in store.polygons],
                lon=[p.centroid[1] for p in store.polygons],
                mode="markers",
                marker=dict(size=6, color="#1e293b"),
                text=[p.name for p in store.polygons],
                hoverinfo="text",
                showlegend=False,
            )
        )

    if store.is_drawing:
        preview = drawing_trace(store.drawing.points)
        if preview is not None:
            fig.add_trace(preview)

    lat, lng = store.map_center
    fig.update_layout(
        map=dict(style="open-street-map", center=dict(lat=lat, lon=lng), zoom=store.map_zoom),
        height=height,
        margin=dict(l=0, r=0, t=0, b=0),
        clickmode="event",
    )
    logger.debug(f"Map figure with {len(fig.data)} traces")
    return fig
