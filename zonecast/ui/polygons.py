"""
Polygon panel: drawing controls and the list of committed polygons with
their current values.
"""

import streamlit as st

from zonecast.config import MAX_POLYGON_POINTS, MIN_POLYGON_POINTS
from zonecast.core.dashboard_store import DashboardStore
from zonecast.errors import ValidationError
from zonecast.utils.format_util import format_latlng, format_value


def render_drawing_tools(store: DashboardStore):
    """Start/add-point/finish/cancel controls for the drawing session."""
    st.subheader("Draw Polygon")

    if not store.is_drawing:
        if st.button("✏️ Start drawing", key="start_drawing"):
            store.start_drawing()
            st.rerun()
        return

    st.info(
        f"Drawing mode: add points. Minimum {MIN_POLYGON_POINTS} points, "
        f"maximum {MAX_POLYGON_POINTS} points."
    )
    with st.form("add_point_form", clear_on_submit=False):
        lat_default, lng_default = store.map_center
        c_lat, c_lng = st.columns(2)
        lat = c_lat.number_input("Latitude", value=lat_default, format="%.5f", min_value=-90.0, max_value=90.0)
        lng = c_lng.number_input("Longitude", value=lng_default, format="%.5f", min_value=-180.0, max_value=180.0)
        if st.form_submit_button("Add point"):
            store.add_drawing_point(lat, lng)

    st.caption(f"{len(store.drawing.points)} point(s)")

    c_finish, c_cancel = st.columns(2)
    if c_finish.button("✅ Finish", key="finish_drawing"):
        try:
            polygon = store.finish_drawing()
            st.success(f"{polygon.name} created.")
            st.rerun()
        except ValidationError as e:
            st.error(str(e))
    if c_cancel.button("✖ Cancel", key="cancel_drawing"):
        store.cancel_drawing()
        st.rerun()


def render(store: DashboardStore):
    """Render the polygon list."""
    st.subheader(f"Polygons ({len(store.polygons)})")

    if not store.polygons:
        st.caption("No polygons created yet. Use the drawing tool to create polygons on the map.")
        return

    for polygon in list(store.polygons):
        source = store.get_data_source(polygon.data_source_id)
        unit = source.unit if source else ""
        selected = polygon.id == store.selected_polygon_id

        with st.container(border=True):
            c_name, c_select, c_delete = st.columns([3, 1, 1])
            c_name.markdown(
                f"<span style='color:{store.polygon_color(polygon)}'>●</span> "
                f"**{polygon.name}** · {len(polygon.points)} points",
                unsafe_allow_html=True,
            )
            if c_select.button("Hide" if selected else "Show", key=f"select_{polygon.id}"):
                store.select_polygon(None if selected else polygon.id)
                st.rerun()
            if c_delete.button("🗑", key=f"delete_{polygon.id}"):
                store.delete_polygon(polygon.id)
                st.rerun()

            st.caption(f"Current value: {format_value(polygon.current_value, unit)}")
            if source:
                st.caption(f"Source: {source.name} ({source.field.value})")
            else:
                st.caption("Source: missing")
            st.caption(f"Center: {format_latlng(polygon.centroid)}")
