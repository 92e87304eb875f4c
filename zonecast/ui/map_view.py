"""
Map panel: the Plotly polygon map plus the legend of the active data source.
"""

import streamlit as st

from zonecast.core.color_rules import legend_entries
from zonecast.core.dashboard_store import DashboardStore
from zonecast.core.map_viz import create_polygon_map


def render_legend(store: DashboardStore):
    source = store.active_data_source()
    if source is None:
        st.caption("Active source: None")
        return

    st.write(f"**{source.field.value}** ({source.unit})")
    for color, label in legend_entries(source):
        st.markdown(
            f"<span style='color:{color}'>■</span> {label}",
            unsafe_allow_html=True,
        )
    st.caption(f"Active source: {source.name}")


def render_viewport(store: DashboardStore):
    """Centre and zoom inputs; new drawing points default to the centre."""
    with st.expander("Map view"):
        with st.form("map_view_form"):
            lat, lng = store.map_center
            c_lat, c_lng, c_zoom = st.columns(3)
            lat = c_lat.number_input("Center latitude", value=float(lat), min_value=-90.0, max_value=90.0, format="%.4f", key="map_center_lat")
            lng = c_lng.number_input("Center longitude", value=float(lng), min_value=-180.0, max_value=180.0, format="%.4f", key="map_center_lng")
            zoom = c_zoom.number_input("Zoom", value=float(store.map_zoom), min_value=0.0, max_value=20.0, step=1.0, key="map_zoom")
            if st.form_submit_button("Move map"):
                store.set_map_center(lat, lng)
                store.set_map_zoom(zoom)


def render(store: DashboardStore):
    """Render the map, its viewport controls and the legend."""
    col_map, col_legend = st.columns([5, 1])
    with col_map:
        render_viewport(store)
        st.plotly_chart(create_polygon_map(store), use_container_width=True, key="polygon_map")
    with col_legend:
        render_legend(store)
