"""
Main streamlit.io application
"""

import time

import streamlit as st

from zonecast.api.open_meteo import fetch_weather_data
from zonecast.config import CACHE_TTL_SECONDS, FETCH_WORKERS
from zonecast.core.dashboard_store import DashboardStore
from zonecast.core.playback import PlaybackClock
from zonecast.core.polygon_values import PolygonValueRefresher
from zonecast.ui import data_sources, map_view, polygons, timeline
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)

st.set_page_config(
    page_title="Polygon Weather Dashboard",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_data(show_spinner=False, max_entries=200, ttl=CACHE_TTL_SECONDS)
def _cached_fetch(latitude, longitude, start_date, end_date, fields):
    return fetch_weather_data(latitude, longitude, start_date, end_date, list(fields))


def cached_fetcher(latitude, longitude, start_date, end_date, fields):
    field_names = tuple(getattr(f, "value", f) for f in fields)
    return _cached_fetch(latitude, longitude, start_date, end_date, field_names)


# Setup session state ########################

if "store" not in st.session_state:
    st.session_state["store"] = DashboardStore()
    st.session_state["playback"] = PlaybackClock()
    st.session_state["refresher"] = PolygonValueRefresher(
        fetcher=cached_fetcher, max_workers=FETCH_WORKERS
    )
    st.session_state["refreshed_key"] = None
    logger.debug("Initialized dashboard session")

store: DashboardStore = st.session_state["store"]
playback: PlaybackClock = st.session_state["playback"]
refresher: PolygonValueRefresher = st.session_state["refresher"]

playback.tick(store)


# Present the dashboard ########################

st.title("Polygon Weather Dashboard")

with st.sidebar:
    polygons.render_drawing_tools(store)
    st.divider()
    data_sources.render(store)
    st.divider()
    polygons.render(store)

timeline.render(store)

# Re-fetch when the window, the polygon set or a source field changed
refresh_key = (
    store.generation,
    tuple(p.id for p in store.polygons),
    tuple((ds.id, ds.field.value) for ds in store.data_sources),
)
if store.polygons and refresh_key != st.session_state["refreshed_key"]:
    with st.spinner("Fetching weather data..."):
        refresher.refresh(store)
    st.session_state["refreshed_key"] = refresh_key

map_view.render(store)

if store.is_playing:
    time.sleep(playback.seconds_until_next())
    st.rerun()
