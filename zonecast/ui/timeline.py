"""
Timeline controls: window display, play/pause, single steps, reset and the
start/end handles (as datetime inputs).
"""

from datetime import datetime, timezone
from typing import Optional

import streamlit as st

from zonecast.core.dashboard_store import DashboardStore
from zonecast.utils.format_util import format_time_range


def _to_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


def _handle_input(label: str, value: datetime, key: str) -> datetime:
    col_date, col_time = st.columns(2)
    with col_date:
        day = st.date_input(f"{label} date", value=value.date(), key=f"{key}_date")
    with col_time:
        at = st.time_input(f"{label} time", value=value.time(), key=f"{key}_time", step=3600)
    return datetime.combine(day, at).replace(tzinfo=timezone.utc)


def apply_range_edit(
    store: DashboardStore, start: datetime, end: datetime, now: Optional[datetime] = None
) -> bool:
    """
    Apply edited handle values from the range form.

    The inputs only carry minutes, so handles are compared to the store at
    minute precision and an untouched handle keeps its exact value.

    :param store: Dashboard state
    :param start: Start handle as entered
    :param end: End handle as entered
    :param now: Reference time for the timeline window (defaults to current UTC time)
    :return: False if the edit was rejected
    """
    start_moved = _to_minute(start) != _to_minute(store.time_range.start)
    end_moved = _to_minute(end) != _to_minute(store.time_range.end)
    if start_moved and end_moved:
        return store.move_handles(start, end, now=now)
    if start_moved:
        return store.drag_start(start, now=now)
    if end_moved:
        return store.drag_end(end, now=now)
    return True


def render(store: DashboardStore):
    """Render the timeline panel."""
    st.subheader("Timeline Control")

    col_range, col_duration = st.columns([3, 1])
    with col_range:
        st.write(f"**Range:** {format_time_range(store.time_range)}")
    with col_duration:
        st.write(f"**Duration:** {store.time_range.duration_hours} hours")

    c1, c2, c3, c4 = st.columns(4)
    if c1.button("⏮ Back", key="step_back", use_container_width=True):
        store.step_backward()
    if c2.button("⏸ Pause" if store.is_playing else "▶ Play", key="toggle_play", use_container_width=True):
        store.toggle_play()
    if c3.button("⏭ Forward", key="step_forward", use_container_width=True):
        store.step_forward()
    if c4.button("↺ Now", key="reset_now", use_container_width=True):
        store.reset_to_now()

    with st.expander("Adjust range"):
        window = store.timeline_window()
        st.caption(f"Timeline spans {format_time_range(window)} (UTC)")
        # Keyed by generation so the inputs follow steps, resets and playback
        with st.form("time_range_form"):
            start = _handle_input("Start", store.time_range.start, f"range_start_{store.generation}")
            end = _handle_input("End", store.time_range.end, f"range_end_{store.generation}")
            if st.form_submit_button("Apply"):
                generation = store.generation
                if not apply_range_edit(store, start, end):
                    st.error("Start must stay before end.")
                elif store.generation != generation:
                    st.rerun()
