"""
playback.py

Auto-advance of the dashboard time window.

``tick`` is called whenever the app wakes up (a Streamlit rerun, a timer).
If the store is playing and at least one interval has elapsed since the
last step, the window moves forward by one step. Ticks are wall-clock
driven: a late tick steps once and restarts the interval from ``now``;
missed intervals are not made up.
"""

import time
from typing import Optional

from zonecast.config import PLAYBACK_INTERVAL_SECONDS
from zonecast.core.dashboard_store import DashboardStore


class PlaybackClock:
    """Fixed-interval ticker for the play/pause control."""

    def __init__(self, interval_seconds: float = PLAYBACK_INTERVAL_SECONDS):
        self.interval_seconds = interval_seconds
        self.last_tick: Optional[float] = None

    def tick(self, store: DashboardStore, now: Optional[float] = None) -> bool:
        """
        Step the store forward if playing and the interval has elapsed.

        :param store: Dashboard state
        :param now: Monotonic seconds; defaults to ``time.monotonic()``
        :return: True if the window moved
        """
        now = time.monotonic() if now is None else now

        if not store.is_playing:
            self.last_tick = None
            return False

        if self.last_tick is None:
            # First tick after play/resume starts the interval
            self.last_tick = now
            return False

        if now - self.last_tick < self.interval_seconds:
            return False

        store.step_forward()
        self.last_tick = now
        return True

    def seconds_until_next(self, now: Optional[float] = None) -> float:
        now = time.monotonic() if now is None else now
        if self.last_tick is None:
            return self.interval_seconds
        return max(0.0, self.interval_seconds - (now - self.last_tick))
