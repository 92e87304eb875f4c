"""
Tests for the polygon drawing state machine.
"""

import pytest

from zonecast.core.drawing import DrawingSession
from zonecast.errors import ValidationError


@pytest.fixture
def session():
    s = DrawingSession()
    s.start()
    return s


class TestDrawingSession:
    """Test DrawingSession transitions."""

    def test_starts_idle(self):
        """A new session is idle and empty."""
        s = DrawingSession()
        assert s.active is False
        assert s.points == []

    def test_start_clears_buffer(self, session):
        """Restarting discards previously buffered points."""
        session.add_point(1, 1)
        session.start()
        assert session.active
        assert session.points == []

    def test_add_point_grows_by_one_including_duplicates(self, session):
        """Every add appends exactly one point, duplicates included."""
        points = [(1, 1), (1, 1), (2, 2), (1, 1), (0, 0)]
        for i, (lat, lng) in enumerate(points, start=1):
            assert session.add_point(lat, lng) == i
            assert len(session.points) == i

    def test_add_point_has_no_upper_bound(self, session):
        """The 13th point is accepted at add time."""
        for i in range(13):
            session.add_point(i, i)
        assert len(session.points) == 13

    def test_add_point_when_idle_rejected(self):
        """Points cannot be added outside drawing mode."""
        with pytest.raises(ValidationError):
            DrawingSession().add_point(1, 2)

    def test_finish_with_two_points_rejected(self, session):
        """Two points is not a polygon; the session keeps drawing."""
        session.add_point(0, 0)
        session.add_point(0, 1)
        with pytest.raises(ValidationError, match="at least 3"):
            session.finish()
        assert session.active
        assert len(session.points) == 2

    def test_finish_with_three_points(self, session):
        """Three points commit and reset the session."""
        for p in [(0, 0), (0, 1), (1, 1)]:
            session.add_point(*p)
        points = session.finish()
        assert points == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]
        assert not session.active
        assert session.points == []

    def test_finish_with_twelve_points(self, session):
        """Twelve points is the maximum accepted at commit."""
        for i in range(12):
            session.add_point(i, -i)
        assert len(session.finish()) == 12

    def test_finish_with_thirteen_points_rejected(self, session):
        """More than twelve points is rejected at commit; the buffer is kept."""
        for i in range(13):
            session.add_point(i, -i)
        with pytest.raises(ValidationError, match="at most 12"):
            session.finish()
        assert session.active
        assert len(session.points) == 13

    def test_finish_when_idle_rejected(self):
        """Finishing without drawing is rejected."""
        with pytest.raises(ValidationError):
            DrawingSession().finish()

    def test_cancel_discards(self, session):
        """Cancel drops the buffer and returns to idle."""
        session.add_point(1, 1)
        session.cancel()
        assert not session.active
        assert session.points == []

    def test_cancel_when_idle_is_noop(self):
        """Cancelling an idle session is allowed and changes nothing."""
        s = DrawingSession()
        s.cancel()
        assert not s.active
        assert s.points == []
