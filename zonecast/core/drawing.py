"""
drawing.py

Polygon drawing state machine.

    Idle --start--> Drawing --add_point--> Drawing
    Drawing --finish (3..12 points)--> Idle   (points handed to the caller)
    Drawing --cancel--> Idle                  (points discarded)

Points are appended without de-duplication and without an upper bound; the
12-point maximum is checked only when the drawing is finished.
"""

from typing import List

from zonecast.config import MAX_POLYGON_POINTS, MIN_POLYGON_POINTS
from zonecast.errors import ValidationError
from zonecast.models.dashboard import LatLng
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


class DrawingSession:
    """The single in-progress drawing of the dashboard."""

    def __init__(self):
        self.active = False
        self.points: List[LatLng] = []

    def start(self) -> None:
        self.active = True
        self.points = []

    def add_point(self, lat: float, lng: float) -> int:
        """
        Append one vertex.

        :return: Number of buffered points after the append
        :raises ValidationError: if no drawing is in progress
        """
        if not self.active:
            raise ValidationError("Cannot add a point: drawing mode is not active")
        self.points.append((float(lat), float(lng)))
        if len(self.points) > MAX_POLYGON_POINTS:
            logger.debug(
                f"Drawing has {len(self.points)} points; finish will reject more than {MAX_POLYGON_POINTS}"
            )
        return len(self.points)

    def finish(self) -> List[LatLng]:
        """
        Commit the drawing.

        :return: The buffered points; the session is back to idle afterwards
        :raises ValidationError: if not drawing, or the point count is out of bounds.
            The session stays in drawing mode with its points intact.
        """
        if not self.active:
            raise ValidationError("Cannot finish: drawing mode is not active")
        if len(self.points) < MIN_POLYGON_POINTS:
            raise ValidationError(
                f"A polygon must have at least {MIN_POLYGON_POINTS} points (got {len(self.points)})"
            )
        if len(self.points) > MAX_POLYGON_POINTS:
            raise ValidationError(
                f"A polygon can have at most {MAX_POLYGON_POINTS} points (got {len(self.points)})"
            )

        points = self.points
        self.active = False
        self.points = []
        return points

    def cancel(self) -> None:
        """Discard the drawing. Does nothing when idle."""
        self.active = False
        self.points = []
