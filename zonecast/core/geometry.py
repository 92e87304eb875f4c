"""
geometry.py

Vertex-average centroid for polygons drawn on the map. This is a plain mean
of each axis, not an area-weighted or geodesic centroid; it is good enough
to pick a sampling location for small city-scale polygons.
"""

from typing import Sequence

from zonecast.errors import ValidationError
from zonecast.models.dashboard import LatLng


def centroid(points: Sequence[LatLng]) -> LatLng:
    """
    Mean latitude and mean longitude of a coordinate ring.

    :param points: Ordered (lat, lng) pairs; closedness is not checked
    :return: (lat, lng) tuple
    :raises ValidationError: if no points are given
    """
    if not points:
        raise ValidationError("Cannot compute centroid of an empty point list")

    lat = sum(p[0] for p in points) / len(points)
    lng = sum(p[1] for p in points) / len(points)
    return (lat, lng)
