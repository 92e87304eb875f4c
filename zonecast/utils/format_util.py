"""Display formatting for polygon values, coordinates and time windows."""

from zonecast.models.dashboard import LatLng, Measurement, TimeRange


def format_value(value: Measurement, unit: str = "") -> str:
    """One-decimal value with unit, or "Loading..." while unknown."""
    if not value.is_known:
        return "Loading..."
    return f"{value.value:.1f}{unit}"


def format_latlng(point: LatLng) -> str:
    return f"{point[0]:.4f}, {point[1]:.4f}"


def format_time_range(time_range: TimeRange) -> str:
    fmt = "%b %d, %Y %H:%M"
    return f"{time_range.start.strftime(fmt)} - {time_range.end.strftime(fmt)}"
