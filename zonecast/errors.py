"""
Exception types raised by the zonecast core.

Validation rejections are raised synchronously and leave state untouched.
Fetch failures are raised by the weather client and caught per polygon.
Lookup misses are not exceptions: getters return None, mutators return False.
"""

from typing import Optional


class ZonecastError(Exception):
    """Base class for zonecast errors."""


class ValidationError(ZonecastError, ValueError):
    """A command was rejected because it would break a state invariant."""


class WeatherApiError(ZonecastError):
    """The weather service failed or answered with an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
