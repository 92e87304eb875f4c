"""
Dashboard data models and type definitions.

This module provides type-safe data structures for the polygon dashboard:
time windows, colour rules, data sources, polygons, fetched weather series
and the ``Measurement`` result type that keeps "unknown" apart from 0.
"""

import math
import uuid
from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from zonecast.config import sample_fields
from zonecast.errors import ValidationError

LatLng = Tuple[float, float]


def parse_threshold(value) -> float:
    """Coerce a rule threshold to float, rejecting non-numeric input."""
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Threshold must be a number: {value!r}") from None


def new_id() -> str:
    """Short random identifier for rules, sources and polygons."""
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class Measurement:
    """A scalar that may be unknown. ``Measurement.of(0)`` is a valid zero."""

    _value: Optional[float] = None

    @classmethod
    def of(cls, value: float) -> "Measurement":
        """Wrap a scalar; NaN is treated as unknown."""
        value = float(value)
        if math.isnan(value):
            return cls(None)
        return cls(value)

    @classmethod
    def unknown(cls) -> "Measurement":
        return cls(None)

    @property
    def is_known(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> float:
        """The scalar. Raises ValueError when the measurement is unknown."""
        if self._value is None:
            raise ValueError("Measurement is unknown")
        return self._value

    def get(self, default=None):
        return self._value if self._value is not None else default


@dataclass(frozen=True)
class TimeRange:
    """Closed [start, end] window in UTC."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"Time range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @property
    def duration_hours(self) -> int:
        return int((self.end - self.start) / timedelta(hours=1))

    def shifted(self, hours: float) -> "TimeRange":
        delta = timedelta(hours=hours)
        return TimeRange(self.start + delta, self.end + delta)


class Operator(Enum):
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @classmethod
    def parse(cls, symbol: Union[str, "Operator"]) -> "Operator":
        if isinstance(symbol, cls):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            raise ValidationError(f"Unsupported operator: {symbol!r}") from None

    @property
    def is_less_style(self) -> bool:
        return self in (Operator.LT, Operator.LE)

    def compare(self, value: float, threshold: float) -> bool:
        if self is Operator.LT:
            return value < threshold
        if self is Operator.LE:
            return value <= threshold
        if self is Operator.GT:
            return value > threshold
        return value >= threshold


class SampleField(Enum):
    """Open-Meteo hourly fields a data source can chart."""

    TEMPERATURE_2M = "temperature_2m"
    RELATIVE_HUMIDITY_2M = "relative_humidity_2m"
    SURFACE_PRESSURE = "surface_pressure"

    @classmethod
    def parse(cls, name: Union[str, "SampleField"]) -> "SampleField":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValidationError(f"Unsupported sample field: {name!r}") from None

    @property
    def display_name(self) -> str:
        return sample_fields[self.value]["name"]

    @property
    def default_unit(self) -> str:
        return sample_fields[self.value]["unit"]


@dataclass
class ColorRule:
    """Threshold rule mapping a scalar to a display colour."""

    id: str
    operator: Operator
    threshold: float
    color: str
    label: Optional[str] = None

    def matches(self, value: float) -> bool:
        return self.operator.compare(value, self.threshold)

    def display_label(self, unit: str = "") -> str:
        if self.label:
            return self.label
        return f"{self.operator.value} {self.threshold:g}{unit}"

    @classmethod
    def from_dict(cls, data: Dict) -> "ColorRule":
        return cls(
            id=data.get("id") or new_id(),
            operator=Operator.parse(data["operator"]),
            threshold=parse_threshold(data["threshold"]),
            color=data["color"],
            label=data.get("label"),
        )


@dataclass
class DataSource:
    """A sample field plus the rules used to colour its values."""

    id: str
    name: str
    field: SampleField
    unit: str
    color_rules: List[ColorRule] = dataclass_field(default_factory=list)
    active: bool = True

    @classmethod
    def from_dict(cls, data: Dict) -> "DataSource":
        return cls(
            id=data.get("id") or new_id(),
            name=data["name"],
            field=SampleField.parse(data["field"]),
            unit=data["unit"],
            color_rules=[ColorRule.from_dict(r) for r in data.get("color_rules", [])],
            active=data.get("active", True),
        )


@dataclass
class Polygon:
    """A drawn area, tied by id to the data source that colours it."""

    id: str
    name: str
    points: List[LatLng]
    data_source_id: str
    color: str
    centroid: LatLng
    current_value: Measurement = dataclass_field(default_factory=Measurement.unknown)


@dataclass
class WeatherSeries:
    """Hourly samples at one location; ``hourly`` holds parallel lists."""

    latitude: float
    longitude: float
    hourly: Dict[str, list]

    def has_field(self, sample_field: Union[str, SampleField]) -> bool:
        key = SampleField.parse(sample_field).value
        return key in self.hourly and self.hourly[key] is not None

    def to_frame(self, sample_field: Union[str, SampleField]) -> pd.DataFrame:
        """
        Align the time axis with one field's values.

        :param sample_field: Field to extract
        :return: DataFrame with UTC ``time`` and float ``value`` columns
        :raises ValidationError: if the two lists are not the same length
        """
        key = SampleField.parse(sample_field).value
        times = self.hourly.get("time") or []
        values = self.hourly.get(key) or []
        if len(times) != len(values):
            raise ValidationError(
                f"Series misaligned: {len(times)} timestamps vs {len(values)} {key} values"
            )
        return pd.DataFrame(
            {
                "time": pd.to_datetime(pd.Series(times, dtype="object"), utc=True),
                "value": pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce"),
            }
        )
