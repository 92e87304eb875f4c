"""
time_series.py

Lookups over an hourly ``WeatherSeries``: the sample nearest to a moment,
and the average of samples inside a closed time window.

Both return a ``Measurement``; an empty result is ``Measurement.unknown()``
and never a zero.
"""

from datetime import datetime
from typing import Union

import pandas as pd

from zonecast.models.dashboard import Measurement, SampleField, WeatherSeries
from zonecast.utils.date_util import to_utc
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


def _as_timestamp(value: Union[str, datetime, pd.Timestamp]) -> pd.Timestamp:
    return pd.Timestamp(to_utc(value))


def nearest_value(
    series: WeatherSeries,
    target_time: Union[str, datetime],
    sample_field: Union[str, SampleField],
) -> Measurement:
    """
    Value at the timestamp closest to ``target_time``.

    Ties resolve to the earliest sample (lowest index).

    :param series: Fetched hourly series
    :param target_time: Moment to match
    :param sample_field: Field to read
    :return: Measurement, unknown if the series is empty or the field is missing
    """
    if not series.has_field(sample_field):
        logger.debug(f"Field {sample_field} not in series")
        return Measurement.unknown()

    df = series.to_frame(sample_field)
    if df.empty:
        return Measurement.unknown()

    distance = (df["time"] - _as_timestamp(target_time)).abs()
    # argmin returns the first position on ties
    idx = int(distance.to_numpy().argmin())
    value = df["value"].iloc[idx]
    if pd.isna(value):
        return Measurement.unknown()
    return Measurement.of(value)


def range_average(
    series: WeatherSeries,
    start: Union[str, datetime],
    end: Union[str, datetime],
    sample_field: Union[str, SampleField],
) -> Measurement:
    """
    Mean of the non-null samples with ``start <= time <= end``.

    :param series: Fetched hourly series
    :param start: Window start (inclusive)
    :param end: Window end (inclusive)
    :param sample_field: Field to average
    :return: Measurement, unknown when no sample qualifies
    """
    if not series.has_field(sample_field):
        logger.debug(f"Field {sample_field} not in series")
        return Measurement.unknown()

    df = series.to_frame(sample_field)
    mask = (df["time"] >= _as_timestamp(start)) & (df["time"] <= _as_timestamp(end))
    in_range = df.loc[mask, "value"].dropna()

    if in_range.empty:
        return Measurement.unknown()
    return Measurement.of(in_range.mean())
