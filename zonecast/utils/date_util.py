from datetime import datetime, timezone
from typing import Union

import pandas as pd
from dateutil import parser

from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


def to_date(date_string: str) -> datetime:
    """
    Convert a date string to a datetime object.

    :param date_string: str - The date string to parse.
    :return: datetime - Parsed datetime object.
    :raises: Exception if date string parsing fails.
    """
    try:
        return parser.parse(date_string)
    except Exception as e:
        logger.error(f"Error parsing date string: {e}", exc_info=True)
        raise


def to_utc(value: Union[str, datetime, pd.Timestamp]) -> datetime:
    """
    Normalise a timestamp to a timezone-aware UTC datetime.

    Naive values are taken to already be UTC.

    :param value: ISO string, datetime or pandas Timestamp.
    :return: datetime in UTC
    """
    if isinstance(value, str):
        value = to_date(value)
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)
