"""
open_meteo.py: Client for the Open-Meteo historical archive API using
direct requests.

Functions:
- build_session()
- fetch_weather_data(latitude, longitude, start_date, end_date, fields)
- format_date_for_api(moment)

No API key is required. The endpoint can be overridden with the
OPEN_METEO_ARCHIVE_URL setting.
"""

from datetime import datetime
from typing import Iterable, Optional, Union

import requests
from requests.adapters import HTTPAdapter, Retry

from zonecast.config import OPEN_METEO_ARCHIVE_URL, REQUEST_TIMEOUT
from zonecast.errors import WeatherApiError
from zonecast.models.dashboard import SampleField, WeatherSeries
from zonecast.utils.date_util import to_utc
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)


def build_session(retries: int = 3) -> requests.Session:
    """
    HTTP session that retries rate limits and server errors with backoff.

    :param retries: Total retry attempts per request
    :return: requests.Session
    """
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def format_date_for_api(moment: Union[str, datetime]) -> str:
    """UTC calendar date of ``moment`` as YYYY-MM-DD."""
    return to_utc(moment).strftime("%Y-%m-%d")


def fetch_weather_data(
    latitude: float,
    longitude: float,
    start_date: str,
    end_date: str,
    fields: Iterable[Union[str, SampleField]],
    session: Optional[requests.Session] = None,
) -> WeatherSeries:
    """
    Fetch hourly samples for one location.

    :param latitude: Latitude in degrees
    :param longitude: Longitude in degrees
    :param start_date: First day, YYYY-MM-DD
    :param end_date: Last day, YYYY-MM-DD
    :param fields: Hourly fields to request
    :param session: Optional session to reuse connections
    :return: WeatherSeries with ``time`` and one list per requested field
    :raises WeatherApiError: on transport errors, non-2xx status, or a payload without ``hourly``
    """
    hourly = ",".join(SampleField.parse(f).value for f in fields)
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "start_date": start_date,
        "end_date": end_date,
        "hourly": hourly,
        "timezone": "GMT",
    }
    http = session or requests

    logger.info(
        f"Fetching {hourly} at ({latitude:.4f}, {longitude:.4f}) for {start_date}..{end_date}"
    )
    try:
        resp = http.get(OPEN_METEO_ARCHIVE_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise WeatherApiError(f"Weather API request failed: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise WeatherApiError(
            f"Weather API error: {resp.status_code} {resp.reason}",
            status_code=resp.status_code,
        )

    try:
        data = resp.json()
    except ValueError as e:
        raise WeatherApiError(f"Invalid weather data response: {e}", resp.status_code) from e

    if not isinstance(data, dict) or not data.get("hourly"):
        raise WeatherApiError(
            "Invalid weather data response: missing hourly data", resp.status_code
        )

    return WeatherSeries(
        latitude=data.get("latitude", latitude),
        longitude=data.get("longitude", longitude),
        hourly=data["hourly"],
    )
