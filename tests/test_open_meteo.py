"""
Unit tests for the Open-Meteo archive client.

HTTP is mocked; no network access.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from zonecast.api.open_meteo import build_session, fetch_weather_data, format_date_for_api
from zonecast.errors import WeatherApiError
from zonecast.models.dashboard import SampleField, WeatherSeries

PAYLOAD = {
    "latitude": 52.52,
    "longitude": 13.419998,
    "hourly": {
        "time": ["2024-01-01T00:00", "2024-01-01T01:00"],
        "temperature_2m": [1.5, 2.5],
    },
}


def mock_session(status_code=200, payload=PAYLOAD, json_error=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code == 200 else "Bad Request"
    if json_error:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    session = MagicMock()
    session.get.return_value = resp
    return session


class TestFetchWeatherData:
    """Test fetch_weather_data()."""

    def test_success(self):
        """A 200 with hourly data becomes a WeatherSeries."""
        session = mock_session()
        series = fetch_weather_data(52.52, 13.41, "2024-01-01", "2024-01-02", ["temperature_2m"], session=session)

        assert isinstance(series, WeatherSeries)
        assert series.latitude == 52.52
        assert series.hourly["temperature_2m"] == [1.5, 2.5]

    def test_request_params(self):
        """Query parameters follow the archive API."""
        session = mock_session()
        fetch_weather_data(
            52.52, 13.41, "2024-01-01", "2024-01-02",
            [SampleField.TEMPERATURE_2M, "surface_pressure"],
            session=session,
        )

        _, kwargs = session.get.call_args
        params = kwargs["params"]
        assert params["latitude"] == 52.52
        assert params["longitude"] == 13.41
        assert params["start_date"] == "2024-01-01"
        assert params["end_date"] == "2024-01-02"
        assert params["hourly"] == "temperature_2m,surface_pressure"
        assert params["timezone"] == "GMT"
        assert "timeout" in kwargs

    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    def test_non_2xx_raises(self, status):
        """Any non-2xx status is a hard failure with the status attached."""
        with pytest.raises(WeatherApiError) as exc:
            fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["temperature_2m"], session=mock_session(status))
        assert exc.value.status_code == status
        assert str(status) in str(exc.value)

    def test_missing_hourly_raises(self):
        """A payload without hourly data is rejected."""
        session = mock_session(payload={"latitude": 0, "longitude": 0})
        with pytest.raises(WeatherApiError, match="missing hourly data"):
            fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["temperature_2m"], session=session)

    def test_invalid_json_raises(self):
        """Unparseable bodies are wrapped."""
        session = mock_session(json_error=ValueError("Expecting value"))
        with pytest.raises(WeatherApiError, match="Invalid weather data response"):
            fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["temperature_2m"], session=session)

    def test_transport_error_wrapped(self):
        """Connection errors surface as WeatherApiError."""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(WeatherApiError, match="request failed"):
            fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["temperature_2m"], session=session)

    def test_unsupported_field_rejected_before_request(self):
        """Unknown fields never reach the network."""
        session = mock_session()
        with pytest.raises(ValueError):
            fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["snowfall"], session=session)
        session.get.assert_not_called()

    @patch("zonecast.api.open_meteo.requests.get")
    def test_default_uses_requests_get(self, mock_get):
        """Without a session the module-level requests.get is used."""
        mock_get.return_value = mock_session().get.return_value
        fetch_weather_data(0, 0, "2024-01-01", "2024-01-01", ["temperature_2m"])
        mock_get.assert_called_once()


class TestFormatDate:
    """Test format_date_for_api()."""

    def test_utc_date(self):
        assert format_date_for_api(datetime(2024, 3, 5, 23, 59, tzinfo=timezone.utc)) == "2024-03-05"

    def test_offset_converted_to_utc(self):
        """The UTC calendar date is used, not the local one."""
        plus_two = timezone(timedelta(hours=2))
        assert format_date_for_api(datetime(2024, 3, 6, 1, 0, tzinfo=plus_two)) == "2024-03-05"


class TestBuildSession:
    """Test build_session()."""

    def test_retry_adapter_mounted(self):
        """HTTPS requests retry on rate limits and server errors."""
        session = build_session(retries=2)
        adapter = session.get_adapter("https://archive-api.open-meteo.com")
        assert adapter.max_retries.total == 2
        assert 429 in adapter.max_retries.status_forcelist
