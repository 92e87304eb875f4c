"""
polygon_values.py

Fetches and averages weather samples for every polygon in a store.

One request per polygon centroid runs in a thread pool. Results are applied
as they complete, in any order. A failing polygon gets an unknown value
and does not affect its siblings. Each refresh is tagged with the store's
generation, so results computed for an older time window are dropped.

Usage:
    refresher = PolygonValueRefresher()
    values = refresher.refresh(store)
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Optional

from zonecast.api.open_meteo import build_session, fetch_weather_data, format_date_for_api
from zonecast.config import FETCH_WORKERS
from zonecast.core.dashboard_store import DashboardStore
from zonecast.core.time_series import range_average
from zonecast.errors import WeatherApiError
from zonecast.models.dashboard import Measurement, Polygon, SampleField, TimeRange, WeatherSeries
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)

# (latitude, longitude, start_date, end_date, fields) -> WeatherSeries
Fetcher = Callable[..., WeatherSeries]


class PolygonValueRefresher:
    """
    Computes window averages for all polygons of a store.

    :param fetcher: Function with the ``fetch_weather_data`` signature
    :param max_workers: Concurrent requests (1-16)
    """

    def __init__(self, fetcher: Optional[Fetcher] = None, max_workers: int = FETCH_WORKERS):
        self.max_workers = max(1, min(16, int(max_workers)))
        if fetcher is None:
            session = build_session()

            def fetcher(*args, **kwargs):
                return fetch_weather_data(*args, session=session, **kwargs)

        self.fetcher = fetcher

    def _average_for(
        self, polygon: Polygon, field: SampleField, time_range: TimeRange
    ) -> Measurement:
        lat, lng = polygon.centroid
        series = self.fetcher(
            lat,
            lng,
            format_date_for_api(time_range.start),
            format_date_for_api(time_range.end),
            [field],
        )
        return range_average(series, time_range.start, time_range.end, field)

    def refresh(self, store: DashboardStore) -> Dict[str, Measurement]:
        """
        Fetch, average and apply values for every polygon.

        :param store: Dashboard state; values are applied via ``set_polygon_value``
        :return: Mapping of polygon id to the computed Measurement
        """
        generation = store.generation
        time_range = store.time_range
        polygons = list(store.polygons)
        results: Dict[str, Measurement] = {}

        if not polygons:
            return results

        jobs = {}
        for polygon in polygons:
            source = store.get_data_source(polygon.data_source_id)
            if source is None:
                logger.warning(f"{polygon.name}: data source {polygon.data_source_id!r} not found")
                results[polygon.id] = Measurement.unknown()
                store.set_polygon_value(polygon.id, results[polygon.id], generation=generation)
                continue
            jobs[polygon.id] = (polygon, source.field)

        if not jobs:
            return results

        logger.info(
            f"Refreshing {len(jobs)} polygon(s) for {time_range.start.isoformat()} - "
            f"{time_range.end.isoformat()} (generation {generation})"
        )

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(jobs))) as executor:
            futures = {
                executor.submit(self._average_for, polygon, field, time_range): polygon
                for polygon, field in jobs.values()
            }
            for future in as_completed(futures):
                polygon = futures[future]
                try:
                    value = future.result()
                except WeatherApiError as e:
                    logger.error(f"Failed to fetch data for {polygon.name} ({polygon.id}): {e}")
                    value = Measurement.unknown()
                except Exception as e:
                    logger.exception(f"Error computing value for {polygon.name} ({polygon.id}): {e}")
                    value = Measurement.unknown()

                results[polygon.id] = value
                store.set_polygon_value(polygon.id, value, generation=generation)

        return results
