"""
Dashboard state container

``DashboardStore`` holds all mutable dashboard state: the time window and
playback flag, the drawing session, polygons, data sources and the map
viewport. The presentation layer keeps one instance (Streamlit keeps it in
``st.session_state``) and calls the command methods below.

Error conventions:
- Validation rejections raise ``ValidationError`` and change nothing.
- Lookups of unknown ids return None; updates/deletes of unknown ids return False.

Every change to the time window bumps ``generation``. Fetch results tagged
with an older generation are dropped by ``set_polygon_value``.

Usage:
    store = DashboardStore()
    store.start_drawing()
    for lat, lng in [(52.5, 13.3), (52.6, 13.3), (52.6, 13.5)]:
        store.add_drawing_point(lat, lng)
    polygon = store.finish_drawing()
"""

import copy
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Union

from zonecast.config import (
    DEFAULT_DATA_SOURCE,
    DEFAULT_POLYGON_COLOR,
    DEFAULT_RANGE_HOURS,
    MAP_CENTER,
    MAP_ZOOM,
    MIN_POLYGON_POINTS,
    NEUTRAL_COLOR,
    NEW_SOURCE_RULE,
    STEP_HOURS,
    TIMELINE_WINDOW_DAYS,
)
from zonecast.core.color_rules import resolve_color
from zonecast.core.drawing import DrawingSession
from zonecast.core.geometry import centroid
from zonecast.errors import ValidationError
from zonecast.models.dashboard import (
    ColorRule,
    DataSource,
    LatLng,
    Measurement,
    Operator,
    Polygon,
    SampleField,
    TimeRange,
    new_id,
    parse_threshold,
)
from zonecast.utils.date_util import to_utc, utc_now
from zonecast.utils.log_util import app_logger

logger = app_logger(__name__)

DATA_SOURCE_FIELDS = {"name", "active", "field", "unit"}
COLOR_RULE_FIELDS = {"operator", "threshold", "color", "label"}


def default_time_range(now: Optional[datetime] = None) -> TimeRange:
    """[now, now + 1h] in UTC."""
    start = to_utc(now) if now is not None else utc_now()
    return TimeRange(start, start + timedelta(hours=DEFAULT_RANGE_HOURS))


class DashboardStore:
    """
    Explicit state holder for the polygon dashboard.

    :param now: Reference time for the initial window (defaults to current UTC time)
    :param data_sources: Initial data sources; defaults to the Open-Meteo temperature source
    """

    def __init__(
        self,
        now: Optional[datetime] = None,
        data_sources: Optional[List[DataSource]] = None,
    ):
        self._lock = threading.RLock()
        self.time_range = default_time_range(now)
        self.is_playing = False
        self.generation = 0

        self.drawing = DrawingSession()
        self.polygons: List[Polygon] = []
        self.selected_polygon_id: Optional[str] = None

        if data_sources is None:
            data_sources = [DataSource.from_dict(copy.deepcopy(DEFAULT_DATA_SOURCE))]
        self.data_sources: List[DataSource] = list(data_sources)

        self.map_center: LatLng = MAP_CENTER
        self.map_zoom = MAP_ZOOM

    # ------------------------------------------------------------------
    # Time window
    # ------------------------------------------------------------------

    def _replace_range(self, time_range: TimeRange) -> None:
        with self._lock:
            self.time_range = time_range
            self.generation += 1
        logger.debug(
            f"Time range {time_range.start.isoformat()} - {time_range.end.isoformat()} "
            f"(generation {self.generation})"
        )

    def set_time_range(self, start: Union[str, datetime], end: Union[str, datetime]) -> TimeRange:
        """
        Replace the window.

        :raises ValidationError: if start is after end
        """
        self._replace_range(TimeRange(to_utc(start), to_utc(end)))
        return self.time_range

    def timeline_window(self, now: Optional[datetime] = None) -> TimeRange:
        """The span the timeline slider covers: 15 days either side of now."""
        now = to_utc(now) if now is not None else utc_now()
        span = timedelta(days=TIMELINE_WINDOW_DAYS)
        return TimeRange(now - span, now + span)

    def _clamp_to_window(self, moment: datetime, now: Optional[datetime]) -> datetime:
        window = self.timeline_window(now)
        return min(max(to_utc(moment), window.start), window.end)

    def drag_start(self, moment: Union[str, datetime], now: Optional[datetime] = None) -> bool:
        """
        Move the start handle. Rejected unless it stays strictly before the end.

        :return: True if the range changed
        """
        new_start = self._clamp_to_window(moment, now)
        if new_start >= self.time_range.end:
            logger.debug(f"Rejected start drag to {new_start.isoformat()}")
            return False
        self._replace_range(TimeRange(new_start, self.time_range.end))
        return True

    def drag_end(self, moment: Union[str, datetime], now: Optional[datetime] = None) -> bool:
        """
        Move the end handle. Rejected unless it stays strictly after the start.

        :return: True if the range changed
        """
        new_end = self._clamp_to_window(moment, now)
        if new_end <= self.time_range.start:
            logger.debug(f"Rejected end drag to {new_end.isoformat()}")
            return False
        self._replace_range(TimeRange(self.time_range.start, new_end))
        return True

    def move_handles(
        self,
        start: Union[str, datetime],
        end: Union[str, datetime],
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Move both handles at once, clamped to the timeline window.

        :return: True if the range changed; False if start would not stay before end
        """
        new_start = self._clamp_to_window(start, now)
        new_end = self._clamp_to_window(end, now)
        if new_start >= new_end:
            logger.debug(f"Rejected range {new_start.isoformat()} - {new_end.isoformat()}")
            return False
        self._replace_range(TimeRange(new_start, new_end))
        return True

    def toggle_play(self) -> bool:
        self.is_playing = not self.is_playing
        logger.info(f"Playback {'started' if self.is_playing else 'paused'}")
        return self.is_playing

    def step_forward(self) -> TimeRange:
        self._replace_range(self.time_range.shifted(STEP_HOURS))
        return self.time_range

    def step_backward(self) -> TimeRange:
        self._replace_range(self.time_range.shifted(-STEP_HOURS))
        return self.time_range

    def reset_to_now(self, now: Optional[datetime] = None) -> TimeRange:
        self._replace_range(default_time_range(now))
        return self.time_range

    # ------------------------------------------------------------------
    # Map viewport
    # ------------------------------------------------------------------

    def set_map_center(self, lat: float, lng: float) -> None:
        self.map_center = (float(lat), float(lng))

    def set_map_zoom(self, zoom: float) -> None:
        self.map_zoom = zoom

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    @property
    def is_drawing(self) -> bool:
        return self.drawing.active

    def start_drawing(self) -> None:
        self.drawing.start()
        self.selected_polygon_id = None

    def add_drawing_point(self, lat: float, lng: float) -> int:
        return self.drawing.add_point(lat, lng)

    def finish_drawing(self) -> Polygon:
        """
        Commit the drawing as a polygon tied to the first data source.

        :return: The new Polygon
        :raises ValidationError: on too few or too many points; the drawing is kept
        """
        points = self.drawing.finish()

        source = self.data_sources[0] if self.data_sources else None
        if source is not None and source.color_rules:
            color = source.color_rules[0].color
        else:
            color = DEFAULT_POLYGON_COLOR

        polygon = Polygon(
            id=new_id(),
            name=f"Polygon {len(self.polygons) + 1}",
            points=list(points),
            data_source_id=source.id if source is not None else "",
            color=color,
            centroid=centroid(points),
        )
        self.polygons.append(polygon)
        logger.info(f"Created {polygon.name} with {len(points)} points at {polygon.centroid}")
        return polygon

    def cancel_drawing(self) -> None:
        self.drawing.cancel()

    # ------------------------------------------------------------------
    # Polygons
    # ------------------------------------------------------------------

    def get_polygon(self, polygon_id: str) -> Optional[Polygon]:
        return next((p for p in self.polygons if p.id == polygon_id), None)

    @property
    def selected_polygon(self) -> Optional[Polygon]:
        if self.selected_polygon_id is None:
            return None
        return self.get_polygon(self.selected_polygon_id)

    def add_polygon(
        self,
        name: str,
        points: Sequence[LatLng],
        data_source_id: str,
        color: Optional[str] = None,
    ) -> Polygon:
        """
        Add a polygon directly, bypassing the drawing session.

        :raises ValidationError: if fewer than 3 points are given
        """
        if len(points) < MIN_POLYGON_POINTS:
            raise ValidationError(
                f"A polygon must have at least {MIN_POLYGON_POINTS} points (got {len(points)})"
            )
        if color is None:
            source = self.get_data_source(data_source_id)
            if source is None:
                color = NEUTRAL_COLOR
            elif source.color_rules:
                color = source.color_rules[0].color
            else:
                color = DEFAULT_POLYGON_COLOR

        points = [(float(lat), float(lng)) for lat, lng in points]
        polygon = Polygon(
            id=new_id(),
            name=name,
            points=points,
            data_source_id=data_source_id,
            color=color,
            centroid=centroid(points),
        )
        self.polygons.append(polygon)
        return polygon

    def select_polygon(self, polygon_id: Optional[str]) -> bool:
        if polygon_id is not None and self.get_polygon(polygon_id) is None:
            logger.warning(f"Cannot select unknown polygon {polygon_id}")
            return False
        self.selected_polygon_id = polygon_id
        return True

    def delete_polygon(self, polygon_id: str) -> bool:
        polygon = self.get_polygon(polygon_id)
        if polygon is None:
            logger.warning(f"Cannot delete unknown polygon {polygon_id}")
            return False
        self.polygons.remove(polygon)
        if self.selected_polygon_id == polygon_id:
            self.selected_polygon_id = None
        logger.info(f"Deleted {polygon.name}")
        return True

    def set_polygon_value(
        self,
        polygon_id: str,
        value: Union[Measurement, float, int, None],
        generation: Optional[int] = None,
    ) -> bool:
        """
        Record a computed value and recolour the polygon.

        :param polygon_id: Target polygon
        :param value: Measurement, plain number, or None for unknown
        :param generation: Generation the value was computed for; stale ones are dropped
        :return: True if the value was applied
        """
        if not isinstance(value, Measurement):
            value = Measurement.unknown() if value is None else Measurement.of(value)

        with self._lock:
            if generation is not None and generation != self.generation:
                logger.debug(
                    f"Dropping stale value for {polygon_id} "
                    f"(generation {generation}, current {self.generation})"
                )
                return False

            polygon = self.get_polygon(polygon_id)
            if polygon is None:
                logger.warning(f"Cannot set value of unknown polygon {polygon_id}")
                return False

            polygon.current_value = value
            self._recolor(polygon)
        return True

    def polygon_color(self, polygon: Polygon) -> str:
        """Display colour: resolved from the source's rules, neutral if the source is gone."""
        source = self.get_data_source(polygon.data_source_id)
        if source is None:
            return NEUTRAL_COLOR
        return resolve_color(polygon.current_value, source.color_rules)

    def _recolor(self, polygon: Polygon) -> None:
        source = self.get_data_source(polygon.data_source_id)
        if source is None or polygon.current_value.is_known:
            polygon.color = self.polygon_color(polygon)

    def _recolor_source(self, source_id: str) -> None:
        for polygon in self.polygons:
            if polygon.data_source_id == source_id:
                self._recolor(polygon)

    # ------------------------------------------------------------------
    # Data sources
    # ------------------------------------------------------------------

    def get_data_source(self, source_id: str) -> Optional[DataSource]:
        return next((ds for ds in self.data_sources if ds.id == source_id), None)

    def active_data_source(self) -> Optional[DataSource]:
        """First active source in list order; the one shown in the legend."""
        return next((ds for ds in self.data_sources if ds.active), None)

    def add_data_source(
        self,
        name: str,
        field: Union[str, SampleField],
        unit: str,
        color_rules: Optional[List[Dict]] = None,
        active: bool = True,
    ) -> DataSource:
        """
        Add a data source. Without rules it gets a single ``>= 0`` default rule.

        :raises ValidationError: on a blank name or unsupported field
        """
        if not name or not name.strip():
            raise ValidationError("Data source name must not be empty")

        rules = color_rules or [dict(NEW_SOURCE_RULE, id=new_id())]
        source = DataSource(
            id=new_id(),
            name=name.strip(),
            field=SampleField.parse(field),
            unit=unit,
            color_rules=[ColorRule.from_dict(r) for r in rules],
            active=active,
        )
        self.data_sources.append(source)
        logger.info(f"Added data source {source.name} ({source.field.value})")
        return source

    def update_data_source(self, source_id: str, **changes) -> bool:
        """
        Update name, active, field or unit of a data source.

        Changing the field clears the values of the source's polygons.

        :raises ValidationError: on unknown attributes or an unsupported field
        """
        unknown = set(changes) - DATA_SOURCE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update data source attributes: {sorted(unknown)}")

        source = self.get_data_source(source_id)
        if source is None:
            logger.warning(f"Cannot update unknown data source {source_id}")
            return False

        if "field" in changes:
            changes["field"] = SampleField.parse(changes["field"])
        if "name" in changes and not str(changes["name"]).strip():
            raise ValidationError("Data source name must not be empty")

        field_changed = "field" in changes and changes["field"] != source.field
        for key, value in changes.items():
            setattr(source, key, value)

        if field_changed:
            with self._lock:
                self.generation += 1
                for polygon in self.polygons:
                    if polygon.data_source_id == source_id:
                        polygon.current_value = Measurement.unknown()
        return True

    def delete_data_source(self, source_id: str) -> bool:
        """
        Remove a data source. Polygons keep their now-dangling reference and
        are shown in the neutral colour.
        """
        source = self.get_data_source(source_id)
        if source is None:
            logger.warning(f"Cannot delete unknown data source {source_id}")
            return False
        self.data_sources.remove(source)
        self._recolor_source(source_id)
        logger.info(f"Deleted data source {source.name}")
        return True

    # ------------------------------------------------------------------
    # Colour rules
    # ------------------------------------------------------------------

    def add_color_rule(
        self,
        source_id: str,
        operator: Union[str, Operator],
        threshold: float,
        color: str,
        label: Optional[str] = None,
    ) -> Optional[ColorRule]:
        source = self.get_data_source(source_id)
        if source is None:
            logger.warning(f"Cannot add rule to unknown data source {source_id}")
            return None

        rule = ColorRule(
            id=new_id(),
            operator=Operator.parse(operator),
            threshold=parse_threshold(threshold),
            color=color,
            label=label,
        )
        source.color_rules.append(rule)
        self._recolor_source(source_id)
        return rule

    def update_color_rule(self, source_id: str, rule_id: str, **changes) -> bool:
        unknown = set(changes) - COLOR_RULE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update colour rule attributes: {sorted(unknown)}")

        source = self.get_data_source(source_id)
        rule = None
        if source is not None:
            rule = next((r for r in source.color_rules if r.id == rule_id), None)
        if rule is None:
            logger.warning(f"Cannot update unknown rule {rule_id} of source {source_id}")
            return False

        if "operator" in changes:
            changes["operator"] = Operator.parse(changes["operator"])
        if "threshold" in changes:
            changes["threshold"] = parse_threshold(changes["threshold"])
        for key, value in changes.items():
            setattr(rule, key, value)

        self._recolor_source(source_id)
        return True

    def delete_color_rule(self, source_id: str, rule_id: str) -> bool:
        """
        Remove a rule from a data source.

        :raises ValidationError: if it is the source's last rule
        """
        source = self.get_data_source(source_id)
        rule = None
        if source is not None:
            rule = next((r for r in source.color_rules if r.id == rule_id), None)
        if rule is None:
            logger.warning(f"Cannot delete unknown rule {rule_id} of source {source_id}")
            return False

        if len(source.color_rules) <= 1:
            raise ValidationError("A data source must have at least one color rule")

        source.color_rules.remove(rule)
        self._recolor_source(source_id)
        return True
