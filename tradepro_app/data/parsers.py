"""
Parsers for the upstream chart service payloads.

This module handles parsing of raw JSON bytes and of the chart response
shape into canonical data structures, and the inverse encoding that keeps
the upstream camelCase key names intact.
"""

import json
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..errors import ParseError
from ..logging import get_logger, log_skipped_record
from .models import (
    ChartInfo,
    ChartPayload,
    ChartSeries,
    ChartSeriesSet,
    DataGrouping,
    Plotline,
)

logger = get_logger(__name__)

CHART_SOURCE = "chart payload"
SERIES_NAMES = ("intraday", "history")


def is_number(value: Any) -> bool:
    """True for JSON numbers; booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_json_payload(raw_data: Union[str, bytes, bytearray], source: str = "payload") -> Any:
    """
    Parse raw JSON text into Python values.

    Args:
        raw_data: Raw JSON string or bytes from the upstream service
        source: Description of the payload for error messages

    Returns:
        Parsed value (normally a dict)

    Raises:
        ParseError: If JSON parsing fails
    """
    if not isinstance(raw_data, (str, bytes, bytearray)):
        raise ParseError(f"Invalid JSON input type: {type(raw_data).__name__}", source=source)
    try:
        return json.loads(raw_data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON: {e}", source=source, cause=e)


def require_field(obj: Mapping, key: str, expected: Union[type, tuple], *,
                  source: str, path: str) -> Any:
    """Fetch a required field, raising ParseError if missing or mistyped."""
    if key not in obj or obj[key] is None:
        raise ParseError(f"Missing '{key}' field at {path}", source=source)
    value = obj[key]
    if expected is float:
        if not is_number(value):
            raise ParseError(f"'{key}' at {path} must be a number", source=source)
        return float(value)
    if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise ParseError(f"'{key}' at {path} must be an integer", source=source)
    if not isinstance(value, expected):
        raise ParseError(f"'{key}' at {path} has invalid type {type(value).__name__}", source=source)
    return value


def optional_field(obj: Mapping, key: str, expected: Union[type, tuple], *,
                   source: str, path: str) -> Any:
    """Fetch an optional field; absent or null gives None, a wrong type raises."""
    if obj.get(key) is None:
        return None
    return require_field(obj, key, expected, source=source, path=path)


def parse_chart_payload(payload: Any) -> ChartPayload:
    """
    Parse a chart response into a ChartPayload.

    Expected format:
    {
        "info": {"isin": "...", "chartType": "...", "textMaxValue": "...",
                 "textMinValue": "...", "plotlines": [...], "maxRange": 0},
        "series": {
            "intraday": {"id": "...", "data": [[1696233600000, 101.5]],
                         "timeline": "...", "name": "...", "color": "#...",
                         "dataGrouping": {"enabled": false}},
            "history": {...}
        }
    }

    Malformed plotlines, coordinate entries that are not arrays, and
    malformed series are logged and dropped; the rest of the payload is kept.

    Args:
        payload: Parsed JSON object

    Returns:
        Normalized ChartPayload

    Raises:
        ParseError: If the payload, its info block or its series block is unusable
    """
    if not isinstance(payload, Mapping):
        raise ParseError("Chart payload must be an object", source=CHART_SOURCE)

    info_raw = require_field(payload, "info", Mapping, source=CHART_SOURCE, path="$")
    series_raw = require_field(payload, "series", Mapping, source=CHART_SOURCE, path="$")
    container = optional_field(payload, "container", str, source=CHART_SOURCE, path="$")

    info = _parse_chart_info(info_raw)

    series = {}
    for name in SERIES_NAMES:
        raw = series_raw.get(name)
        if raw is None:
            series[name] = None
            continue
        try:
            series[name] = _parse_chart_series(raw, f"$.series.{name}")
        except ParseError as e:
            log_skipped_record(logger, "chart_series", str(e), {"series": name})
            series[name] = None

    return ChartPayload(
        info=info,
        series=ChartSeriesSet(**series),
        container=container,
    )


def _parse_chart_info(info: Mapping) -> ChartInfo:
    path = "$.info"
    plotlines_raw = require_field(info, "plotlines", list, source=CHART_SOURCE, path=path)

    plotlines = []
    for i, raw in enumerate(plotlines_raw):
        try:
            plotlines.append(_parse_plotline(raw, f"{path}.plotlines[{i}]"))
        except ParseError as e:
            log_skipped_record(logger, "plotline", str(e), {"index": i})

    return ChartInfo(
        isin=require_field(info, "isin", str, source=CHART_SOURCE, path=path),
        chart_type=require_field(info, "chartType", str, source=CHART_SOURCE, path=path),
        text_max_value=require_field(info, "textMaxValue", str, source=CHART_SOURCE, path=path),
        text_min_value=require_field(info, "textMinValue", str, source=CHART_SOURCE, path=path),
        plotlines=tuple(plotlines),
        max_range=optional_field(info, "maxRange", int, source=CHART_SOURCE, path=path),
    )


def _parse_plotline(raw: Any, path: str) -> Plotline:
    if not isinstance(raw, Mapping):
        raise ParseError(f"Plotline at {path} must be an object", source=CHART_SOURCE)
    return Plotline(
        label=require_field(raw, "label", str, source=CHART_SOURCE, path=path),
        value=require_field(raw, "value", float, source=CHART_SOURCE, path=path),
        align=require_field(raw, "align", str, source=CHART_SOURCE, path=path),
        y=require_field(raw, "y", int, source=CHART_SOURCE, path=path),
        id=require_field(raw, "id", str, source=CHART_SOURCE, path=path),
        color=require_field(raw, "color", str, source=CHART_SOURCE, path=path),
    )


def _parse_chart_series(raw: Any, path: str) -> ChartSeries:
    if not isinstance(raw, Mapping):
        raise ParseError(f"Series at {path} must be an object", source=CHART_SOURCE)

    data_raw = require_field(raw, "data", list, source=CHART_SOURCE, path=path)
    data = []
    for i, entry in enumerate(data_raw):
        if isinstance(entry, (list, tuple)):
            data.append(tuple(entry))
        else:
            log_skipped_record(logger, "chart_tuple", "coordinate is not an array",
                               {"path": f"{path}.data[{i}]"})

    return ChartSeries(
        id=require_field(raw, "id", str, source=CHART_SOURCE, path=path),
        data=tuple(data),
        timeline=require_field(raw, "timeline", str, source=CHART_SOURCE, path=path),
        name=require_field(raw, "name", str, source=CHART_SOURCE, path=path),
        color=require_field(raw, "color", str, source=CHART_SOURCE, path=path),
        data_grouping=_parse_data_grouping(raw.get("dataGrouping"), f"{path}.dataGrouping"),
    )


def _parse_data_grouping(raw: Any, path: str) -> Optional[DataGrouping]:
    if raw is None:
        return None
    try:
        if not isinstance(raw, Mapping):
            raise ParseError(f"dataGrouping at {path} must be an object", source=CHART_SOURCE)
        return DataGrouping(
            enabled=require_field(raw, "enabled", bool, source=CHART_SOURCE, path=path),
            forced=optional_field(raw, "forced", bool, source=CHART_SOURCE, path=path),
            approximation=optional_field(raw, "approximation", str, source=CHART_SOURCE, path=path),
        )
    except ParseError as e:
        log_skipped_record(logger, "data_grouping", str(e), {"path": path})
        return None


def chart_payload_to_wire(payload: ChartPayload) -> dict[str, Any]:
    """
    Encode a ChartPayload back into the upstream JSON shape.

    Optional fields that are None are omitted, as the upstream service does.
    """
    info = payload.info
    info_wire: dict[str, Any] = {
        "isin": info.isin,
        "chartType": info.chart_type,
        "textMaxValue": info.text_max_value,
        "textMinValue": info.text_min_value,
        "plotlines": [
            {
                "label": p.label,
                "value": p.value,
                "align": p.align,
                "y": p.y,
                "id": p.id,
                "color": p.color,
            }
            for p in info.plotlines
        ],
    }
    if info.max_range is not None:
        info_wire["maxRange"] = info.max_range

    series_wire = {}
    for name in SERIES_NAMES:
        series = getattr(payload.series, name)
        if series is not None:
            series_wire[name] = _series_to_wire(series)

    wire: dict[str, Any] = {"info": info_wire}
    if payload.container is not None:
        wire["container"] = payload.container
    wire["series"] = series_wire
    return wire


def _series_to_wire(series: ChartSeries) -> dict[str, Any]:
    wire: dict[str, Any] = {
        "id": series.id,
        "data": [list(entry) for entry in series.data],
        "timeline": series.timeline,
        "name": series.name,
        "color": series.color,
    }
    grouping = series.data_grouping
    if grouping is not None:
        grouping_wire: dict[str, Any] = {"enabled": grouping.enabled}
        if grouping.forced is not None:
            grouping_wire["forced"] = grouping.forced
        if grouping.approximation is not None:
            grouping_wire["approximation"] = grouping.approximation
        wire["dataGrouping"] = grouping_wire
    return wire
