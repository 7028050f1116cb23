"""
Parsing and validation of USGS water services JSON responses.

A response looks like::

    {"value": {"timeSeries": [{
        "sourceInfo": {"siteName": "..."},
        "variable": {"unit": {"unitCode": "ft"}},
        "values": [{"value": [{"value": "438.50", "dateTime": "..."}]}]
    }]}}

Only the first time series and its first value group are used.
"""

import json
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from .exceptions import ParseError
from .models import EndpointKind, FetchResult, LakeLevel, LakeLevelReading

logger = logging.getLogger(__name__)

# Strings the USGS uses in place of a measurement
MISSING_VALUE_SENTINELS = frozenset({"-999999", "-999999.00"})

DEFAULT_VALUE_RANGE = (-100.0, 15_000.0)

# Daily values and bare dates come without an offset; USGS reports them in Eastern time
USGS_LOCAL_TIMEZONE = ZoneInfo("America/New_York")

# Tried in order, first match wins
_AWARE_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")
_LOCAL_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%d")


@dataclass
class ParsedSeries:
    """Readings that survived filtering, plus counts of what was dropped."""

    level: LakeLevel
    readings: List[LakeLevelReading]
    rejected: Dict[str, int] = field(default_factory=dict)

    def to_result(
        self,
        endpoint: EndpointKind = EndpointKind.INSTANTANEOUS,
        parameter_code: Optional[str] = None,
    ) -> FetchResult:
        return FetchResult(
            level=self.level,
            readings=self.readings,
            endpoint=endpoint,
            parameter_code=parameter_code,
        )


def parse_date_time(date_string: str) -> Optional[datetime]:
    """
    Parse a USGS timestamp.

    Accepts, in order: ISO-8601 with fractional seconds and offset, ISO-8601
    with offset, local 'YYYY-MM-DDTHH:MM:SS.fff', and a bare 'YYYY-MM-DD'.
    Returns None if nothing matches.
    """
    if not isinstance(date_string, str) or not date_string:
        return None

    for fmt in _AWARE_FORMATS:
        try:
            return datetime.strptime(date_string, fmt)
        except ValueError:
            continue

    for fmt in _LOCAL_FORMATS:
        try:
            return datetime.strptime(date_string, fmt).replace(
                tzinfo=USGS_LOCAL_TIMEZONE
            )
        except ValueError:
            continue

    return None


def parse_value(
    value: str, valid_range: Tuple[float, float] = DEFAULT_VALUE_RANGE
) -> Tuple[Optional[float], Optional[str]]:
    """
    Validate a raw value string.

    Returns (value, None) when accepted, otherwise (None, reason) where reason
    is one of 'empty', 'sentinel', 'non_numeric' or 'out_of_range'.
    """
    if not value:
        return None, "empty"
    if value in MISSING_VALUE_SENTINELS:
        return None, "sentinel"
    try:
        number = float(value)
    except ValueError:
        return None, "non_numeric"
    if not math.isfinite(number):
        return None, "non_numeric"
    low, high = valid_range
    if not low <= number <= high:
        return None, "out_of_range"
    return number, None


def _require(container: Any, key: str, path: str) -> Any:
    if not isinstance(container, dict) or key not in container:
        raise ParseError("Missing required field in USGS response", f"{path}.{key}")
    return container[key]


def _require_list(value: Any, path: str) -> List[Any]:
    if not isinstance(value, list):
        raise ParseError("Expected a list in USGS response", path)
    return value


def _require_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ParseError("Expected a string in USGS response", path)
    return value


def load_payload(content: Union[bytes, str]) -> Any:
    """Decode a JSON response body."""
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError("Invalid JSON response", str(e)) from e
    except RecursionError as e:
        raise ParseError("JSON response nested too deeply") from e


def parse_response(
    payload: Union[bytes, str, Dict[str, Any]],
    valid_range: Tuple[float, float] = DEFAULT_VALUE_RANGE,
) -> Optional[ParsedSeries]:
    """
    Turn a USGS response into sorted readings and the current level.

    Args:
        payload: Raw response body or already-decoded JSON object
        valid_range: Inclusive (min, max) accepted for reading values

    Returns:
        ParsedSeries, or None when the response has no usable readings

    Raises:
        ParseError: If the JSON is invalid or required fields are missing
    """
    if isinstance(payload, (bytes, str)):
        payload = load_payload(payload)

    value = _require(payload, "value", "$")
    time_series = value.get("timeSeries") if isinstance(value, dict) else None
    if not time_series:
        return None
    time_series = _require_list(time_series, "$.value.timeSeries")

    series = time_series[0]
    site_name = _require_str(
        _require(_require(series, "sourceInfo", "timeSeries[0]"), "siteName", "sourceInfo"),
        "sourceInfo.siteName",
    )
    variable = _require(series, "variable", "timeSeries[0]")
    unit = _require_str(
        _require(_require(variable, "unit", "variable"), "unitCode", "variable.unit"),
        "variable.unit.unitCode",
    )

    value_groups = _require_list(_require(series, "values", "timeSeries[0]"), "values")
    if not value_groups:
        return None
    raw_readings = value_groups[0].get("value") if isinstance(value_groups[0], dict) else None
    if not raw_readings:
        return None
    raw_readings = _require_list(raw_readings, "values[0].value")

    readings: List[LakeLevelReading] = []
    rejected: Counter = Counter()

    for index, item in enumerate(raw_readings):
        path = f"values[0].value[{index}]"
        raw_value = _require_str(_require(item, "value", path), f"{path}.value")
        raw_date = _require_str(_require(item, "dateTime", path), f"{path}.dateTime")

        number, reason = parse_value(raw_value, valid_range)
        if number is None:
            rejected[reason] += 1
            continue

        date_time = parse_date_time(raw_date)
        if date_time is None:
            rejected["bad_timestamp"] += 1
            continue

        readings.append(LakeLevelReading(value=number, date_time=date_time))

    if rejected:
        logger.debug(f"Rejected readings for {site_name}: {dict(rejected)}")

    if not readings:
        return None

    # Upstream order is not guaranteed; the latest reading is the current level
    readings.sort(key=lambda r: r.date_time)
    latest = readings[-1]

    level = LakeLevel(
        value=latest.value,
        unit=unit,
        date_time=latest.date_time,
        site_name=site_name,
    )
    return ParsedSeries(level=level, readings=readings, rejected=dict(rejected))
