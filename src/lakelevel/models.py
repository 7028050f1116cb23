"""
Data models for lake level data.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    import pandas as pd


class Period(Enum):
    """Lookback window for a lake level request."""

    SEVEN_DAYS = "7 Days"
    THIRTY_DAYS = "30 Days"
    ONE_YEAR = "1 Year"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def period_code(self) -> str:
        return _PERIOD_CODES[self]

    @property
    def chart_title(self) -> str:
        return f"{_PERIOD_TITLES[self]} History"

    @property
    def stats_title(self) -> str:
        return f"{_PERIOD_TITLES[self]} Statistics"

    @property
    def uses_daily_values(self) -> bool:
        """Whether daily values are tried before instantaneous values."""
        return self is not Period.SEVEN_DAYS

    @classmethod
    def from_code(cls, code: str) -> "Period":
        """Look up a period by its wire code (e.g. 'P30D')."""
        for period, period_code in _PERIOD_CODES.items():
            if period_code == code:
                return period
        raise ValueError(f"Unknown period code: {code!r}")

    @classmethod
    def coerce(cls, value: Any) -> "Period":
        """Accept a Period, a wire code ('P7D') or a display name ('7 Days')."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.from_code(value)


_PERIOD_CODES = {
    Period.SEVEN_DAYS: "P7D",
    Period.THIRTY_DAYS: "P30D",
    Period.ONE_YEAR: "P365D",
}

_PERIOD_TITLES = {
    Period.SEVEN_DAYS: "7-Day",
    Period.THIRTY_DAYS: "30-Day",
    Period.ONE_YEAR: "1-Year",
}

PERIOD_CODES = tuple(_PERIOD_CODES.values())


class EndpointKind(Enum):
    """USGS water services endpoint family."""

    INSTANTANEOUS = "iv"
    DAILY = "dv"

    @property
    def data_source(self) -> str:
        return "Daily" if self is EndpointKind.DAILY else "Real-time"


@dataclass(frozen=True, eq=False)
class Lake:
    """A monitored lake or reservoir, identified by its USGS site number."""

    id: str
    name: str
    state: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lake):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def display_name(self) -> str:
        return f"{self.name}, {self.state}"

    @property
    def usgs_url(self) -> str:
        return f"https://waterdata.usgs.gov/monitoring-location/{self.id}/"


@dataclass(frozen=True)
class LakeLevel:
    """The most recent water level reading for a lake."""

    value: float
    unit: str
    date_time: datetime
    site_name: str

    @property
    def value_formatted(self) -> str:
        return f"{self.value:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "unit": self.unit,
            "date_time": self.date_time.isoformat(),
            "site_name": self.site_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LakeLevel":
        return cls(
            value=_finite_float(data["value"]),
            unit=_require_str(data["unit"]),
            date_time=_aware_datetime(data["date_time"]),
            site_name=_require_str(data["site_name"]),
        )


@dataclass
class LakeLevelReading:
    """A single timestamped reading. `id` is synthetic and ignored by equality."""

    value: float
    date_time: datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "date_time": self.date_time.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LakeLevelReading":
        return cls(
            value=_finite_float(data["value"]),
            date_time=_aware_datetime(data["date_time"]),
        )


def readings_to_pandas(readings: List[LakeLevelReading]) -> "pd.DataFrame":
    """Convert readings to a pandas DataFrame with date_time and value columns."""
    try:
        import pandas as pd
    except ImportError:
        raise ImportError(
            "pandas is required for DataFrame conversion. Install with: pip install pandas"
        ) from None

    df = pd.DataFrame(
        {
            "date_time": [r.date_time for r in readings],
            "value": [r.value for r in readings],
        }
    )
    if not df.empty:
        df["date_time"] = pd.to_datetime(df["date_time"], utc=True)
    return df


@dataclass
class FetchResult:
    """Outcome of a successful fetch: current level plus sorted history."""

    level: LakeLevel
    readings: List[LakeLevelReading]
    endpoint: EndpointKind = EndpointKind.INSTANTANEOUS
    parameter_code: Optional[str] = None

    @property
    def data_source(self) -> str:
        return self.endpoint.data_source

    def to_pandas(self) -> "pd.DataFrame":
        return readings_to_pandas(self.readings)


@dataclass
class CachedLakeData:
    """A cached (lake, period) snapshot as stored on disk."""

    SCHEMA_VERSION = 1

    lake_id: str
    period: str
    level: LakeLevel
    readings: List[LakeLevelReading]
    data_source: str
    cached_at: datetime
    stale_after: timedelta = field(default=timedelta(hours=1), compare=False)
    clock: Optional[Callable[[], datetime]] = field(default=None, compare=False, repr=False)

    def cache_age(self, now: Optional[datetime] = None) -> timedelta:
        if now is None:
            now = self.clock() if self.clock else datetime.now(timezone.utc)
        return now - self.cached_at

    @property
    def cache_age_formatted(self) -> str:
        return format_age(self.cache_age())

    @property
    def is_stale(self) -> bool:
        return self.cache_age() > self.stale_after

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.SCHEMA_VERSION,
            "lake_id": self.lake_id,
            "period": self.period,
            "level": self.level.to_dict(),
            "readings": [r.to_dict() for r in self.readings],
            "data_source": self.data_source,
            "cached_at": self.cached_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedLakeData":
        """
        Rebuild a snapshot from its JSON form.

        Raises KeyError, TypeError or ValueError when the data does not match
        the schema.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object, got {type(data).__name__}")
        if data.get("schema_version") != cls.SCHEMA_VERSION:
            raise ValueError(f"Unsupported schema version: {data.get('schema_version')!r}")
        readings = data["readings"]
        if not isinstance(readings, list):
            raise TypeError("readings must be a list")
        return cls(
            lake_id=_require_str(data["lake_id"]),
            period=_require_str(data["period"]),
            level=LakeLevel.from_dict(data["level"]),
            readings=[LakeLevelReading.from_dict(r) for r in readings],
            data_source=_require_str(data["data_source"]),
            cached_at=_aware_datetime(data["cached_at"]),
        )


def format_age(age: timedelta) -> str:
    """Render a cache age as 'Just now', '5 minutes ago', '2 hours ago', ..."""
    seconds = int(age.total_seconds())
    if seconds < 60:
        return "Just now"
    for unit_seconds, unit in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit_seconds:
            count = seconds // unit_seconds
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "Just now"


def _finite_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {type(value).__name__}")
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"Non-finite value: {value!r}")
    return result


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Expected a string, got {type(value).__name__}")
    return value


def _aware_datetime(value: Any) -> datetime:
    result = datetime.fromisoformat(_require_str(value))
    if result.tzinfo is None:
        raise ValueError(f"Timestamp without offset: {value!r}")
    return result
