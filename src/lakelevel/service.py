"""
Lake level data access service.

LakeLevelService combines the fetcher and the offline cache and keeps the
state a UI needs: current level, history, loading flag, error, data source,
and whether the data came from the cache.

    Idle -> Loading -> Success   (fresh data, saved to cache)
                    -> Fallback  (network failed, cached snapshot shown)
                    -> Failed    (network failed, nothing cached)

No exception escapes fetch_lake_level(); failures are reported through
`error`.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

from .cache import LakeLevelCache
from .client import Transport
from .config import LakeLevelConfig
from .exceptions import ErrorKind, LakeLevelError, ServiceError
from .fetch import LakeLevelFetcher
from .models import (
    CachedLakeData,
    FetchResult,
    Lake,
    LakeLevel,
    LakeLevelReading,
    Period,
    readings_to_pandas,
)

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class LakeLevelState:
    """Observable state owned by one LakeLevelService."""

    current_level: Optional[LakeLevel] = None
    historical_readings: List[LakeLevelReading] = field(default_factory=list)
    is_loading: bool = False
    error: Optional[ServiceError] = None
    selected_period: Period = Period.SEVEN_DAYS
    data_source: str = ""
    is_from_cache: bool = False
    cache_age: str = ""
    lake: Optional[Lake] = None


class LakeLevelService:
    """
    Façade over LakeLevelFetcher and LakeLevelCache.

    Not safe for concurrent mutation; use one service per caller. The cache
    may be shared between services.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        cache: Optional[LakeLevelCache] = None,
        config: Optional[LakeLevelConfig] = None,
        fetcher: Optional[LakeLevelFetcher] = None,
    ):
        if fetcher is None and transport is None:
            raise ValueError("Either a transport or a fetcher is required")
        self.config = config or LakeLevelConfig()
        self.fetcher = fetcher or LakeLevelFetcher(transport, self.config)
        self.cache = cache if cache is not None else LakeLevelCache(config=self.config)
        self.state = LakeLevelState()

    # Read accessors

    @property
    def current_level(self) -> Optional[LakeLevel]:
        return self.state.current_level

    @property
    def historical_readings(self) -> List[LakeLevelReading]:
        return self.state.historical_readings

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def error(self) -> Optional[ServiceError]:
        return self.state.error

    @property
    def error_message(self) -> Optional[str]:
        return self.state.error.message if self.state.error else None

    @property
    def selected_period(self) -> Period:
        return self.state.selected_period

    @property
    def data_source(self) -> str:
        return self.state.data_source

    @property
    def is_from_cache(self) -> bool:
        return self.state.is_from_cache

    @property
    def cache_age(self) -> str:
        return self.state.cache_age

    @property
    def lake(self) -> Optional[Lake]:
        return self.state.lake

    @property
    def last_cache_write_error(self) -> Optional[ServiceError]:
        """Set when the last snapshot could not be saved; never surfaced as `error`."""
        return self.cache.last_write_error

    # Operations

    async def select_lake(self, lake: Lake) -> None:
        """Switch to a lake and fetch the currently selected period."""
        self.state.lake = lake
        await self.fetch_lake_level(self.state.selected_period)

    async def fetch_lake_level(self, period: Any = None) -> None:
        """
        Fetch data for the selected lake and the given period.

        Shows any cached snapshot right away, then tries the network. On
        total network failure falls back to the cache, or sets an error.
        """
        lake = self.state.lake
        if lake is None:
            self.state.error = ServiceError(ErrorKind.NO_ENTITY_SELECTED)
            return

        period = Period.coerce(period) if period is not None else self.state.selected_period

        self.state.is_loading = True
        self.state.error = None
        self.state.selected_period = period
        self.state.data_source = ""
        self.state.is_from_cache = False
        self.state.cache_age = ""

        logger.info(f"Fetching {period.display_name} data for {lake.name}")

        cached = self.cache.load(lake.id, period)
        if cached is not None:
            self._apply_cached(cached)
            logger.info("Showing cached data while fetching fresh data")

        try:
            result = await self.fetcher.fetch(lake.id, period)
        except LakeLevelError as e:
            logger.info(f"Fetch failed for {lake.name}: {e}")
            self._fall_back(lake, period)
            return

        self._apply_result(result)
        if not self.cache.save(
            lake.id, result.level, result.readings, period, result.data_source
        ):
            logger.warning(f"Continuing without offline copy for {lake.name}")

    def reset(self) -> None:
        """Return to the initial empty state. The cache is left untouched."""
        self.state.current_level = None
        self.state.historical_readings = []
        self.state.error = None
        self.state.lake = None
        self.state.data_source = ""
        self.state.is_from_cache = False
        self.state.cache_age = ""
        self.state.is_loading = False

    # Statistics over the current readings

    @property
    def min_level(self) -> Optional[float]:
        if not self.state.historical_readings:
            return None
        return min(r.value for r in self.state.historical_readings)

    @property
    def max_level(self) -> Optional[float]:
        if not self.state.historical_readings:
            return None
        return max(r.value for r in self.state.historical_readings)

    @property
    def average_level(self) -> Optional[float]:
        readings = self.state.historical_readings
        if not readings:
            return None
        return sum(r.value for r in readings) / len(readings)

    def to_pandas(self) -> "pd.DataFrame":
        """Current readings as a DataFrame (date_time, value)."""
        return readings_to_pandas(self.state.historical_readings)

    # Internal helpers

    def _apply_result(self, result: FetchResult) -> None:
        self.state.current_level = result.level
        self.state.historical_readings = result.readings
        self.state.data_source = result.data_source
        self.state.is_from_cache = False
        self.state.cache_age = ""
        self.state.is_loading = False

    def _apply_cached(self, cached: CachedLakeData) -> None:
        self.state.current_level = cached.level
        self.state.historical_readings = cached.readings
        self.state.data_source = cached.data_source
        self.state.is_from_cache = True
        self.state.cache_age = cached.cache_age_formatted

    def _fall_back(self, lake: Lake, period: Period) -> None:
        cached = self.cache.load(lake.id, period)
        if cached is not None:
            self._apply_cached(cached)
            self.state.error = None
            logger.info("Showing cached data after fetch failed")
        else:
            self.state.error = ServiceError(ErrorKind.TOTAL_FETCH_FAILURE)
        self.state.is_loading = False
