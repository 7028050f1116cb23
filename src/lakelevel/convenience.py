"""
High-level convenience functions for one-off lake level lookups.
"""

from typing import Any, Optional

from .cache import LakeLevelCache
from .client import USGSTransport
from .config import LakeLevelConfig
from .fetch import LakeLevelFetcher
from .models import CachedLakeData, FetchResult, Period
from .utils import add_sync_version


@add_sync_version
async def get_lake_level(
    site_id: str,
    period: Any = Period.SEVEN_DAYS,
    transport: Optional[USGSTransport] = None,
    config: Optional[LakeLevelConfig] = None,
) -> FetchResult:
    """
    Fetch the current level and history for one USGS site.

    Args:
        site_id: USGS site number (e.g. '02169500')
        period: Period, wire code ('P7D', 'P30D', 'P365D') or display name
        transport: Transport to use. If not provided, a temporary one is created
        config: Optional settings (timeouts, ranges, endpoints)

    Returns:
        FetchResult with the current level and sorted readings

    Raises:
        NoDataAvailableError: If no endpoint/parameter combination returned data

    Examples:
        >>> result = await get_lake_level("02169500", "P30D")
        >>> result.level.value_formatted
        >>> df = result.to_pandas()
    """
    if transport is not None:
        return await LakeLevelFetcher(transport, config).fetch(site_id, period)

    async with USGSTransport(config) as temp_transport:
        return await LakeLevelFetcher(temp_transport, config).fetch(site_id, period)


@add_sync_version
async def get_cached_lake_level(
    site_id: str,
    period: Any = Period.SEVEN_DAYS,
    cache: Optional[LakeLevelCache] = None,
) -> Optional[CachedLakeData]:
    """
    Return the cached snapshot for a site and period without touching the network.

    Args:
        site_id: USGS site number
        period: Period, wire code or display name
        cache: Cache to read. Defaults to the per-user cache directory

    Returns:
        CachedLakeData, or None if nothing valid is cached
    """
    cache = cache or LakeLevelCache()
    return cache.load(site_id, Period.coerce(period))
