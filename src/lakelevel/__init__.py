"""
Python client for USGS lake and reservoir water levels.

Fetch real-time and daily water levels, keep an offline copy, and export
readings to DataFrames.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .cache import LakeLevelCache
from .catalog import LakeCatalog
from .client import Transport, TransportResponse, USGSTransport
from .config import LakeLevelConfig
from .convenience import get_cached_lake_level, get_lake_level
from .exceptions import (
    CacheCorruptionError,
    ConfigurationError,
    ErrorKind,
    LakeLevelError,
    NoDataAvailableError,
    ParseError,
    ResponseTooLargeError,
    ServiceError,
    TransportError,
)
from .favorites import FavoritesStore
from .fetch import LakeLevelFetcher
from .models import (
    CachedLakeData,
    EndpointKind,
    FetchResult,
    Lake,
    LakeLevel,
    LakeLevelReading,
    Period,
)
from .parser import parse_date_time, parse_response
from .service import LakeLevelService, LakeLevelState
from .sync import AsyncSyncBridge

__all__ = [
    # Core classes
    "LakeLevelService",
    "LakeLevelState",
    "LakeLevelFetcher",
    "LakeLevelCache",
    "LakeLevelConfig",
    "USGSTransport",
    "Transport",
    "TransportResponse",
    "AsyncSyncBridge",
    # Models
    "Lake",
    "LakeLevel",
    "LakeLevelReading",
    "CachedLakeData",
    "FetchResult",
    "Period",
    "EndpointKind",
    # Catalog and favorites
    "LakeCatalog",
    "FavoritesStore",
    # Parsing
    "parse_response",
    "parse_date_time",
    # Convenience functions (each has a .sync variant)
    "get_lake_level",
    "get_cached_lake_level",
    # Errors
    "LakeLevelError",
    "ConfigurationError",
    "TransportError",
    "ResponseTooLargeError",
    "ParseError",
    "NoDataAvailableError",
    "CacheCorruptionError",
    "ErrorKind",
    "ServiceError",
]
