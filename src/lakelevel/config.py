"""
Configuration for lakelevel clients, caches and services.

All policy constants (range bounds, response ceiling, timeouts, cache age) live
here so callers can tune them without touching the fetch or cache logic.
"""

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple, Union

from .exceptions import ConfigurationError

try:
    from importlib import metadata

    _VERSION = metadata.version("lakelevel")
except Exception:
    _VERSION = "unknown"

# USGS water services endpoints
IV_BASE_URL = "https://waterservices.usgs.gov/nwis/iv/"
DV_BASE_URL = "https://waterservices.usgs.gov/nwis/dv/"

# USGS parameter codes for water level, in priority order
PARAMETER_CODES: Tuple[str, ...] = (
    "00062",  # Reservoir elevation above datum
    "62614",  # Lake/reservoir water surface elevation above NGVD 1929
    "62615",  # Lake/reservoir water surface elevation above NAVD 1988
    "63160",  # Stream water level elevation above NAVD 1988
    "00065",  # Gage height
)

DAILY_MEAN_STAT_CODE = "00003"

CACHE_DIR_NAME = "LakeLevelCache"


def default_cache_dir() -> Path:
    """Return the per-user cache directory for lake level snapshots."""
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "lakelevel" / CACHE_DIR_NAME


@dataclass(frozen=True)
class LakeLevelConfig:
    """Tunable settings shared by the transport, fetcher, cache and service."""

    iv_base_url: str = IV_BASE_URL
    dv_base_url: str = DV_BASE_URL
    parameter_codes: Tuple[str, ...] = PARAMETER_CODES
    daily_stat_code: str = DAILY_MEAN_STAT_CODE
    request_timeout: float = 15.0
    resource_timeout: float = 30.0
    max_response_size: int = 10_000_000  # 10 MB
    min_valid_value: float = -100.0
    max_valid_value: float = 15_000.0  # feet; anything above is instrument noise
    max_cache_age: timedelta = timedelta(days=7)
    stale_after: timedelta = timedelta(hours=1)
    cache_dir: Path = field(default_factory=default_cache_dir)
    user_agent: str = f"lakelevel-client/{_VERSION}"

    def __post_init__(self) -> None:
        if not self.parameter_codes:
            raise ConfigurationError("At least one parameter code is required")
        if self.request_timeout <= 0 or self.resource_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")
        if self.resource_timeout < self.request_timeout:
            raise ConfigurationError(
                "resource_timeout must not be shorter than request_timeout"
            )
        if self.max_response_size <= 0:
            raise ConfigurationError("max_response_size must be positive")
        if self.min_valid_value >= self.max_valid_value:
            raise ConfigurationError(
                "Invalid value range",
                f"{self.min_valid_value} >= {self.max_valid_value}",
            )
        if self.max_cache_age <= timedelta(0):
            raise ConfigurationError("max_cache_age must be positive")

    @classmethod
    def from_env(cls, prefix: str = "LAKELEVEL_") -> "LakeLevelConfig":
        """
        Build a config from environment variables.

        Recognised variables (all optional):
            LAKELEVEL_CACHE_DIR, LAKELEVEL_TIMEOUT, LAKELEVEL_RESOURCE_TIMEOUT,
            LAKELEVEL_MAX_RESPONSE_SIZE, LAKELEVEL_MAX_CACHE_AGE_DAYS
        """
        config = cls()
        overrides = {}

        cache_dir = os.environ.get(f"{prefix}CACHE_DIR")
        if cache_dir:
            overrides["cache_dir"] = Path(cache_dir).expanduser()

        for name, attr, convert in (
            ("TIMEOUT", "request_timeout", float),
            ("RESOURCE_TIMEOUT", "resource_timeout", float),
            ("MAX_RESPONSE_SIZE", "max_response_size", int),
        ):
            raw = os.environ.get(f"{prefix}{name}")
            if raw is None or raw == "":
                continue
            try:
                overrides[attr] = convert(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid {prefix}{name}", raw) from e

        raw_age = os.environ.get(f"{prefix}MAX_CACHE_AGE_DAYS")
        if raw_age:
            try:
                overrides["max_cache_age"] = timedelta(days=float(raw_age))
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid {prefix}MAX_CACHE_AGE_DAYS", raw_age
                ) from e

        # Keep resource timeout >= request timeout when only one is overridden
        if "request_timeout" in overrides and "resource_timeout" not in overrides:
            overrides["resource_timeout"] = max(
                config.resource_timeout, overrides["request_timeout"]
            )

        return replace(config, **overrides)

    def with_cache_dir(self, cache_dir: Optional[Union[str, Path]]) -> "LakeLevelConfig":
        """Return a copy pointing at a different cache directory, or self if none given."""
        if not cache_dir:
            return self
        return replace(self, cache_dir=Path(cache_dir))
