"""
Offline cache of lake level snapshots.

One JSON file per (lake id, period code) under a dedicated cache directory.
Reads are defensive: anything that cannot be decoded, belongs to a different
key, is timestamped in the future, or is older than the maximum cache age is
deleted and reported as absent.
"""

import json
import logging
import os
import re
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from .config import LakeLevelConfig
from .exceptions import CacheCorruptionError, ErrorKind, ServiceError
from .models import PERIOD_CODES, CachedLakeData, LakeLevel, LakeLevelReading, Period

logger = logging.getLogger(__name__)

_UNSAFE_KEY_PATTERN = re.compile(r"\.\.|[/\\]")


def sanitize_key(component: str) -> str:
    """Replace path separators and '..' so a key component stays inside the cache dir."""
    return _UNSAFE_KEY_PATTERN.sub("_", component)


def _period_code(period: Union[Period, str]) -> str:
    if isinstance(period, Period):
        return period.period_code
    return period


def format_byte_count(size: int) -> str:
    """Format a byte count in KB or MB, e.g. '12 KB' or '1.4 MB'."""
    if size == 0:
        return "Zero KB"
    if size < 1_000_000:
        return f"{max(1, round(size / 1000))} KB"
    return f"{size / 1_000_000:.1f} MB"


class LakeLevelCache:
    """
    File-backed store of CachedLakeData keyed by (lake id, period).

    Every operation runs under one lock, so concurrent save/load/clear calls
    from several services never interleave on the same file.
    """

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        config: Optional[LakeLevelConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = (config or LakeLevelConfig()).with_cache_dir(cache_dir)
        self.cache_dir = self.config.cache_dir
        self.max_cache_age: timedelta = self.config.max_cache_age
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self.last_write_error: Optional[ServiceError] = None

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create cache directory {self.cache_dir}: {e}")

        logger.info(f"Cache directory: {self.cache_dir}")

    def cache_file_path(self, lake_id: str, period: Union[Period, str]) -> Path:
        """Path of the cache file for a lake and period."""
        filename = f"{sanitize_key(lake_id)}_{sanitize_key(_period_code(period))}.json"
        return self.cache_dir / filename

    def save(
        self,
        lake_id: str,
        level: LakeLevel,
        readings: List[LakeLevelReading],
        period: Union[Period, str],
        data_source: str,
    ) -> bool:
        """
        Save a snapshot, replacing any existing one for the same key.

        The file is written to a temporary name and renamed into place, so
        readers never see a partial snapshot. Failures are logged, never raised.

        Returns:
            True if the snapshot was written
        """
        period_code = _period_code(period)
        cached = CachedLakeData(
            lake_id=lake_id,
            period=period_code,
            level=level,
            readings=list(readings),
            data_source=data_source,
            cached_at=self._clock(),
        )
        path = self.cache_file_path(lake_id, period_code)

        with self._lock:
            try:
                self._write_atomic(path, json.dumps(cached.to_dict()))
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Failed to cache data for {lake_id}: {e}")
                self.last_write_error = ServiceError(
                    ErrorKind.CACHE_WRITE_FAILURE, f"{lake_id} ({period_code}): {e}"
                )
                return False

        self.last_write_error = None
        logger.info(f"Cached data for {lake_id} ({period_code})")
        return True

    def load(
        self, lake_id: str, period: Union[Period, str]
    ) -> Optional[CachedLakeData]:
        """
        Load a snapshot, or None if absent, unreadable, mismatched, or expired.

        Invalid files are removed so they cannot fail again.
        """
        period_code = _period_code(period)
        path = self.cache_file_path(lake_id, period_code)

        with self._lock:
            if not path.exists():
                return None

            try:
                cached = self._read(path)
                self._validate(cached, lake_id, period_code)
            except CacheCorruptionError as e:
                logger.warning(f"Discarding cache for {lake_id} ({period_code}): {e}")
                self._remove(path)
                return None

        cached.stale_after = self.config.stale_after
        cached.clock = self._clock
        logger.info(
            f"Loaded cached data for {lake_id} ({period_code}), "
            f"age: {cached.cache_age_formatted}"
        )
        return cached

    def has_cached_data(self, lake_id: str) -> bool:
        """True if any period has a valid, unexpired snapshot for the lake."""
        return any(self.load(lake_id, code) is not None for code in PERIOD_CODES)

    def clear(self, lake_id: str) -> None:
        """Remove cached snapshots for every period of one lake."""
        with self._lock:
            for code in PERIOD_CODES:
                self._remove(self.cache_file_path(lake_id, code))
        logger.info(f"Cleared cache for {lake_id}")

    def clear_all(self) -> None:
        """Remove every cached snapshot."""
        with self._lock:
            for path in self._files():
                self._remove(path)
        logger.info("Cleared all cache")

    @property
    def cache_size(self) -> int:
        """Total size of cache files in bytes."""
        with self._lock:
            total = 0
            for path in self._files():
                try:
                    total += path.stat().st_size
                except OSError:
                    continue
            return total

    @property
    def cache_size_formatted(self) -> str:
        return format_byte_count(self.cache_size)

    # Internal helpers

    def _files(self) -> List[Path]:
        try:
            return [p for p in self.cache_dir.iterdir() if p.is_file()]
        except OSError:
            return []

    def _write_atomic(self, path: Path, payload: str) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.cache_dir, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def _read(self, path: Path) -> CachedLakeData:
        try:
            raw = path.read_bytes()
            data: Any = json.loads(raw)
            return CachedLakeData.from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise CacheCorruptionError("Malformed cache file", str(e)) from e
        except (KeyError, TypeError, ValueError) as e:
            raise CacheCorruptionError("Cache file does not match schema", repr(e)) from e
        except OSError as e:
            raise CacheCorruptionError("Unreadable cache file", str(e)) from e

    def _validate(self, cached: CachedLakeData, lake_id: str, period_code: str) -> None:
        if cached.lake_id != lake_id or cached.period != period_code:
            raise CacheCorruptionError(
                "Cache integrity check failed",
                f"expected {lake_id}/{period_code}, "
                f"found {cached.lake_id}/{cached.period}",
            )

        now = self._clock()
        if cached.cached_at > now:
            raise CacheCorruptionError(
                "Cache timestamp is in the future", cached.cached_at.isoformat()
            )

        age = cached.cache_age(now)
        if age > self.max_cache_age:
            raise CacheCorruptionError("Cache expired", f"age {age}")

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove cache file {path}: {e}")
