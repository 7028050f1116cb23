"""
Exceptions and tagged error values for lakelevel.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LakeLevelError(Exception):
    """Base exception for lakelevel errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ConfigurationError(LakeLevelError):
    """Invalid configuration value."""

    pass


class TransportError(LakeLevelError):
    """Error talking to the USGS water services (network, timeout, HTTP status)."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class ResponseTooLargeError(TransportError):
    """Response body exceeded the configured size ceiling."""

    pass


class ParseError(LakeLevelError):
    """Malformed upstream payload."""

    pass


class NoDataAvailableError(LakeLevelError):
    """Every endpoint/parameter candidate failed for a fetch."""

    pass


class CacheCorruptionError(LakeLevelError):
    """Cached snapshot cannot be decoded or failed an integrity check."""

    pass


class ErrorKind(str, Enum):
    """
    Closed set of failure kinds surfaced by LakeLevelService.

    TRANSPORT_FAILURE, PARSE_FAILURE and CACHE_CORRUPTION are reserved: the
    fetcher and cache recover from those per candidate or per file, so the
    service currently reports them only as TOTAL_FETCH_FAILURE or a cache miss.
    """

    NO_ENTITY_SELECTED = "no_entity_selected"
    TRANSPORT_FAILURE = "transport_failure"
    PARSE_FAILURE = "parse_failure"
    TOTAL_FETCH_FAILURE = "total_fetch_failure"
    CACHE_CORRUPTION = "cache_corruption"
    CACHE_WRITE_FAILURE = "cache_write_failure"


DEFAULT_ERROR_MESSAGES = {
    ErrorKind.NO_ENTITY_SELECTED: "No lake selected",
    ErrorKind.TRANSPORT_FAILURE: "Could not reach the USGS water services",
    ErrorKind.PARSE_FAILURE: "Received malformed data from the USGS water services",
    ErrorKind.TOTAL_FETCH_FAILURE: "No water level data available for this lake",
    ErrorKind.CACHE_CORRUPTION: "Cached data was unreadable and has been discarded",
    ErrorKind.CACHE_WRITE_FAILURE: "Could not save data for offline use",
}


@dataclass(frozen=True)
class ServiceError:
    """A tagged error value with an optional human-readable detail."""

    kind: ErrorKind
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        return self.detail or DEFAULT_ERROR_MESSAGES[self.kind]

    def __str__(self) -> str:
        return self.message
