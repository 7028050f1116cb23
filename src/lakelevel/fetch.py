"""
Fetching lake levels from the USGS water services.

A fetch walks an ordered list of candidates and stops at the first one that
yields at least one valid reading:

    7 days:          IV x [00062, 62614, 62615, 63160, 00065]
    30 days, 1 year: DV x [same codes], then IV x [same codes]

Candidates run strictly one at a time. Any transport or parse failure just
moves on to the next candidate.
"""

import asyncio
import logging
from typing import Any, Optional, Tuple
from urllib.parse import quote, urlencode

from .client import Transport
from .config import LakeLevelConfig
from .exceptions import (
    LakeLevelError,
    NoDataAvailableError,
    ResponseTooLargeError,
    TransportError,
)
from .models import EndpointKind, FetchResult, Period
from .parser import parse_response

logger = logging.getLogger(__name__)


def endpoint_kinds_for(period: Period) -> Tuple[EndpointKind, ...]:
    """Endpoint kinds to try for a period, in order."""
    if period.uses_daily_values:
        return (EndpointKind.DAILY, EndpointKind.INSTANTANEOUS)
    return (EndpointKind.INSTANTANEOUS,)


class LakeLevelFetcher:
    """Tries endpoint/parameter candidates in priority order for one lake and period."""

    def __init__(self, transport: Transport, config: Optional[LakeLevelConfig] = None):
        self.transport = transport
        self.config = config or LakeLevelConfig()

    def build_url(
        self, site_id: str, period: Any, endpoint: EndpointKind, parameter_code: str
    ) -> str:
        """
        Build a USGS request URL.

        The site id is percent-encoded so it can never inject extra query
        parameters.
        """
        period = Period.coerce(period)
        params = {
            "sites": site_id,
            "parameterCd": parameter_code,
            "period": period.period_code,
            "format": "json",
        }
        if endpoint is EndpointKind.DAILY:
            params["statCd"] = self.config.daily_stat_code

        base = (
            self.config.dv_base_url
            if endpoint is EndpointKind.DAILY
            else self.config.iv_base_url
        )
        return f"{base}?{urlencode(params, quote_via=quote, safe='')}"

    async def fetch(self, site_id: str, period: Any) -> FetchResult:
        """
        Fetch the current level and history for a lake.

        Args:
            site_id: USGS site number
            period: Period, or its wire code / display name

        Returns:
            FetchResult from the first candidate with valid readings

        Raises:
            NoDataAvailableError: If every candidate failed
        """
        period = Period.coerce(period)
        logger.info(f"Fetching {period.display_name} data for site {site_id}")

        for endpoint in endpoint_kinds_for(period):
            result = await self.fetch_from_endpoint(site_id, period, endpoint)
            if result is not None:
                return result
            if endpoint is EndpointKind.DAILY:
                logger.info(
                    f"No daily values, falling back to instantaneous values for {site_id}"
                )

        raise NoDataAvailableError(
            "No water level data available for this lake",
            f"site={site_id} period={period.period_code}",
        )

    async def fetch_from_endpoint(
        self, site_id: str, period: Any, endpoint: EndpointKind
    ) -> Optional[FetchResult]:
        """Try each parameter code against one endpoint; None if all fail."""
        period = Period.coerce(period)

        for code in self.config.parameter_codes:
            url = self.build_url(site_id, period, endpoint, code)
            try:
                result = await self._attempt(url, endpoint, code)
            except (LakeLevelError, OSError, asyncio.TimeoutError) as e:
                logger.debug(f"Error with param {code} ({endpoint.value}): {e}")
                continue

            if result is None:
                logger.debug(f"No readings with param {code} ({endpoint.value})")
                continue

            logger.info(
                f"Found {len(result.readings)} readings with param {code} "
                f"from {endpoint.value.upper()}"
            )
            return result

        return None

    async def _attempt(
        self, url: str, endpoint: EndpointKind, code: str
    ) -> Optional[FetchResult]:
        response = await self.transport.get(url)

        if not response.ok:
            raise TransportError(
                f"HTTP error {response.status_code}", url, status_code=response.status_code
            )

        size = len(response.content)
        if size > self.config.max_response_size:
            logger.warning(f"Response too large ({size} bytes), skipping")
            raise ResponseTooLargeError("Response too large", f"{size} bytes")

        parsed = parse_response(
            response.content,
            valid_range=(self.config.min_valid_value, self.config.max_valid_value),
        )
        if parsed is None:
            return None
        return parsed.to_result(endpoint=endpoint, parameter_code=code)
