"""
HTTP transport for the USGS water services.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from .config import LakeLevelConfig
from .exceptions import ResponseTooLargeError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw HTTP response: status code and body bytes."""

    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Anything that can GET a URL and return a TransportResponse."""

    async def get(self, url: str) -> TransportResponse:
        ...


class USGSTransport:
    """
    Transport for the USGS water services built on httpx.AsyncClient.

    Non-2xx responses are returned as-is; network failures, timeouts and
    oversized bodies raise TransportError.
    """

    def __init__(
        self,
        config: Optional[LakeLevelConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or LakeLevelConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.config.request_timeout, pool=self.config.resource_timeout
            ),
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def close(self) -> None:
        await self.aclose()

    async def __aenter__(self) -> "USGSTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def get(self, url: str) -> TransportResponse:
        """GET a URL, bounded by the resource timeout and response size ceiling."""
        logger.debug(f"GET {url}")
        try:
            return await asyncio.wait_for(
                self._get(url), timeout=self.config.resource_timeout
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request timeout after {self.config.resource_timeout}s", url
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timeout after {self.config.request_timeout}s", url
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", url) from e

    async def _get(self, url: str) -> TransportResponse:
        limit = self.config.max_response_size
        async with self._client.stream("GET", url) as response:
            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > limit:
                raise ResponseTooLargeError(
                    "Response too large",
                    f"{declared} bytes > {limit}",
                    status_code=response.status_code,
                )

            chunks = []
            size = 0
            async for chunk in response.aiter_bytes():
                size += len(chunk)
                if size > limit:
                    raise ResponseTooLargeError(
                        "Response too large",
                        f"more than {limit} bytes",
                        status_code=response.status_code,
                    )
                chunks.append(chunk)

            return TransportResponse(
                status_code=response.status_code, content=b"".join(chunks)
            )
