"""
Shared fixtures and helpers for lakelevel tests.
"""

import json
from typing import Callable, Iterable, List, Optional, Tuple

import pytest

from lakelevel.cache import LakeLevelCache
from lakelevel.client import TransportResponse
from lakelevel.exceptions import TransportError
from lakelevel.models import Lake


def make_usgs_json(
    readings: Iterable[Tuple[str, str]],
    site_name: str = "Test Lake",
    unit_code: str = "ft",
) -> bytes:
    """Build a USGS water services JSON body from (value, dateTime) pairs."""
    payload = {
        "value": {
            "timeSeries": [
                {
                    "sourceInfo": {"siteName": site_name},
                    "variable": {
                        "variableName": "Gage height",
                        "unit": {"unitCode": unit_code},
                    },
                    "values": [
                        {"value": [{"value": v, "dateTime": d} for v, d in readings]}
                    ],
                }
            ]
        }
    }
    return json.dumps(payload).encode("utf-8")


def make_empty_usgs_json() -> bytes:
    return b'{"value": {"timeSeries": []}}'


class ScriptedTransport:
    """Transport test double: a handler maps each URL to a response or raises."""

    def __init__(
        self, handler: Optional[Callable[[str], TransportResponse]] = None
    ):
        self.handler = handler
        self.requested_urls: List[str] = []

    async def get(self, url: str) -> TransportResponse:
        self.requested_urls.append(url)
        if self.handler is None:
            raise TransportError("Connection refused")
        return self.handler(url)


def ok(body: bytes) -> TransportResponse:
    return TransportResponse(status_code=200, content=body)


@pytest.fixture
def transport():
    """A transport that fails every request until a handler is set."""
    return ScriptedTransport()


@pytest.fixture
def cache(tmp_path):
    """An isolated cache in a temporary directory."""
    return LakeLevelCache(cache_dir=tmp_path / "LakeLevelCache")


@pytest.fixture
def test_lake():
    return Lake(
        id="02166500",
        name="Lake Greenwood",
        state="SC",
        latitude=34.1732,
        longitude=-82.1137,
    )
