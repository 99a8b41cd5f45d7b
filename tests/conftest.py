import asyncio
from dataclasses import dataclass
from typing import Any

import pytest

from dspace_client.services.cache import CacheRegistry
from dspace_client.services.errors import NotFoundError

BASE_URL = "http://dspace.test/server/api"

ITEM_ID = "0f3c1e2a-4b5d-4c6e-8f70-9a1b2c3d4e5f"
OTHER_ITEM_ID = "11111111-2222-4333-8444-555555555555"
BITSTREAM_ID = "aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee"


@dataclass
class Call:
    path: str
    params: dict[str, Any] | None
    method: str
    json_data: dict[str, Any] | None
    query_string: str | None


class FakeServiceClient:
    """
    Stand-in for ServiceClient.

    Routes map (method, path) to a payload, an exception instance, or a
    callable taking the Call and returning either. Unrouted paths raise
    NotFoundError like a real 404.
    """

    base_url = BASE_URL

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[Call] = []
        self.closed = False

    def route(self, path: str, response: Any, method: str = "GET") -> None:
        self.routes[(method, path)] = response

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def request(
        self,
        path,
        params=None,
        *,
        method="GET",
        json_data=None,
        query_string=None,
        timeout=None,
    ):
        call = Call(path, params, method, json_data, query_string)
        self.calls.append(call)
        # Yield like a real network call would
        await asyncio.sleep(0)

        response = self.routes.get((method, path))
        if response is None:
            raise NotFoundError(path)
        if callable(response):
            response = response(call)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True

    def paths(self) -> list[str]:
        return [call.path for call in self.calls]

    def calls_to(self, path: str) -> list[Call]:
        return [call for call in self.calls if call.path == path]


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def search_response(items: list[dict[str, Any]], total: int | None = None, facets=None):
    """Discovery search payload wrapping items as indexable objects."""
    total = len(items) if total is None else total
    body: dict[str, Any] = {
        "searchResult": {
            "_embedded": {
                "objects": [{"_embedded": {"indexableObject": item}} for item in items]
            },
            "page": {"totalElements": total, "totalPages": 1 if total else 0, "number": 0},
        }
    }
    if facets is not None:
        body["facets"] = facets
    return {"_embedded": body}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def caches(clock):
    return CacheRegistry.from_ttls(clock=clock)


@pytest.fixture
def client():
    return FakeServiceClient()


@pytest.fixture
def sample_item():
    return {
        "uuid": ITEM_ID,
        "name": "تاريخ المملكة",
        "handle": "123456789/42",
        "type": "item",
        "metadata": {
            "dc.title": [{"value": "تاريخ المملكة"}],
            "dc.contributor.author": [{"value": "Al-Farabi, J."}, {"value": "Doe, J."}],
        },
        "_links": {"thumbnail": {"href": f"{BASE_URL}/core/items/{ITEM_ID}/thumbnail"}},
    }
