"""
Base class for DSpace API resources.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from dspace_client.services.cache import CacheRegistry, CacheStore
from dspace_client.services.client import ServiceClient

T = TypeVar("T")


class BaseResource(ABC):
    """
    Abstract base class for all API resources.

    All resources should:
    - Use ServiceClient for HTTP requests
    - Read and write the CacheRegistry store that matches their data class
    - Return Pydantic models or plain API payloads
    """

    def __init__(self, client: ServiceClient, caches: CacheRegistry):
        self.client = client
        self.caches = caches

    @property
    @abstractmethod
    def resource_id(self) -> str:
        """Name used in log messages."""
        ...

    async def _cached(
        self,
        store: CacheStore,
        endpoint: str,
        params: Mapping[str, Any] | str | None,
        fetch: Callable[[], Awaitable[T]],
        use_cache: bool = True,
    ) -> T:
        """
        Return the cached value for (endpoint, params) or fetch and store it.

        Errors raised by fetch propagate and are never cached.
        """
        if not use_cache:
            return await fetch()

        key = store.generate_key(endpoint, params)
        cached = store.get(key)
        if cached is not None:
            return cached

        data = await fetch()
        store.set(key, data)
        return data
