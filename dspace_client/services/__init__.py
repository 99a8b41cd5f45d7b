"""
Service layer infrastructure - transport, caching and errors for the DSpace API.

Provides:
- CacheStore / CacheRegistry: per-data-class TTL caches
- CacheSweeper: periodic expiry sweep
- generate_key: deterministic cache keys
- ServiceClient: async HTTP transport
"""

from dspace_client.services.errors import (
    ServiceError,
    NotFoundError,
    RequestTimeoutError,
    InvalidInputError,
    BrowseUnavailableError,
)
from dspace_client.services.keys import generate_key
from dspace_client.services.cache import (
    CacheEntry,
    CacheRegistry,
    CacheStats,
    CacheStore,
)
from dspace_client.services.sweeper import CacheSweeper
from dspace_client.services.client import ServiceClient

__all__ = [
    # Errors
    "ServiceError",
    "NotFoundError",
    "RequestTimeoutError",
    "InvalidInputError",
    "BrowseUnavailableError",
    # Cache
    "generate_key",
    "CacheEntry",
    "CacheRegistry",
    "CacheStats",
    "CacheStore",
    "CacheSweeper",
    # Client
    "ServiceClient",
]
