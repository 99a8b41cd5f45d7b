"""
DSpaceRepository - one object owning the transport, the caches and all resources.

Usage:
    async with DSpaceRepository.from_settings() as repo:
        entries = await repo.browse.by_index("author")
        results = await repo.search.search_with_facets("nile", {"author": ["Doe, J."]})
        await repo.statistics.record_view(item_id)
"""

from typing import Any

from loguru import logger

from dspace_client.datasource.browse import BrowseResource
from dspace_client.datasource.content import (
    BitstreamsResource,
    CollectionsResource,
    CommunitiesResource,
    ItemsResource,
)
from dspace_client.datasource.search import SearchResource
from dspace_client.datasource.statistics import StatisticsResource
from dspace_client.services.cache import CacheRegistry
from dspace_client.services.client import ServiceClient
from dspace_client.services.sweeper import CacheSweeper
from dspace_client.settings import Settings, global_settings


class DSpaceRepository:
    """Facade over every DSpace API resource, sharing one CacheRegistry."""

    def __init__(
        self,
        client: ServiceClient,
        caches: CacheRegistry,
        sweep_interval: int = 60,
    ):
        self.client = client
        self.caches = caches
        self.sweeper = CacheSweeper(caches, interval_seconds=sweep_interval)

        self.communities = CommunitiesResource(client, caches)
        self.collections = CollectionsResource(client, caches)
        self.items = ItemsResource(client, caches)
        self.bitstreams = BitstreamsResource(client, caches)
        self.search = SearchResource(client, caches)
        self.browse = BrowseResource(client, caches, search=self.search)
        self.statistics = StatisticsResource(client, caches)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DSpaceRepository":
        settings = settings or global_settings
        caches = CacheRegistry.from_ttls(
            settings.cache_ttls(),
            max_size=settings.cache_max_size,
            debug=settings.debug,
        )
        client = ServiceClient(settings.api_url, timeout=settings.request_timeout)
        return cls(client, caches, sweep_interval=settings.cache_sweep_interval)

    def start(self) -> None:
        """Start background cache sweeping. Needs a running event loop."""
        self.sweeper.start()
        logger.info(f"DSpace repository client ready: {self.client.base_url}")

    async def close(self) -> None:
        self.sweeper.stop()
        await self.client.close()
        logger.info("DSpace repository client closed")

    async def __aenter__(self) -> "DSpaceRepository":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Cache control

    def clear_all_caches(self) -> None:
        self.caches.clear_all()
        logger.debug("All caches cleared")

    def clear_search_cache(self) -> None:
        self.search.clear_cache()

    def clear_item_cache(self) -> None:
        self.items.clear_cache()

    def clear_stats_cache(self) -> None:
        self.statistics.clear_cache()

    def cache_status(self) -> dict[str, int]:
        """Entry count per cache store."""
        return self.caches.status()

    def get_health_status(self) -> dict[str, Any]:
        return {
            "base_url": self.client.base_url,
            "sweeper_running": self.sweeper.is_running(),
            "caches": self.caches.get_stats(),
        }
