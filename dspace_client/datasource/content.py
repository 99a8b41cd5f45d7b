"""
Core DSpace objects: communities, collections, items and bitstreams.

Every operation taking an identifier validates it as a UUID before any
request is made.
"""

from typing import Any

from loguru import logger

from dspace_client.datasource.base import BaseResource
from dspace_client.datasource.models import SearchResult
from dspace_client.datasource.normalize import to_search_result
from dspace_client.datasource.search import SEARCH_PATH
from dspace_client.datasource.security import is_valid_uuid, validate_id


class CommunitiesResource(BaseResource):
    @property
    def resource_id(self) -> str:
        return "communities"

    async def get_all(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.client.request("/core/communities", params=params)

    async def get_top_level(
        self, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self.client.request("/core/communities/search/top", params=params)

    async def get_by_id(self, community_id: str) -> dict[str, Any]:
        validate_id(community_id)
        return await self.client.request(f"/core/communities/{community_id}")

    async def get_subcommunities(
        self, community_id: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        validate_id(community_id)
        return await self.client.request(
            f"/core/communities/{community_id}/subcommunities", params=params
        )

    async def get_collections(
        self, community_id: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        validate_id(community_id)
        return await self.client.request(
            f"/core/communities/{community_id}/collections", params=params
        )


class CollectionsResource(BaseResource):
    @property
    def resource_id(self) -> str:
        return "collections"

    async def get_all(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.client.request("/core/collections", params=params)

    async def get_by_id(self, collection_id: str) -> dict[str, Any]:
        validate_id(collection_id)
        return await self.client.request(f"/core/collections/{collection_id}")

    async def get_items(
        self, collection_id: str, params: dict[str, Any] | None = None
    ) -> SearchResult:
        """Items in a collection, via a search scoped to it."""
        validate_id(collection_id)
        raw = await self.client.request(
            SEARCH_PATH,
            params={**(params or {}), "scope": collection_id, "dsoType": "item"},
        )
        return to_search_result(raw)


class ItemsResource(BaseResource):
    @property
    def resource_id(self) -> str:
        return "items"

    async def get_all(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.client.request("/core/items", params=params)

    async def get_by_id(self, item_id: str, use_cache: bool = True) -> dict[str, Any]:
        """Item payload, cached in the items store."""
        validate_id(item_id)

        async def fetch() -> dict[str, Any]:
            return await self.client.request(f"/core/items/{item_id}")

        return await self._cached(
            self.caches.items, "item", {"id": item_id}, fetch, use_cache
        )

    async def get_bundles(self, item_id: str) -> dict[str, Any]:
        validate_id(item_id)
        return await self.client.request(f"/core/items/{item_id}/bundles")

    async def get_metadata(self, item_id: str) -> dict[str, Any]:
        item = await self.get_by_id(item_id)
        return item.get("metadata") or {}

    async def get_recent(self, limit: int = 10, use_cache: bool = True) -> SearchResult:
        """Most recently accessioned items, cached in the search store."""
        params = {"sort": "dc.date.accessioned,DESC", "size": limit, "dsoType": "item"}

        async def fetch() -> SearchResult:
            raw = await self.client.request(SEARCH_PATH, params=params)
            return to_search_result(raw, source="recent")

        return await self._cached(self.caches.search, "recent", params, fetch, use_cache)

    def get_thumbnail_url(self, item_id: str) -> str | None:
        if not is_valid_uuid(item_id):
            return None
        return self.client.url_for(f"/core/items/{item_id}/thumbnail")

    def clear_cache(self) -> None:
        self.caches.items.clear()
        logger.debug("Item cache cleared")


class BitstreamsResource(BaseResource):
    @property
    def resource_id(self) -> str:
        return "bitstreams"

    async def get_by_id(self, bitstream_id: str) -> dict[str, Any]:
        validate_id(bitstream_id)
        return await self.client.request(f"/core/bitstreams/{bitstream_id}")

    async def get_by_bundle(self, bundle_id: str) -> dict[str, Any]:
        validate_id(bundle_id)
        return await self.client.request(f"/core/bundles/{bundle_id}/bitstreams")

    async def get_content(
        self, bitstream_id: str, mime_type: str = "application/octet-stream"
    ) -> bytes:
        """Raw bitstream content, requested with ``Accept: mime_type``."""
        validate_id(bitstream_id)
        return await self.client.request_bytes(
            f"/core/bitstreams/{bitstream_id}/content", accept=mime_type
        )

    def get_content_url(self, bitstream_id: str) -> str | None:
        """Download URL of a bitstream, or None for an invalid id."""
        if not is_valid_uuid(bitstream_id):
            return None
        return self.client.url_for(f"/core/bitstreams/{bitstream_id}/content")
