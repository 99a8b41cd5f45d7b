"""Communities, collections, items and bitstreams"""

import httpx
import pytest

from dspace_client.datasource.content import (
    BitstreamsResource,
    CollectionsResource,
    CommunitiesResource,
    ItemsResource,
)
from dspace_client.datasource.search import SEARCH_PATH
from dspace_client.services.client import ServiceClient
from dspace_client.services.errors import InvalidInputError, NotFoundError
from tests.conftest import BASE_URL, BITSTREAM_ID, ITEM_ID, search_response


class TestItems:
    @pytest.mark.asyncio
    async def test_get_by_id_is_cached_in_items_store(self, client, caches, sample_item):
        client.route(f"/core/items/{ITEM_ID}", sample_item)
        items = ItemsResource(client, caches)

        first = await items.get_by_id(ITEM_ID)
        second = await items.get_by_id(ITEM_ID)

        assert first["uuid"] == ITEM_ID
        assert second is first
        assert len(client.calls) == 1
        assert len(caches.items) == 1

    @pytest.mark.asyncio
    async def test_get_by_id_expires_with_ttl(self, client, caches, clock, sample_item):
        client.route(f"/core/items/{ITEM_ID}", sample_item)
        items = ItemsResource(client, caches)

        await items.get_by_id(ITEM_ID)
        clock.advance(5 * 60 + 1)
        await items.get_by_id(ITEM_ID)

        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_not_found_propagates_and_is_not_cached(self, client, caches):
        items = ItemsResource(client, caches)
        with pytest.raises(NotFoundError):
            await items.get_by_id(ITEM_ID)
        assert len(caches.items) == 0

    @pytest.mark.asyncio
    async def test_invalid_id_rejected_without_request(self, client, caches):
        items = ItemsResource(client, caches)
        with pytest.raises(InvalidInputError):
            await items.get_by_id("../admin")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_get_metadata(self, client, caches, sample_item):
        client.route(f"/core/items/{ITEM_ID}", sample_item)
        metadata = await ItemsResource(client, caches).get_metadata(ITEM_ID)
        assert metadata["dc.title"][0]["value"] == sample_item["name"]

    @pytest.mark.asyncio
    async def test_get_recent(self, client, caches, sample_item):
        client.route(SEARCH_PATH, search_response([sample_item]))
        items = ItemsResource(client, caches)

        recent = await items.get_recent(limit=5)
        await items.get_recent(limit=5)

        assert recent.source == "recent"
        assert recent.items[0].id == ITEM_ID
        assert client.calls[0].params["sort"] == "dc.date.accessioned,DESC"
        assert len(client.calls) == 1

    def test_thumbnail_url(self, client, caches):
        items = ItemsResource(client, caches)
        assert items.get_thumbnail_url(ITEM_ID) == f"{BASE_URL}/core/items/{ITEM_ID}/thumbnail"
        assert items.get_thumbnail_url("bad") is None

    def test_clear_cache_only_touches_items(self, client, caches):
        caches.items.set("a", 1)
        caches.search.set("b", 2)
        ItemsResource(client, caches).clear_cache()
        assert len(caches.items) == 0
        assert len(caches.search) == 1


class TestCommunitiesAndCollections:
    @pytest.mark.asyncio
    async def test_top_level_communities(self, client, caches):
        client.route("/core/communities/search/top", {"_embedded": {"communities": []}})
        data = await CommunitiesResource(client, caches).get_top_level({"size": 50})
        assert data == {"_embedded": {"communities": []}}
        assert client.calls[0].params == {"size": 50}

    @pytest.mark.asyncio
    async def test_community_children_validate_id(self, client, caches):
        communities = CommunitiesResource(client, caches)
        with pytest.raises(InvalidInputError):
            await communities.get_subcommunities("x")
        with pytest.raises(InvalidInputError):
            await communities.get_collections("x")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_collection_items_scoped_search(self, client, caches, sample_item):
        client.route(SEARCH_PATH, search_response([sample_item], total=9))

        result = await CollectionsResource(client, caches).get_items(ITEM_ID, {"size": 5})

        assert result.total_elements == 9
        assert client.calls[0].params == {"size": 5, "scope": ITEM_ID, "dsoType": "item"}


class TestBitstreams:
    def test_content_url(self, client, caches):
        bitstreams = BitstreamsResource(client, caches)
        assert bitstreams.get_content_url(BITSTREAM_ID) == (
            f"{BASE_URL}/core/bitstreams/{BITSTREAM_ID}/content"
        )
        assert bitstreams.get_content_url("nope") is None

    @pytest.mark.asyncio
    async def test_get_by_bundle(self, client, caches):
        client.route(f"/core/bundles/{BITSTREAM_ID}/bitstreams", {"_embedded": {}})
        data = await BitstreamsResource(client, caches).get_by_bundle(BITSTREAM_ID)
        assert data == {"_embedded": {}}

    @pytest.mark.asyncio
    async def test_get_content_returns_bytes_with_accept_header(self, caches):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"%PDF-1.7 ...")

        http_client = httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        )
        async with ServiceClient(BASE_URL, http_client=http_client) as service:
            data = await BitstreamsResource(service, caches).get_content(
                BITSTREAM_ID, mime_type="application/pdf"
            )

        assert data == b"%PDF-1.7 ..."
        assert seen[0].url.path == f"/server/api/core/bitstreams/{BITSTREAM_ID}/content"
        assert seen[0].headers["accept"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_get_content_missing_bitstream(self, caches):
        http_client = httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(lambda r: httpx.Response(404))
        )
        async with ServiceClient(BASE_URL, http_client=http_client) as service:
            with pytest.raises(NotFoundError):
                await BitstreamsResource(service, caches).get_content(BITSTREAM_ID)

    @pytest.mark.asyncio
    async def test_get_content_invalid_id_rejected_without_request(self, client, caches):
        with pytest.raises(InvalidInputError):
            await BitstreamsResource(client, caches).get_content("../etc")
        assert client.calls == []
