"""
Discovery search: free text, facets and facet-filtered search.

Facet-filtered searches are always fetched fresh; only unfiltered searches
go through the search cache.
"""

from collections.abc import Iterable
from typing import Any

from loguru import logger

from dspace_client.datasource.base import BaseResource
from dspace_client.datasource.models import FacetValue, SearchResult
from dspace_client.datasource.normalize import extract_facets, to_search_result
from dspace_client.datasource.query_builder import (
    FacetFilters,
    build_search_query,
    has_active_facets,
)
from dspace_client.datasource.security import sanitize_search_query

SEARCH_PATH = "/discover/search/objects"
FACETS_PATH = "/discover/facets"


class SearchResource(BaseResource):
    """Wrapper around /discover/search/objects and /discover/facets."""

    @property
    def resource_id(self) -> str:
        return "search"

    async def query(
        self, params: dict[str, Any] | None = None, use_cache: bool = True
    ) -> SearchResult:
        """
        Plain search with httpx-encoded parameters.

        Args:
            params: Search parameters (query, page, size, sort, scope, ...)
            use_cache: Read/write the search cache
        """
        search_params = dict(params or {})
        if search_params.get("query"):
            search_params["query"] = sanitize_search_query(search_params["query"])
        search_params["dsoType"] = search_params.get("dsoType") or "item"
        search_params["embed"] = "thumbnail"

        async def fetch() -> SearchResult:
            raw = await self.client.request(SEARCH_PATH, params=search_params)
            return to_search_result(raw)

        return await self._cached(
            self.caches.search, "search", search_params, fetch, use_cache
        )

    async def get_facets(
        self, params: dict[str, Any] | None = None, use_cache: bool = True
    ) -> dict[str, list[FacetValue]]:
        """Facet blocks for the given search context, keyed by facet name."""
        facet_params = dict(params or {})

        async def fetch() -> dict[str, list[FacetValue]]:
            raw = await self.client.request(FACETS_PATH, params=facet_params)
            return extract_facets(raw)

        return await self._cached(
            self.caches.facets, "facets", facet_params, fetch, use_cache
        )

    async def search_with_facets(
        self,
        query: str | None,
        facets: FacetFilters | None = None,
        *,
        page: int | None = None,
        size: int | None = None,
        sort: str | None = None,
        scope: str | None = None,
        dso_type: str = "item",
        filters: Iterable[tuple[str, str]] = (),
        use_cache: bool = True,
        source: str = "search",
    ) -> SearchResult:
        """
        Search with facet filters (``f.<facet>=<value>,equals`` per value).

        Any active facet or extra filter disables the cache for this call,
        whatever use_cache says.

        Raises:
            InvalidInputError: For unsupported facet shapes (no request made)
        """
        filters = list(filters)
        query_string = build_search_query(
            query,
            facets,
            dso_type=dso_type,
            page=page,
            size=size,
            sort=sort,
            scope=scope,
            filters=filters,
        )
        cacheable = use_cache and not filters and not has_active_facets(facets)
        logger.debug(f"Search query string: {query_string} (cache={cacheable})")

        async def fetch() -> SearchResult:
            raw = await self.client.request(SEARCH_PATH, query_string=query_string)
            return to_search_result(raw, source=source)

        return await self._cached(
            self.caches.search, "search-facets", query_string, fetch, cacheable
        )

    def clear_cache(self) -> None:
        """Clear search and facets caches."""
        self.caches.search.clear()
        self.caches.facets.clear()
        logger.debug("Search cache cleared")
