"""
Browse by index with progressive fallbacks.

Browse index names vary between DSpace versions and deployments, and some
installations expose no browse endpoints at all. Entries are resolved from,
in order:

1. ``/discover/browses/{candidate}/entries`` for each candidate index name
2. ``/discover/browses/{index}`` with the requested name as given
3. ``/discover/facets/{facet}``
4. the facet block of a broad ``query=*`` search

Items for a browse value come from ``/discover/browses/{candidate}/items``,
falling back to a search filtered on the index's facet. Year ranges on the
date-issued index go to a range-filtered search instead.
"""

from functools import partial

from loguru import logger

from dspace_client.datasource.base import BaseResource
from dspace_client.datasource.date_range import parse_date_range, range_filter
from dspace_client.datasource.models import (
    INDEX_DEFINITIONS,
    BrowseEntries,
    BrowseRequest,
    DateRange,
    IndexDefinition,
    IndexType,
    SearchResult,
)
from dspace_client.datasource.normalize import (
    embedded_list,
    facet_values,
    find_facet,
    has_data,
    page_info,
    to_browse_entries,
    to_search_result,
)
from dspace_client.datasource.query_builder import build_search_query
from dspace_client.datasource.resolver import (
    Skip,
    StrategiesExhausted,
    Strategy,
    attempt,
    run_strategies,
)
from dspace_client.datasource.search import SEARCH_PATH, SearchResource
from dspace_client.services.cache import CacheRegistry
from dspace_client.services.client import ServiceClient
from dspace_client.services.errors import BrowseUnavailableError, InvalidInputError

BROWSES_PATH = "/discover/browses"
FACETS_PATH = "/discover/facets"


def get_definition(index_type: IndexType | str) -> IndexDefinition:
    """Index definition for a user-facing index name."""
    try:
        return INDEX_DEFINITIONS[IndexType(index_type)]
    except ValueError:
        raise InvalidInputError(f"Unknown browse index: {index_type!r}") from None


class BrowseResource(BaseResource):
    """Browse entries and browse items, resolved across endpoint variants."""

    def __init__(
        self,
        client: ServiceClient,
        caches: CacheRegistry,
        search: SearchResource | None = None,
    ):
        super().__init__(client, caches)
        self.search = search or SearchResource(client, caches)

    @property
    def resource_id(self) -> str:
        return "browse"

    async def get_indices(self, use_cache: bool = True) -> dict:
        """Browse indexes advertised by the server."""

        async def fetch() -> dict:
            return await self.client.request(BROWSES_PATH)

        return await self._cached(self.caches.facets, "browses", None, fetch, use_cache)

    async def browse(self, request: BrowseRequest, use_cache: bool = True):
        """Entries when no filter value is set, items for the value otherwise."""
        if not request.filter_value:
            return await self.by_index(
                request.index_type, request.page, request.size, request.sort, use_cache
            )
        return await self.items_by_value(
            request.index_type,
            request.filter_value,
            request.page,
            request.size,
            request.sort,
            use_cache,
        )

    # ── Browse entries ────────────────────────────────────────────────────────

    async def by_index(
        self,
        index_type: IndexType | str,
        page: int = 0,
        size: int = 20,
        sort: str | None = None,
        use_cache: bool = True,
    ) -> BrowseEntries:
        """
        Browse entries for an index.

        Raises:
            InvalidInputError: Unknown index
            BrowseUnavailableError: Every strategy failed
        """
        definition = get_definition(index_type)
        request = BrowseRequest(
            index_type=definition.index, page=page, size=size, sort=sort
        )
        index = definition.index.value

        async def resolve() -> BrowseEntries:
            try:
                resolution = await run_strategies(
                    request, self._entry_strategies(definition), label=f"browse:{index}"
                )
            except StrategiesExhausted as e:
                logger.error(f"No browse entries available for index '{index}'")
                raise BrowseUnavailableError(
                    index,
                    last_error=e.last_error,
                    attempts=[name for name, _ in e.skipped],
                ) from e
            return resolution.value

        return await self._cached(
            self.caches.facets,
            "browse-entries",
            {"index": index, **request.paging()},
            resolve,
            use_cache,
        )

    def _entry_strategies(
        self, definition: IndexDefinition
    ) -> list[Strategy[BrowseRequest, BrowseEntries]]:
        last = len(definition.candidates) - 1
        strategies = [
            Strategy(
                f"entries:{name}",
                partial(self._entries_from_index, name, position == last),
            )
            for position, name in enumerate(definition.candidates)
        ]
        strategies += [
            Strategy(f"index:{definition.index.value}", self._entries_from_raw_index),
            Strategy(
                f"facet:{definition.facet}",
                partial(self._entries_from_facet, definition.facet),
            ),
            Strategy(
                f"search-facet:{definition.facet}",
                partial(self._entries_from_search_facet, definition.facet),
            ),
        ]
        return strategies

    async def _entries_from_index(
        self, name: str, is_last: bool, request: BrowseRequest
    ) -> BrowseEntries | Skip:
        raw = await attempt(
            self.client.request(f"{BROWSES_PATH}/{name}/entries", params=request.paging())
        )
        if isinstance(raw, Skip):
            return raw

        rows = embedded_list(raw, "entries")
        # An empty page only counts when no other candidate is left to try
        if has_data(rows, raw) or (is_last and page_info(raw) is not None):
            return self._to_entries(request, raw, rows, f"entries:{name}")
        return Skip(reason="empty")

    async def _entries_from_raw_index(
        self, request: BrowseRequest
    ) -> BrowseEntries | Skip:
        index = request.index_type.value
        raw = await attempt(
            self.client.request(f"{BROWSES_PATH}/{index}", params=request.paging())
        )
        if isinstance(raw, Skip):
            return raw

        rows = embedded_list(raw, "entries")
        if has_data(rows, raw):
            return self._to_entries(request, raw, rows, f"index:{index}")
        return Skip(reason="empty")

    async def _entries_from_facet(
        self, facet: str, request: BrowseRequest
    ) -> BrowseEntries | Skip:
        raw = await attempt(
            self.client.request(
                f"{FACETS_PATH}/{facet}",
                params={"page": request.page, "size": request.size},
            )
        )
        if isinstance(raw, Skip):
            return raw

        rows = facet_values(raw)
        if rows:
            return self._to_entries(request, raw, rows, f"facet:{facet}")
        return Skip(reason="empty")

    async def _entries_from_search_facet(
        self, facet: str, request: BrowseRequest
    ) -> BrowseEntries | Skip:
        query_string = build_search_query("*", embed=None, size=0)
        raw = await attempt(self.client.request(SEARCH_PATH, query_string=query_string))
        if isinstance(raw, Skip):
            return raw

        rows = find_facet(raw, facet)
        if rows:
            # The search page block counts items, not facet values
            return self._to_entries(request, {}, rows, f"search-facet:{facet}")
        return Skip(reason="facet missing")

    @staticmethod
    def _to_entries(
        request: BrowseRequest, raw: dict, rows: list, source: str
    ) -> BrowseEntries:
        entries = to_browse_entries(rows)
        total, pages, number = page_info(raw) or (
            len(entries),
            1 if entries else 0,
            request.page,
        )
        return BrowseEntries(
            index=request.index_type.value,
            entries=entries,
            total_elements=total,
            total_pages=pages,
            page=number,
            source=source,
        )

    # ── Browse items ──────────────────────────────────────────────────────────

    async def items_by_value(
        self,
        index_type: IndexType | str,
        value: str,
        page: int = 0,
        size: int = 20,
        sort: str | None = None,
        use_cache: bool = True,
    ) -> SearchResult:
        """
        Items whose index value equals ``value``.

        Only results from the browse items endpoint are cached; the
        facet-filtered fallback search is always fetched fresh.

        Raises:
            InvalidInputError: Unknown index or empty value
            BrowseUnavailableError: Every strategy failed
        """
        definition = get_definition(index_type)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError("Browse value must be a non-empty string")
        value = value.strip()

        if definition.index is IndexType.DATEISSUED:
            date_range = parse_date_range(value)
            if date_range is not None:
                return await self.items_by_date_range(date_range, page, size, sort)

        request = BrowseRequest(
            index_type=definition.index,
            filter_value=value,
            page=page,
            size=size,
            sort=sort,
        )
        index = definition.index.value

        store = self.caches.search
        key = store.generate_key(
            "browse-items", {"index": index, "value": value, **request.paging()}
        )
        if use_cache:
            cached = store.get(key)
            if cached is not None:
                return cached

        try:
            resolution = await run_strategies(
                request,
                self._item_strategies(definition),
                label=f"browse-items:{index}",
            )
        except StrategiesExhausted as e:
            logger.error(f"No items available for index '{index}' and value '{value}'")
            raise BrowseUnavailableError(
                index,
                value=value,
                last_error=e.last_error,
                attempts=[name for name, _ in e.skipped],
            ) from e

        if use_cache and resolution.strategy.startswith("items:"):
            store.set(key, resolution.value)
        return resolution.value

    def _item_strategies(
        self, definition: IndexDefinition
    ) -> list[Strategy[BrowseRequest, SearchResult]]:
        strategies = [
            Strategy(f"items:{name}", partial(self._items_from_index, name))
            for name in definition.candidates
        ]
        strategies.append(
            Strategy(
                f"search-filter:{definition.facet}",
                partial(self._items_from_search, definition.facet),
            )
        )
        return strategies

    async def _items_from_index(
        self, name: str, request: BrowseRequest
    ) -> SearchResult | Skip:
        raw = await attempt(
            self.client.request(
                f"{BROWSES_PATH}/{name}/items",
                params={"filterValue": request.filter_value, **request.paging()},
            )
        )
        if isinstance(raw, Skip):
            return raw

        rows = embedded_list(raw, "items")
        if has_data(rows, raw):
            return to_search_result(raw, source=f"items:{name}")
        return Skip(reason="empty")

    async def _items_from_search(
        self, facet: str, request: BrowseRequest
    ) -> SearchResult | Skip:
        return await attempt(
            self.search.search_with_facets(
                None,
                {facet: [request.filter_value]},
                page=request.page,
                size=request.size,
                sort=request.sort,
                source=f"search-filter:{facet}",
            )
        )

    # ── Date ranges ───────────────────────────────────────────────────────────

    async def items_by_date_range(
        self,
        date_range: DateRange,
        page: int = 0,
        size: int = 20,
        sort: str | None = None,
    ) -> SearchResult:
        """
        Items issued between two years.

        If the range-filtered search fails, an unfiltered search with the same
        paging is returned instead (source "date-range-unfiltered"); it is not
        restricted to the requested years.
        """
        request = BrowseRequest(
            index_type=IndexType.DATEISSUED,
            filter_value=f"{date_range.start_year}-{date_range.end_year}",
            page=page,
            size=size,
            sort=sort,
        )
        strategies = [
            Strategy("date-range", partial(self._items_in_range, date_range)),
            Strategy("date-range-unfiltered", self._items_unfiltered),
        ]
        try:
            resolution = await run_strategies(
                request, strategies, label="browse-items:dateissued"
            )
        except StrategiesExhausted as e:
            raise BrowseUnavailableError(
                IndexType.DATEISSUED.value,
                value=request.filter_value,
                last_error=e.last_error,
                attempts=[name for name, _ in e.skipped],
            ) from e

        if resolution.strategy == "date-range-unfiltered":
            logger.warning(
                f"Year range {request.filter_value} could not be applied, "
                f"returning unfiltered results"
            )
        return resolution.value

    async def _items_in_range(
        self, date_range: DateRange, request: BrowseRequest
    ) -> SearchResult | Skip:
        return await attempt(
            self.search.search_with_facets(
                "*",
                page=request.page,
                size=request.size,
                sort=request.sort,
                filters=[range_filter(date_range)],
                source="date-range",
            )
        )

    async def _items_unfiltered(self, request: BrowseRequest) -> SearchResult | Skip:
        return await attempt(
            self.search.search_with_facets(
                "*",
                page=request.page,
                size=request.size,
                sort=request.sort,
                use_cache=False,
                source="date-range-unfiltered",
            )
        )
