"""
Adapters that pull data out of loosely shaped DSpace HAL responses.

Every helper tolerates missing keys and wrong types by returning empty
values, so a partial response reads as "no data" instead of crashing.
"""

from typing import Any

from dspace_client.datasource.models import (
    BrowseEntry,
    FacetValue,
    ItemSummary,
    SearchResult,
)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_str(value: Any) -> str | None:
    """Text form of a scalar field; None for missing, empty or nested values."""
    if value is None or value == "" or isinstance(value, (dict, list)):
        return None
    return str(value)


def embedded(response: Any) -> dict[str, Any]:
    return _as_dict(_as_dict(response).get("_embedded"))


def embedded_list(response: Any, *keys: str) -> list[Any]:
    """First list found under ``_embedded`` for any of ``keys``."""
    block = embedded(response)
    for key in keys:
        value = block.get(key)
        if isinstance(value, list):
            return value
    return []


def page_info(response: Any) -> tuple[int, int, int] | None:
    """
    (totalElements, totalPages, number) from the response page block.

    Search responses nest the block under ``_embedded.searchResult``.
    Returns None when no page block exists.
    """
    page = _as_dict(response).get("page")
    if not isinstance(page, dict):
        page = _as_dict(embedded(response).get("searchResult")).get("page")
    if not isinstance(page, dict):
        return None
    return (
        _as_int(page.get("totalElements")),
        _as_int(page.get("totalPages")),
        _as_int(page.get("number")),
    )


def total_elements(response: Any) -> int:
    info = page_info(response)
    return info[0] if info else 0


def has_data(rows: list[Any], response: Any) -> bool:
    """A page counts as data when it has rows or declares a non-zero total."""
    return bool(rows) or total_elements(response) > 0


def get_metadata_value(
    metadata: dict[str, Any] | None, field: str, multiple: bool = False
) -> Any:
    """Value(s) of a metadata field: first value, or all values if multiple."""
    values = _as_dict(metadata).get(field)
    if not isinstance(values, list):
        values = []
    values = [v.get("value") for v in values if isinstance(v, dict)]
    if multiple:
        return values
    return values[0] if values else None


def _link(links: Any, name: str) -> str | None:
    return _as_str(_as_dict(_as_dict(links).get(name)).get("href"))


def get_thumbnail_url(item: Any) -> str | None:
    """Thumbnail link advertised by the API, or None. Never guesses a URL."""
    item = _as_dict(item)
    if not item:
        return None

    href = _link(item.get("_links"), "thumbnail")
    if href:
        return href

    indexable = _as_dict(item.get("indexableObject"))
    href = _link(indexable.get("_links"), "thumbnail")
    if href:
        return href

    # Embedded thumbnail bitstream (embed=thumbnail)
    thumbnail = _as_dict(embedded(item).get("thumbnail"))
    href = _link(thumbnail.get("_links"), "content")
    if href:
        return href

    return _as_str(get_metadata_value(item.get("metadata"), "dc.identifier.thumbnail"))


def to_browse_entry(raw: Any) -> BrowseEntry | None:
    """Browse entry or facet value → BrowseEntry."""
    raw = _as_dict(raw)
    label = _as_str(raw.get("label"))
    text = _as_str(raw.get("value")) or label
    if text is None:
        return None
    return BrowseEntry(
        value=text,
        label=label or text,
        count=_as_int(raw.get("count")),
        authority_key=_as_str(raw.get("authorityKey")) or _as_str(raw.get("authority")),
    )


def to_browse_entries(rows: list[Any]) -> list[BrowseEntry]:
    entries = (to_browse_entry(row) for row in rows)
    return [entry for entry in entries if entry is not None]


def to_facet_value(raw: Any) -> FacetValue | None:
    raw = _as_dict(raw)
    label = _as_str(raw.get("label")) or _as_str(raw.get("value"))
    if label is None:
        return None
    return FacetValue(
        label=label,
        count=_as_int(raw.get("count")),
        authority_key=_as_str(raw.get("authorityKey")),
    )


def facet_values(block: Any) -> list[Any]:
    """Raw values of a facet block (``_embedded.values`` or ``values``)."""
    values = embedded_list(block, "values")
    if not values:
        values = _as_dict(block).get("values")
    return values if isinstance(values, list) else []


def find_facet(response: Any, name: str) -> list[Any]:
    """Raw values of the facet named ``name`` inside a search response."""
    facets = embedded_list(response, "facets")
    if not facets:
        facets = embedded_list(embedded(response).get("searchResult"), "facets")
    for block in facets:
        if _as_dict(block).get("name") == name:
            return facet_values(block)
    return []


def search_objects(response: Any) -> list[Any]:
    """Result objects of a discovery search response."""
    search_result = embedded(response).get("searchResult")
    objects = embedded_list(search_result, "objects")
    if objects:
        return objects
    return embedded_list(response, "objects", "items")


def to_item_summary(raw: Any) -> ItemSummary | None:
    """Item, or search-result wrapper around an item → ItemSummary."""
    raw = _as_dict(raw)
    item = _as_dict(embedded(raw).get("indexableObject")) or _as_dict(
        raw.get("indexableObject")
    )
    if not item:
        item = raw
    item_id = _as_str(item.get("uuid")) or _as_str(item.get("id"))
    if item_id is None:
        return None
    metadata = _as_dict(item.get("metadata"))
    return ItemSummary(
        id=item_id,
        name=_as_str(item.get("name"))
        or _as_str(get_metadata_value(metadata, "dc.title"))
        or "",
        handle=_as_str(item.get("handle")),
        type=_as_str(item.get("type")),
        metadata=metadata,
        thumbnail_url=get_thumbnail_url(item) or get_thumbnail_url(raw),
    )


def to_item_summaries(rows: list[Any]) -> list[ItemSummary]:
    items = (to_item_summary(row) for row in rows)
    return [item for item in items if item is not None]


def extract_facets(response: Any) -> dict[str, list[FacetValue]]:
    """All facet blocks of a search response, keyed by facet name."""
    facets = embedded_list(response, "facets")
    result: dict[str, list[FacetValue]] = {}
    for block in facets:
        name = _as_str(_as_dict(block).get("name"))
        if name is None:
            continue
        values = (to_facet_value(v) for v in facet_values(block))
        result[name] = [v for v in values if v is not None]
    return result


def to_search_result(response: Any, source: str = "search") -> SearchResult:
    """Discovery search or browse-items response → SearchResult."""
    rows = search_objects(response)
    total, pages, number = page_info(response) or (len(rows), 1 if rows else 0, 0)
    return SearchResult(
        items=to_item_summaries(rows),
        total_elements=total,
        total_pages=pages,
        page=number,
        facets=extract_facets(response),
        source=source,
    )
