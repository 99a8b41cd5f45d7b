"""
Query strings for the discovery search endpoint.

DSpace reads facet filters as ``f.<facet>=<value>,<operator>`` and splits on
the literal comma, so values are percent-encoded but the separator never is.
Multiple values for one facet become repeated parameters.
"""

from collections.abc import Iterable, Mapping, Set
from typing import Any
from urllib.parse import quote_plus

from dspace_client.datasource.security import sanitize_search_query
from dspace_client.services.errors import InvalidInputError

FacetFilters = Mapping[str, Any]

_SCALARS = (str, int, float)


def normalize_facets(facets: FacetFilters | None) -> list[tuple[str, list[str]]]:
    """
    Validate a facet filter mapping and flatten it to (name, values) pairs.

    A value may be a single scalar or a list/tuple/set of scalars. Sets are
    sorted so that equal filter sets produce equal query strings. Facets
    without values are dropped.
    """
    if not facets:
        return []
    if not isinstance(facets, Mapping):
        raise InvalidInputError(f"Facet filters must be a mapping, got {type(facets).__name__}")

    normalized: list[tuple[str, list[str]]] = []
    for name, values in facets.items():
        if not isinstance(name, str) or not name:
            raise InvalidInputError(f"Invalid facet name: {name!r}")

        if values is None:
            continue
        if isinstance(values, _SCALARS) and not isinstance(values, bool):
            members = [values]
        elif isinstance(values, Set):
            members = sorted(values, key=str)
        elif isinstance(values, (list, tuple)):
            members = list(values)
        else:
            raise InvalidInputError(
                f"Unsupported value for facet '{name}': {type(values).__name__}"
            )

        for member in members:
            if not isinstance(member, _SCALARS) or isinstance(member, bool):
                raise InvalidInputError(
                    f"Unsupported value for facet '{name}': {member!r}"
                )

        cleaned = [str(m) for m in members if str(m) != ""]
        if cleaned:
            normalized.append((name, cleaned))

    return normalized


def has_active_facets(facets: FacetFilters | None) -> bool:
    return bool(normalize_facets(facets))


def facet_filter(name: str, value: str, operator: str = "equals") -> str:
    """One ``f.<name>=<encoded value>,<operator>`` fragment."""
    return f"{quote_plus(f'f.{name}')}={quote_plus(value, safe='')},{operator}"


def _param(name: str, value: Any) -> str:
    return f"{quote_plus(name)}={quote_plus(str(value), safe='')}"


def build_search_query(
    query: str | None = None,
    facets: FacetFilters | None = None,
    *,
    dso_type: str | None = "item",
    embed: str | None = "thumbnail",
    page: int | None = None,
    size: int | None = None,
    sort: str | None = None,
    scope: str | None = None,
    filters: Iterable[tuple[str, str]] = (),
) -> str:
    """
    Build the query string for ``/discover/search/objects``.

    Args:
        query: Free text, sanitized before encoding
        facets: Facet name -> selected value(s)
        dso_type: Resource type constraint
        embed: Embedded relation to request (thumbnail by default)
        page, size, sort, scope: Paging, sorting and scoping
        filters: Extra (facet, value) pairs emitted like facet filters

    Raises:
        InvalidInputError: For unsupported facet shapes
    """
    parts: list[str] = []

    if query is not None:
        parts.append(_param("query", sanitize_search_query(query)))
    if dso_type:
        parts.append(_param("dsoType", dso_type))
    if embed:
        parts.append(_param("embed", embed))
    if page is not None:
        parts.append(_param("page", page))
    if size is not None:
        parts.append(_param("size", size))
    if sort:
        parts.append(_param("sort", sort))
    if scope:
        parts.append(_param("scope", scope))

    for name, values in normalize_facets(facets):
        parts.extend(facet_filter(name, value) for value in values)

    for name, value in filters:
        parts.append(facet_filter(name, value))

    return "&".join(parts)
