"""
DSpace API resources built on the service layer.
"""

from dspace_client.datasource.base import BaseResource
from dspace_client.datasource.browse import BrowseResource
from dspace_client.datasource.content import (
    BitstreamsResource,
    CollectionsResource,
    CommunitiesResource,
    ItemsResource,
)
from dspace_client.datasource.models import (
    BrowseEntries,
    BrowseEntry,
    BrowseRequest,
    DateRange,
    FacetValue,
    IndexType,
    ItemStats,
    ItemSummary,
    RepositorySummary,
    SearchResult,
    SiteStats,
)
from dspace_client.datasource.search import SearchResource
from dspace_client.datasource.statistics import StatisticsResource

__all__ = [
    "BaseResource",
    "BrowseResource",
    "SearchResource",
    "StatisticsResource",
    "CommunitiesResource",
    "CollectionsResource",
    "ItemsResource",
    "BitstreamsResource",
    "BrowseEntries",
    "BrowseEntry",
    "BrowseRequest",
    "DateRange",
    "FacetValue",
    "IndexType",
    "ItemStats",
    "ItemSummary",
    "RepositorySummary",
    "SearchResult",
    "SiteStats",
]
