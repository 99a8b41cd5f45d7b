"""
Normalized result types returned by the datasource resources.

Whatever endpoint or API version produced the data, callers only ever see
these models.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class IndexType(str, Enum):
    """User-facing browse indexes."""

    AUTHOR = "author"
    SUBJECT = "subject"
    DATEISSUED = "dateissued"
    TYPE = "type"
    PUBLISHER = "publisher"
    TITLE = "title"


class IndexDefinition(BaseModel):
    """Backend names for one browse index."""

    index: IndexType
    candidates: tuple[str, ...]  # first match wins
    facet: str


# Browse index names differ between DSpace deployments and versions
INDEX_DEFINITIONS: dict[IndexType, IndexDefinition] = {
    IndexType.AUTHOR: IndexDefinition(
        index=IndexType.AUTHOR,
        candidates=("author", "authors", "contributor"),
        facet="author",
    ),
    IndexType.SUBJECT: IndexDefinition(
        index=IndexType.SUBJECT,
        candidates=("subject", "subjects", "srsc"),
        facet="subject",
    ),
    IndexType.DATEISSUED: IndexDefinition(
        index=IndexType.DATEISSUED,
        candidates=("dateissued", "dateIssued", "date"),
        facet="dateIssued",
    ),
    IndexType.TYPE: IndexDefinition(
        index=IndexType.TYPE,
        candidates=("type", "itemtype", "dctype"),
        facet="itemtype",
    ),
    IndexType.PUBLISHER: IndexDefinition(
        index=IndexType.PUBLISHER,
        candidates=("publisher", "publishers"),
        facet="publisher",
    ),
    IndexType.TITLE: IndexDefinition(
        index=IndexType.TITLE,
        candidates=("title",),
        facet="title",
    ),
}


class BrowseRequest(BaseModel):
    """One logical browse request."""

    index_type: IndexType
    filter_value: str = ""
    page: int = 0
    size: int = 20
    sort: str | None = None

    def paging(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "size": self.size}
        if self.sort:
            params["sort"] = self.sort
        return params


class DateRange(BaseModel):
    """Year range parsed from a browse value such as '2020-2025'."""

    start_year: int
    end_year: int


class BrowseEntry(BaseModel):
    """A distinct value in a browse index."""

    value: str
    label: str
    count: int = 0
    authority_key: str | None = None


class BrowseEntries(BaseModel):
    """Page of browse entries."""

    index: str
    entries: list[BrowseEntry] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page: int = 0
    source: str = ""  # strategy that produced the entries


class FacetValue(BaseModel):
    """One facet bucket."""

    label: str
    count: int = 0
    authority_key: str | None = None


class ItemSummary(BaseModel):
    """Item as shown in result lists."""

    id: str
    name: str = ""
    handle: str | None = None
    type: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    thumbnail_url: str | None = None


class SearchResult(BaseModel):
    """Normalized search/browse-items envelope."""

    items: list[ItemSummary] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page: int = 0
    facets: dict[str, list[FacetValue]] = Field(default_factory=dict)
    source: str = ""


class ItemStats(BaseModel):
    views: int = 0
    downloads: int = 0


class SiteStats(BaseModel):
    total_visits: int = 0
    total_downloads: int = 0


class RepositorySummary(BaseModel):
    communities: int = 0
    collections: int = 0
    items: int = 0
