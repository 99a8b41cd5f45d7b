"""
Usage statistics: best-effort view/download recording and cached reads.

Recording never raises: a failed event is logged and reported as False so
that navigation is never interrupted by tracking.
"""

import asyncio
from typing import Any

from loguru import logger

from dspace_client.datasource.base import BaseResource
from dspace_client.datasource.models import ItemStats, RepositorySummary, SiteStats
from dspace_client.datasource.normalize import embedded_list, total_elements
from dspace_client.datasource.security import is_valid_uuid

VIEW_EVENTS_PATH = "/statistics/viewevents"
USAGE_REPORTS_PATH = "/statistics/usagereports/search/object"


def _report_total(reports: list[Any], report_type: str, field: str) -> int:
    """Sum of ``field`` over the points of the first report of a type."""
    for report in reports:
        if not isinstance(report, dict) or report.get("reportType") != report_type:
            continue
        total = 0
        for point in report.get("points") or []:
            values = point.get("values") if isinstance(point, dict) else None
            if isinstance(values, dict):
                try:
                    total += int(values.get(field) or 0)
                except (TypeError, ValueError):
                    continue
        return total
    return 0


class StatisticsResource(BaseResource):
    """View/download events and usage reports."""

    @property
    def resource_id(self) -> str:
        return "statistics"

    def _item_stats_key(self, item_id: str) -> str:
        return self.caches.stats.generate_key("item-stats", {"id": item_id})

    # ── Recording ─────────────────────────────────────────────────────────────

    async def record_view(self, item_id: str) -> bool:
        """Record an item view. Returns False instead of raising on failure."""
        return await self._record_event(item_id, "item", item_id)

    async def record_download(
        self, bitstream_id: str, item_id: str | None = None
    ) -> bool:
        """Record a bitstream download; refreshes the owning item's stats if given."""
        return await self._record_event(bitstream_id, "bitstream", item_id)

    async def _record_event(
        self, target_id: str, target_type: str, item_id: str | None
    ) -> bool:
        if not is_valid_uuid(target_id):
            logger.debug(f"Skipping {target_type} event for invalid id {target_id!r}")
            return False

        payload = {"targetId": target_id, "targetType": target_type}

        try:
            await self.client.request(VIEW_EVENTS_PATH, method="POST", json_data=payload)
        except Exception as e:
            logger.debug(f"{target_type} event as JSON failed ({e}), retrying as params")
            try:
                await self.client.request(VIEW_EVENTS_PATH, params=payload, method="POST")
            except Exception as e:
                logger.warning(f"Failed to record {target_type} event for {target_id}: {e}")
                return False

        if item_id and is_valid_uuid(item_id):
            self.caches.stats.delete(self._item_stats_key(item_id))
        return True

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_item_stats(self, item_id: str, use_cache: bool = True) -> ItemStats:
        """Views and downloads of an item; zeros when unavailable."""
        if not is_valid_uuid(item_id):
            return ItemStats()

        key = self._item_stats_key(item_id)
        if use_cache:
            cached = self.caches.stats.get(key)
            if cached is not None:
                return cached

        try:
            raw = await self.client.request(
                USAGE_REPORTS_PATH, params={"uri": f"urn:dspace:item:{item_id}"}
            )
        except Exception as e:
            logger.error(f"Failed to get item statistics for {item_id}: {e}")
            return ItemStats()

        reports = embedded_list(raw, "usagereports")
        stats = ItemStats(
            views=_report_total(reports, "TotalVisits", "views"),
            downloads=_report_total(reports, "TotalDownloads", "downloads"),
        )
        if use_cache:
            self.caches.stats.set(key, stats)
        return stats

    async def get_site_stats(self, use_cache: bool = True) -> SiteStats:
        """Site-wide visits and downloads; zeros when unavailable."""
        key = self.caches.stats.generate_key("site-stats")
        if use_cache:
            cached = self.caches.stats.get(key)
            if cached is not None:
                return cached

        try:
            raw = await self.client.request(USAGE_REPORTS_PATH, params={"uri": "site"})
        except Exception as e:
            logger.warning(f"Site statistics unavailable: {e}")
            return SiteStats()

        reports = embedded_list(raw, "usagereports")
        stats = SiteStats(
            total_visits=_report_total(reports, "TotalVisits", "views"),
            total_downloads=_report_total(reports, "TotalDownloads", "downloads"),
        )
        if use_cache:
            self.caches.stats.set(key, stats)
        return stats

    async def get_repository_summary(self, use_cache: bool = True) -> RepositorySummary:
        """Number of communities, collections and items; zeros when unavailable."""
        key = self.caches.stats.generate_key("repository-summary")
        if use_cache:
            cached = self.caches.stats.get(key)
            if cached is not None:
                return cached

        try:
            communities, collections, items = await asyncio.gather(
                self.client.request("/core/communities", params={"size": 1}),
                self.client.request("/core/collections", params={"size": 1}),
                self.client.request("/core/items", params={"size": 1}),
            )
        except Exception as e:
            logger.error(f"Failed to get repository summary: {e}")
            return RepositorySummary()

        summary = RepositorySummary(
            communities=total_elements(communities),
            collections=total_elements(collections),
            items=total_elements(items),
        )
        if use_cache:
            self.caches.stats.set(key, summary)
        return summary

    def clear_cache(self) -> None:
        self.caches.stats.clear()
        logger.debug("Statistics cache cleared")
