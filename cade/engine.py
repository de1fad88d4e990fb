"""
Core engine (CADE)
==================

This is the heart of the project. CADE works like a tiny in-memory
"query engine" for a campaign discovery page:

1) Catalog -> list of Campaign records (immutable)
2) Filter  -> campaigns matching the FilterState (index assisted)
3) Sort    -> ordered copy according to the SortState
4) Window  -> the first `page_size * page` campaigns, plus `has_more`

`compute_view` runs the whole pipeline as one pure function of
(catalog, filters, sort, page). It holds no state, so it can be called from
any number of threads or requests at once.

`DiscoverySession` is the stateful wrapper used by the CLI (and any other
UI): it keeps the current filters, sort and page, resets the page whenever
filters or sort change, and recomputes the view on demand.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
import csv
import json

import structlog

from .config import EngineConfig
from .filters import FilterState, active_filter_count, filter_campaigns
from .formatting import format_currency
from .indices import Indices, build_indices
from .models import Campaign
from .pagination import DEFAULT_PAGE_SIZE, Paginator, window
from .sorting import SortState, sort_campaigns

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DiscoveryView:
    """What the UI renders for one state of the discovery page."""
    displayed: List[Campaign]
    has_more: bool
    total_matched: int
    active_filter_count: int
    page: int
    page_size: int

    @property
    def is_empty(self) -> bool:
        return self.total_matched == 0


def matched_campaigns(
    catalog: Sequence[Campaign],
    filters: FilterState,
    sort: SortState,
    *,
    now: Optional[datetime] = None,
    index: Optional[Indices] = None,
) -> List[Campaign]:
    """Filter + sort, without pagination."""
    filtered = filter_campaigns(catalog, filters, index=index)
    return sort_campaigns(filtered, sort, now=now)


def compute_view(
    catalog: Sequence[Campaign],
    filters: FilterState,
    sort: SortState,
    page: int = 1,
    *,
    now: Optional[datetime] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    index: Optional[Indices] = None,
) -> DiscoveryView:
    ordered = matched_campaigns(catalog, filters, sort, now=now, index=index)
    win = window(ordered, page, page_size)
    return DiscoveryView(
        displayed=win.displayed,
        has_more=win.has_more,
        total_matched=len(ordered),
        active_filter_count=active_filter_count(filters),
        page=page,
        page_size=page_size,
    )


@dataclass
class DiscoverySession:
    """Interactive discovery state over one catalog snapshot.

    Filters and sort are replaced (never edited in place); every change
    resets pagination to page 1 and aborts a pending asynchronous load.
    """
    catalog: List[Campaign]
    config: EngineConfig = field(default_factory=EngineConfig)
    # fixed reference time for time-based sorting; None means "wall clock"
    now: Optional[datetime] = None
    # Stores CLI commands (for reproducibility of exports)
    command_log: List[str] = field(default_factory=list)
    filters: FilterState = field(default_factory=FilterState, init=False)
    sort: SortState = field(default_factory=SortState, init=False)
    idx: Indices = field(init=False)
    paginator: Paginator = field(init=False)
    # live slider value; only `commit_funding_range` moves it into `filters`
    draft_range: Tuple[float, float] = field(init=False)

    def __post_init__(self) -> None:
        self.idx = build_indices(self.catalog)
        self.paginator = Paginator(self.config.page_size)
        self.draft_range = self.filters.funding_range

    @property
    def page(self) -> int:
        return self.paginator.page

    def now_or_wall_clock(self) -> datetime:
        """The fixed reference time, or the current time when none was given."""
        return self.now or datetime.now()

    # ---------------- State changes ----------------
    def _set_filters(self, new: FilterState) -> None:
        if new == self.filters:
            return
        self.filters = new
        self.paginator.reset()
        logger.debug("Filters changed", active=active_filter_count(new), query=new.search_query)

    def _set_sort(self, new: SortState) -> None:
        if new == self.sort:
            return
        self.sort = new
        self.paginator.reset()
        logger.debug("Sort changed", sort_by=new.sort_by, direction=new.direction)

    def toggle_category(self, category: str) -> None:
        self._set_filters(self.filters.toggle_category(category))

    def toggle_status(self, status: str) -> None:
        self._set_filters(self.filters.toggle_status(status))

    def set_location(self, location: str) -> None:
        self._set_filters(self.filters.with_location(location))

    def set_search_query(self, query: str) -> None:
        self._set_filters(self.filters.with_search_query(query))

    def drag_funding_range(self, lo: float, hi: float) -> None:
        """Update the slider value only; the view does not change."""
        self.draft_range = (lo, hi)

    def commit_funding_range(self) -> None:
        lo, hi = self.draft_range
        self._set_filters(self.filters.with_funding_range(lo, hi))

    def set_funding_range(self, lo: float, hi: float) -> None:
        self.drag_funding_range(lo, hi)
        self.commit_funding_range()

    def clear_all_filters(self) -> None:
        cleared = self.filters.cleared()
        self.draft_range = cleared.funding_range
        self._set_filters(cleared)

    def set_sort(self, sort_by: str, direction: Optional[str] = None) -> None:
        self._set_sort(SortState.canonical(sort_by, direction))

    def flip_direction(self) -> None:
        self._set_sort(self.sort.flipped())

    # ---------------- Views ----------------
    def matched(self) -> List[Campaign]:
        return matched_campaigns(self.catalog, self.filters, self.sort, now=self.now_or_wall_clock(), index=self.idx)

    def view(self) -> DiscoveryView:
        v = compute_view(
            self.catalog, self.filters, self.sort, self.page,
            now=self.now_or_wall_clock(), page_size=self.paginator.page_size, index=self.idx,
        )
        logger.debug("View computed", matched=v.total_matched, displayed=len(v.displayed), page=v.page)
        return v

    def load_more(self) -> bool:
        advanced = self.paginator.load_more(len(self.matched()))
        if advanced:
            logger.info("Loaded more campaigns", page=self.page)
        return advanced

    async def load_more_async(self) -> bool:
        total = len(self.matched())
        advanced = await self.paginator.load_more_async(total, delay=self.config.load_more_delay)
        if advanced:
            logger.info("Loaded more campaigns", page=self.page)
        return advanced

    # ---------------- Export ----------------
    def _export_rows(self) -> List[dict]:
        now = self.now_or_wall_clock()
        return [
            {
                "id": c.id,
                "title": c.title,
                "category": c.category,
                "status": c.status,
                "creator": c.creator.display_name,
                "city": c.location.city if c.location else None,
                "state": c.location.state if c.location else None,
                "funding_goal": c.funding_goal,
                "current_amount": c.current_amount,
                "currency": c.currency,
                "raised": format_currency(c.current_amount, c.currency),
                "percent_funded": round(c.percent_funded, 1),
                "donor_count": c.donor_count,
                "view_count": c.view_count,
                "days_remaining": c.days_remaining(now),
                "created_at": c.created_at.isoformat(),
                "end_date": c.end_date.isoformat(),
                "featured": c.featured,
                "trending": c.trending,
                "urgent": c.urgent,
                "tags": ", ".join(c.tags),
            }
            for c in self.matched()
        ]

    def export_csv(self, path: str) -> int:
        """Write every matched campaign (current filters and sort) to CSV."""
        rows = self._export_rows()
        fieldnames = list(rows[0].keys()) if rows else ["id"]
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=fieldnames)
            w.writeheader()
            w.writerows(rows)
        logger.info("Exported CSV", path=path, rows=len(rows))
        return len(rows)

    def export_json(self, path: str) -> int:
        """Export matched campaigns as JSON, together with the query that produced them."""
        rows = self._export_rows()
        payload = {
            "filters": {
                "categories": sorted(self.filters.categories),
                "statuses": sorted(self.filters.statuses),
                "funding_range": list(self.filters.funding_range),
                "location": self.filters.location,
                "search_query": self.filters.search_query,
            },
            "sort": {"sort_by": self.sort.sort_by, "direction": self.sort.direction},
            "commands": self.command_log,
            "campaigns": rows,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        logger.info("Exported JSON", path=path, rows=len(rows))
        return len(rows)
