"""
Filter stage
============

Reduces a catalog to the campaigns matching a `FilterState`.

Rules:
- AND across dimensions (category, status, funding range, location, search)
- OR inside a multi-select dimension (any selected category matches)
- an empty / default dimension does not filter anything
- catalog order is preserved; "no results" is an empty list

`FilterState` is an immutable value object. The `toggle_*` / `with_*`
helpers return a new state, so callers can compare old and new states to
decide when pagination must be reset.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .dsa import intersect_sorted, union_many
from .indices import Indices, all_positions, build_indices
from .models import CATEGORIES, STATUSES, Campaign
from .query_lang import parse_search

ALL_LOCATIONS = "All Locations"
DEFAULT_FUNDING_RANGE: Tuple[float, float] = (0, 1_000_000)


class FilterError(ValueError):
    pass


@dataclass(frozen=True)
class FilterState:
    categories: FrozenSet[str] = field(default_factory=frozenset)
    statuses: FrozenSet[str] = field(default_factory=frozenset)
    funding_range: Tuple[float, float] = DEFAULT_FUNDING_RANGE
    location: str = ALL_LOCATIONS
    search_query: str = ""

    # ---------------- Updates (return new states) ----------------
    def toggle_category(self, category: str) -> "FilterState":
        if category not in CATEGORIES:
            raise FilterError(f"Unknown category: {category!r}. Expected one of {', '.join(CATEGORIES)}")
        return replace(self, categories=self.categories ^ {category})

    def toggle_status(self, status: str) -> "FilterState":
        if status not in STATUSES:
            raise FilterError(f"Unknown status: {status!r}. Expected one of {', '.join(STATUSES)}")
        return replace(self, statuses=self.statuses ^ {status})

    def with_location(self, location: str) -> "FilterState":
        return replace(self, location=location or ALL_LOCATIONS)

    def with_funding_range(self, lo: float, hi: float) -> "FilterState":
        if lo < 0 or hi < 0:
            raise FilterError("Funding range bounds must be non-negative")
        if lo > hi:
            raise FilterError(f"Funding range min ({lo}) is greater than max ({hi})")
        return replace(self, funding_range=(lo, hi))

    def with_search_query(self, query: str) -> "FilterState":
        return replace(self, search_query=query or "")

    def cleared(self) -> "FilterState":
        """Reset every filter to its default, keeping the search query."""
        return FilterState(search_query=self.search_query)

    # ---------------- Derived ----------------
    @property
    def funding_range_active(self) -> bool:
        return tuple(self.funding_range) != tuple(DEFAULT_FUNDING_RANGE)

    @property
    def location_active(self) -> bool:
        return self.location != ALL_LOCATIONS


def active_filter_count(filters: FilterState) -> int:
    """Number shown on the "Filters" badge. The search query is not counted."""
    return (
        len(filters.categories)
        + len(filters.statuses)
        + (1 if filters.location_active else 0)
        + (1 if filters.funding_range_active else 0)
    )


# ---------------- Predicates ----------------
def matches_category(c: Campaign, categories: FrozenSet[str]) -> bool:
    return not categories or c.category in categories


def matches_status(c: Campaign, statuses: FrozenSet[str]) -> bool:
    return not statuses or c.status in statuses


def matches_funding_range(c: Campaign, funding_range: Tuple[float, float]) -> bool:
    lo, hi = funding_range
    return lo <= c.funding_goal <= hi


def matches_location(c: Campaign, location: str) -> bool:
    if location == ALL_LOCATIONS:
        return True
    if c.location is None:
        return False
    return c.location.city == location or c.location.state == location


def matches(c: Campaign, filters: FilterState) -> bool:
    """Plain scan version of `filter_campaigns` for a single record."""
    if not matches_category(c, filters.categories):
        return False
    if not matches_status(c, filters.statuses):
        return False
    if filters.funding_range_active and not matches_funding_range(c, filters.funding_range):
        return False
    if not matches_location(c, filters.location):
        return False
    return parse_search(filters.search_query).matches(c)


# ---------------- Stage ----------------
def filter_campaigns(
    catalog: Sequence[Campaign],
    filters: FilterState,
    index: Optional[Indices] = None,
) -> List[Campaign]:
    """Return the campaigns satisfying every active predicate, in catalog order.

    Category, status and location go through the index (sorted position
    lists); the funding range and search query are checked by scanning the
    remaining candidates.
    """
    idx = index if index is not None else build_indices(catalog)
    if idx.size != len(catalog):
        raise FilterError("Index was built for a different catalog")

    positions = all_positions(idx)
    if filters.categories:
        positions = intersect_sorted(positions, union_many(idx.by_category.get(k, []) for k in sorted(filters.categories)))
    if filters.statuses:
        positions = intersect_sorted(positions, union_many(idx.by_status.get(k, []) for k in sorted(filters.statuses)))
    if filters.location_active:
        positions = intersect_sorted(positions, idx.by_location.get(filters.location, []))

    query = parse_search(filters.search_query)
    check_range = filters.funding_range_active
    out: List[Campaign] = []
    for pos in positions:
        c = catalog[pos]
        if check_range and not matches_funding_range(c, filters.funding_range):
            continue
        if not query.is_empty and not query.matches(c):
            continue
        out.append(c)
    return out
