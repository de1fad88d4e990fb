"""
Sort stage
==========

Orders a filtered list of campaigns by a named sort key and a direction.

Each sort key has three parts:
- an optional *pin* group that is fixed regardless of direction
  (trending campaigns first for `trending`, expired campaigns last for
  `ending_soon`),
- a *primary* value that `direction` applies to (`desc` = larger first),
- fixed *tie-breaks* (always larger first) that direction never touches.

Anything still tied keeps its input order, because the sort is a stable
merge sort. The input list is never modified.

An unknown sort key is not an error: the input order is returned unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from .dsa import merge_sort
from .models import Campaign

logger = structlog.get_logger(__name__)

DIRECTIONS = ("asc", "desc")


class SortError(ValueError):
    pass


@dataclass(frozen=True)
class SortKey:
    name: str
    label: str
    primary: Callable[[Campaign], float]
    natural: str = "desc"
    # pin(c, now) -> 0 for the top group, 1 for the bottom group
    pin: Optional[Callable[[Campaign, datetime], int]] = None
    # when False, records in the bottom pin group ignore `primary`
    rank_pinned_by_primary: bool = True
    tie_breaks: Tuple[Callable[[Campaign], float], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SortState:
    sort_by: str = "trending"
    direction: str = "desc"

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise SortError(f"direction must be 'asc' or 'desc', got {self.direction!r}")

    def flipped(self) -> "SortState":
        return SortState(self.sort_by, "asc" if self.direction == "desc" else "desc")

    @classmethod
    def natural(cls, sort_by: str) -> "SortState":
        """SortState using the key's default direction (desc for unknown keys)."""
        return cls.canonical(sort_by)

    @classmethod
    def canonical(cls, sort_by: str, direction: Optional[str] = None) -> "SortState":
        """Resolve an alias into its key name, so `flipped()` always reorders.

        `oldest` becomes `recently_launched` ascending whatever `direction`
        says. Unknown keys are kept as given.
        """
        key, forced = resolve_key(sort_by)
        if key is None:
            return cls(sort_by, direction or "desc")
        return cls(key.name, forced or direction or key.natural)


def _ts(d: datetime) -> float:
    return d.timestamp()


SORT_KEYS: Dict[str, SortKey] = {
    "trending": SortKey(
        name="trending", label="Trending",
        primary=lambda c: c.view_count,
        pin=lambda c, now: 0 if c.trending else 1,
        tie_breaks=(lambda c: c.donor_count,),
    ),
    "popular": SortKey(
        name="popular", label="Most Popular",
        primary=lambda c: c.donor_count,
        tie_breaks=(lambda c: c.view_count,),
    ),
    "ending_soon": SortKey(
        name="ending_soon", label="Ending Soon",
        primary=lambda c: _ts(c.end_date),
        natural="asc",
        pin=lambda c, now: 1 if c.is_expired(now) else 0,
        rank_pinned_by_primary=False,
        tie_breaks=(lambda c: _ts(c.created_at),),
    ),
    "most_funded": SortKey(
        name="most_funded", label="Most Funded",
        primary=lambda c: c.current_amount,
        tie_breaks=(lambda c: c.donor_count,),
    ),
    "recently_launched": SortKey(
        name="recently_launched", label="Recently Launched",
        primary=lambda c: _ts(c.created_at),
        tie_breaks=(lambda c: c.view_count,),
    ),
    "funding_goal": SortKey(
        name="funding_goal", label="Funding Goal",
        primary=lambda c: c.funding_goal,
        tie_breaks=(lambda c: c.current_amount,),
    ),
    "progress": SortKey(
        name="progress", label="Progress",
        primary=lambda c: c.percent_funded,
        tie_breaks=(lambda c: c.donor_count,),
    ),
}

# alias -> (key name, forced direction or None)
ALIASES: Dict[str, Tuple[str, Optional[str]]] = {
    "newest": ("recently_launched", None),
    "oldest": ("recently_launched", "asc"),
    "deadline": ("ending_soon", None),
}


def resolve_key(sort_by: str) -> Tuple[Optional[SortKey], Optional[str]]:
    """Look up a sort key by name or alias. Returns (None, None) if unknown."""
    name = (sort_by or "").lower().strip()
    if name in ALIASES:
        target, forced = ALIASES[name]
        return SORT_KEYS[target], forced
    return SORT_KEYS.get(name), None


def _make_key(sort_key: SortKey, direction: str, now: datetime) -> Callable[[Campaign], tuple]:
    sign = -1.0 if direction == "desc" else 1.0

    def key(c: Campaign) -> tuple:
        group = sort_key.pin(c, now) if sort_key.pin else 0
        if group and not sort_key.rank_pinned_by_primary:
            primary = 0.0
        else:
            primary = sign * float(sort_key.primary(c))
        return (group, primary) + tuple(-float(tb(c)) for tb in sort_key.tie_breaks)

    return key


def sort_campaigns(
    campaigns: Sequence[Campaign],
    sort: SortState,
    now: Optional[datetime] = None,
) -> List[Campaign]:
    """Return a new list ordered according to `sort`."""
    sort_key, forced = resolve_key(sort.sort_by)
    if sort_key is None:
        logger.warning("Unknown sort key, keeping filtered order", sort_by=sort.sort_by)
        return list(campaigns)
    direction = forced or sort.direction
    return merge_sort(campaigns, key=_make_key(sort_key, direction, now or datetime.now()))
