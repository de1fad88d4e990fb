"""
Indices (precomputed lookup tables)
===================================

CADE builds simple indices (maps from value -> list of catalog positions)
for the multi-select and location filters.

Example:
- `by_category["medical"]` gives the sorted positions of medical campaigns.
- `by_location["Colombo"]` gives positions whose city OR state is Colombo.

Positions are indices into the catalog list, so a sorted position list is
already in catalog order and filtered views keep that order for free.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Sequence
from .models import Campaign


@dataclass
class Indices:
    """Container of precomputed indices for fast filtering."""
    size: int
    by_category: Dict[str, List[int]]
    by_status: Dict[str, List[int]]
    by_location: Dict[str, List[int]]
    creators: List[str]


def build_indices(catalog: Sequence[Campaign]) -> Indices:
    """Build indices for one catalog snapshot."""
    by_category: Dict[str, List[int]] = {}
    by_status: Dict[str, List[int]] = {}
    by_location: Dict[str, List[int]] = {}
    creators: List[str] = []
    seen_creators = set()

    for pos, c in enumerate(catalog):
        by_category.setdefault(c.category, []).append(pos)
        by_status.setdefault(c.status, []).append(pos)
        if c.location is not None:
            # city and state can be equal (e.g. "Colombo"); list each position once
            for key in {c.location.city, c.location.state}:
                if key:
                    by_location.setdefault(key, []).append(pos)
        name = c.creator.display_name
        if name not in seen_creators:
            seen_creators.add(name)
            creators.append(name)

    # positions are appended in increasing order, so every list is sorted
    return Indices(
        size=len(catalog),
        by_category=by_category,
        by_status=by_status,
        by_location=by_location,
        creators=creators,
    )


def all_positions(idx: Indices) -> List[int]:
    return list(range(idx.size))
