"""
Search suggestions
==================

While the user types, the search box offers up to three kinds of
suggestions:

- projects whose title, description or creator name contain the text
- categories whose label or description contain the text
- creators (unique display names, first-seen order) containing the text

Queries shorter than two characters give no suggestions.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .indices import Indices, build_indices
from .models import CATEGORY_LABELS, Campaign

MIN_QUERY_LENGTH = 2


@dataclass(frozen=True)
class Suggestion:
    kind: str  # "project" | "category" | "creator"
    id: str
    title: str
    subtitle: str = ""


def suggest(
    catalog: Sequence[Campaign],
    query: str,
    limit_projects: int = 5,
    limit_categories: int = 3,
    limit_creators: int = 3,
    index: Optional[Indices] = None,
) -> List[Suggestion]:
    if not query or len(query) < MIN_QUERY_LENGTH:
        return []
    q = query.lower()
    out: List[Suggestion] = []

    projects = [
        c for c in catalog
        if q in c.title.lower() or q in c.description.lower() or q in c.creator.display_name.lower()
    ]
    for c in projects[:limit_projects]:
        out.append(Suggestion("project", c.id, c.title, f"by {c.creator.display_name}"))

    categories = [
        (key, name, desc) for key, (name, desc) in CATEGORY_LABELS.items()
        if q in name.lower() or q in desc.lower()
    ]
    for key, name, desc in categories[:limit_categories]:
        out.append(Suggestion("category", key, name, desc))

    idx = index if index is not None else build_indices(catalog)
    creators = [name for name in idx.creators if q in name.lower()]
    for name in creators[:limit_creators]:
        out.append(Suggestion("creator", name, name, "Creator"))
    return out
