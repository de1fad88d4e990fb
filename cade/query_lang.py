"""
Search box syntax
=================

The discovery search box accepts free text plus two field-scoped forms:

- `category:<text>`  -> substring match on the campaign category
- `creator:<text>`   -> substring match on the creator display name
- anything else      -> substring match on title, description,
                        creator name or category

Matching is case-insensitive. An empty (or whitespace-only) query matches
every campaign.

This file provides:
- `parse_search` (text -> SearchQuery)
- `SearchQuery.matches` (the predicate used by the filter stage)
"""

from __future__ import annotations
from dataclasses import dataclass
import re

from .models import Campaign

SCOPES = ("all", "category", "creator")

# scope prefix must open the query; whatever follows is the search term
_SCOPED_RE = re.compile(r"^(?P<scope>category|creator):(?P<term>.*)$", re.DOTALL)


@dataclass(frozen=True)
class SearchQuery:
    scope: str
    term: str

    @property
    def is_empty(self) -> bool:
        return self.scope == "all" and not self.term

    def matches(self, c: Campaign) -> bool:
        t = self.term
        if self.scope == "category":
            return t in c.category.lower()
        if self.scope == "creator":
            return t in c.creator.display_name.lower()
        if not t:
            return True
        return (
            t in c.title.lower()
            or t in c.description.lower()
            or t in c.creator.display_name.lower()
            or t in c.category.lower()
        )


def parse_search(text: str) -> SearchQuery:
    """Turn raw search box text into a SearchQuery.

    The scoped forms are checked on the lower-cased query before trimming,
    so `"  category:x"` is a general search for that literal text.
    """
    if not text or not text.strip():
        return SearchQuery(scope="all", term="")
    query = text.lower()
    m = _SCOPED_RE.match(query)
    if m:
        return SearchQuery(scope=m.group("scope"), term=m.group("term").strip())
    return SearchQuery(scope="all", term=query.strip())
